from __future__ import annotations

from tagrel.release.changelog import extract_next_section, update_changelog, wildcard_header

EXISTING = "## 1.x\n\n### 1.0.0\n\n* First release\n"


def test_wildcard_header() -> None:
    assert wildcard_header("2.1.0") == "2.x"
    assert wildcard_header("10.0.3") == "10.x"


class TestUpdateChangelog:
    """Tests for update_changelog."""

    def test_empty_file(self) -> None:
        result = update_changelog("", new_version="1.0.0", log="* First release", is_major=False)
        assert result == "## 1.x\n\n### 1.0.0\n\n* First release\n"

    def test_minor_goes_under_first_section(self) -> None:
        result = update_changelog(EXISTING, new_version="1.1.0", log="* Add login", is_major=False)
        assert result == "## 1.x\n\n### 1.1.0\n\n* Add login\n\n### 1.0.0\n\n* First release\n"

    def test_major_opens_new_section(self) -> None:
        result = update_changelog(EXISTING, new_version="2.0.0", log="* Drop node 10", is_major=True)
        assert result == "## 2.x\n\n### 2.0.0\n\n* Drop node 10\n\n" + EXISTING

    def test_no_section_heading_prepends(self) -> None:
        result = update_changelog("Some notes\n", new_version="0.2.0", log="* Fix", is_major=False)
        assert result == "## 0.x\n\n### 0.2.0\n\n* Fix\n\nSome notes\n"

    def test_only_first_section_is_touched(self) -> None:
        contents = "## 2.x\n\n### 2.0.0\n\n* b\n\n## 1.x\n\n### 1.0.0\n\n* a\n"
        result = update_changelog(contents, new_version="2.0.1", log="* c", is_major=False)
        assert result.count("### 2.0.1") == 1
        assert result.index("### 2.0.1") < result.index("### 2.0.0") < result.index("## 1.x")


class TestNextSection:
    """Tests for extract_next_section."""

    def test_extracts_notes(self) -> None:
        contents = "## 1.x\n\n### Next\n\n* Hand-written note\n\n### 1.0.0\n\n* First release\n"
        notes, remaining = extract_next_section(contents)
        assert notes == "* Hand-written note"
        assert remaining == "## 1.x\n\n### 1.0.0\n\n* First release\n"

    def test_missing_section(self) -> None:
        notes, remaining = extract_next_section(EXISTING)
        assert notes is None
        assert remaining == EXISTING
