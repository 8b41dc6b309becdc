import pytest

from treelet.core.filter import FilterEngine
from treelet.models import DownloadTarget, EntryType, FilterCriteria


def make_target(path: str, entry_type: EntryType = EntryType.DIRECTORY) -> DownloadTarget:
    """Helper function to build DownloadTarget instances for tests."""
    return DownloadTarget(path=path, type=entry_type)


@pytest.mark.parametrize("path", ["proto", "proto/v1", "build/out/deep", ""])
def test_empty_filter_descends_everywhere(path):
    """Scenario: no include terms means every folder is walked"""
    engine = FilterEngine(FilterCriteria())
    assert engine.should_descend(path) is True


def test_substring_match_anywhere_in_path():
    """Scenario: a term may match any part of the full path"""
    engine = FilterEngine(FilterCriteria(include_only=("docs",)))
    assert engine.should_descend("a/docs") is True
    assert engine.should_descend("a/mydocs2") is True
    assert engine.should_descend("docs/a/b") is True
    assert engine.should_descend("a/other") is False


def test_any_term_is_enough():
    engine = FilterEngine(FilterCriteria(include_only=("api", "v2")))
    assert engine.should_descend("proto/api") is True
    assert engine.should_descend("proto/v2") is True
    assert engine.should_descend("proto/v1") is False


def test_files_are_never_filtered():
    """Scenario: only folders are subject to the include list"""
    engine = FilterEngine(FilterCriteria(include_only=("docs",)))
    assert engine.should_include(make_target("a/readme.md", EntryType.FILE)) is True
    assert engine.should_include(make_target("a/src")) is False
    assert engine.should_include(make_target("a/docs")) is True


def test_from_string_parses_comma_list():
    criteria = FilterCriteria.from_string(" docs, api ,,")
    assert criteria.include_only == ("docs", "api")
    assert FilterCriteria.from_string("").is_empty
    assert FilterCriteria.from_string(None).is_empty


def test_describe_reports_filter_state():
    assert "No filter applied" in FilterEngine(FilterCriteria()).describe()
    described = FilterEngine(FilterCriteria(include_only=("docs", "api"))).describe()
    assert described == "Filtering: Only downloading folders that match docs, api"
