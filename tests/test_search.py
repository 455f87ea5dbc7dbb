from golinks.core.schemas import GoLinkConfig, Link
from golinks.core.search import SearchIndex, flatten, matches


def _titles(entries):
    return [entry.link.title for entry in entries]


def test_flatten_keeps_file_order(sample_data):
    entries = flatten(GoLinkConfig.model_validate(sample_data))
    assert _titles(entries) == ["GitHub", "A", "Gitlab"]
    assert entries[2].group_name == "dev"
    assert entries[2].group_title == "Dev"


def test_search_is_case_insensitive(sample_data):
    index = SearchIndex(GoLinkConfig.model_validate(sample_data))
    assert _titles(index.search("git")) == ["GitHub", "Gitlab"]
    assert _titles(index.search("GITHUB")) == ["GitHub"]


def test_empty_query_returns_everything(sample_data):
    index = SearchIndex(GoLinkConfig.model_validate(sample_data))
    assert _titles(index.search("")) == ["GitHub", "A", "Gitlab"]


def test_no_match(sample_data):
    assert SearchIndex(GoLinkConfig.model_validate(sample_data)).search("zzz") == []


def test_matches_keywords_and_url():
    link = Link(title="Tracker", url="https://issues.example.com", keywords=["Bugs"])
    assert matches(link, "bug")
    assert matches(link, "issues.example")
    assert not matches(link, "wiki")


def test_markdown(sample_data):
    entry = flatten(GoLinkConfig.model_validate(sample_data))[0]
    assert entry.markdown == "[GitHub](https://github.com)"
