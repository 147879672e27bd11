"""Tests for sources.yaml loading."""

import pytest
import yaml

from newsfeed.models.article import SourceName
from newsfeed.services.ingestion.sources import (
    AdapterKind,
    SourceConfigError,
    load_sources,
)


def _write(tmp_path, data) -> str:
    path = tmp_path / "sources.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


def test_default_config_lists_all_sources_in_order():
    sources = load_sources()
    assert [s.name for s in sources] == [
        SourceName.TECHCRUNCH,
        SourceName.ARS_TECHNICA,
        SourceName.HACKER_NEWS,
    ]
    assert sources[2].kind is AdapterKind.TREE_API
    assert all(s.max_items == 30 for s in sources)


def test_defaults_applied(tmp_path):
    path = _write(
        tmp_path,
        {"sources": [{"name": "TechCrunch", "kind": "feed", "url": "https://x/feed"}]},
    )
    (source,) = load_sources(path, default_max_items=10)

    assert source.enabled is True
    assert source.max_items == 10
    assert source.categories == []


def test_disabled_source_is_kept(tmp_path):
    path = _write(
        tmp_path,
        {
            "sources": [
                {"name": "Ars Technica", "kind": "feed", "url": "https://x", "enabled": False}
            ]
        },
    )
    assert load_sources(path)[0].enabled is False


@pytest.mark.parametrize(
    "entry",
    [
        {"name": "Slashdot", "kind": "feed", "url": "https://x"},
        {"name": "TechCrunch", "kind": "scraper", "url": "https://x"},
        {"name": "TechCrunch", "kind": "feed"},
    ],
)
def test_invalid_entries_raise(tmp_path, entry):
    with pytest.raises(SourceConfigError):
        load_sources(_write(tmp_path, {"sources": [entry]}))


def test_empty_file_gives_no_sources(tmp_path):
    path = tmp_path / "sources.yaml"
    path.write_text("")
    assert load_sources(str(path)) == []


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_sources(str(tmp_path / "nope.yaml"))
