"""Unit tests for mapping cache persistence."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from wordpress_migrator.core.mapping_cache import (
    MappingCache,
    archive_cache,
    load_cache,
    save_cache,
)


def _populated() -> MappingCache:
    cache = MappingCache()
    cache.users["alice@example.com"] = 7
    cache.media["https://old.example.com/a.jpg"] = {
        "target_id": 3,
        "target_url": "/files/a.jpg",
        "alt": "A",
    }
    cache.terms_cat["News"] = 11
    cache.nodes["1"] = 21
    return cache


class TestMappingCache:
    def test_table_names(self):
        assert MappingCache.table_names() == (
            "users",
            "media",
            "terms_cat",
            "terms_tag",
            "nodes",
            "comments",
        )

    def test_merge_incoming_wins_and_keeps_absent_tables(self):
        cache = _populated()
        cache.merge({"users": {"alice@example.com": 8, "bob@example.com": 9}, "bogus": {"x": 1}})
        assert cache.users == {"alice@example.com": 8, "bob@example.com": 9}
        assert cache.nodes == {"1": 21}
        assert not hasattr(cache, "bogus")

    def test_total_entries(self):
        assert _populated().total_entries == 4


class TestPersistence:
    def test_save_and_load(self, tmp_path):
        path = tmp_path / "data" / "cache.json"
        assert save_cache(_populated(), path) is True
        assert not path.with_suffix(".tmp").exists()

        loaded = load_cache(path)
        assert loaded == _populated()

    def test_dry_run_never_writes(self, tmp_path):
        path = tmp_path / "cache.json"
        assert save_cache(_populated(), path, dry_run=True) is False
        assert not path.exists()

    def test_write_failure_raises(self, tmp_path, caplog):
        path = tmp_path / "cache.json"
        save_cache(MappingCache(), path)

        with patch("pathlib.Path.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                save_cache(_populated(), path)

        assert "Failed to write mapping cache" in caplog.text
        assert load_cache(path) == MappingCache()

    def test_load_missing_file(self, tmp_path):
        assert load_cache(tmp_path / "cache.json") == MappingCache()

    def test_load_corrupt_file(self, tmp_path, caplog):
        path = tmp_path / "cache.json"
        path.write_text("{not json")
        assert load_cache(path) == MappingCache()
        assert "Failed to read mapping cache" in caplog.text

    def test_load_non_dict(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text(json.dumps([1, 2, 3]))
        assert load_cache(path) == MappingCache()

    def test_load_partial_file(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text(json.dumps({"nodes": {"5": 50}}))
        cache = load_cache(path)
        assert cache.nodes == {"5": 50}
        assert cache.users == {}


class TestArchive:
    def test_archive_moves_file(self, tmp_path):
        path = tmp_path / "cache.json"
        save_cache(_populated(), path)

        destination = archive_cache(path, tmp_path / "_archive")

        assert destination is not None
        assert destination.parent == tmp_path / "_archive"
        assert destination.name.startswith("cache_")
        assert not path.exists()

    def test_archive_never_overwrites(self, tmp_path):
        archive_dir = tmp_path / "_archive"
        path = tmp_path / "cache.json"

        with patch("wordpress_migrator.core.mapping_cache.datetime") as mock_dt:
            mock_dt.now.return_value.strftime.return_value = "20240101_120000"
            save_cache(_populated(), path)
            first = archive_cache(path, archive_dir)
            save_cache(MappingCache(), path)
            second = archive_cache(path, archive_dir)

        assert first.name == "cache_20240101_120000.json"
        assert second.name == "cache_20240101_120000_2.json"
        assert json.loads(first.read_text())["nodes"] == {"1": 21}

    def test_archive_without_cache(self, tmp_path):
        assert archive_cache(tmp_path / "cache.json", tmp_path / "_archive") is None
