"""Unit tests for autocat.corpus module."""

import json

import pytest

from autocat.corpus import CategoryDirectory, InMemoryCorpusReader, JsonFileCorpusReader
from autocat.exceptions import CorpusUnavailableError
from autocat.models import Category


class TestCategoryDirectory:
    """Tests for category id resolution."""

    def test_resolves_id(self, directory):
        assert directory.resolve("cat-legal") == "Legal"

    def test_name_resolves_to_itself(self, directory):
        assert directory.resolve("Finance") == "Finance"

    def test_unknown(self, directory):
        assert directory.resolve("cat-gone") == "unknown"
        assert directory.resolve(None) == "unknown"
        assert directory.resolve("") == "unknown"

    def test_from_raw(self):
        directory = CategoryDirectory.from_raw([
            {"_id": 7, "name": "Receipts"},
            {"id": "x"},
            {"name": "no id"},
        ])
        assert len(directory) == 1
        assert directory.categories == [Category(id="7", name="Receipts")]
        assert directory.resolve("7") == "Receipts"

    def test_from_file(self, test_data_dir):
        path = test_data_dir / "categories.json"
        path.write_text(json.dumps([{"id": "c1", "name": "Contracts"}]))
        assert CategoryDirectory.from_file(path).resolve("c1") == "Contracts"

    def test_from_file_not_a_list(self, test_data_dir):
        path = test_data_dir / "categories.json"
        path.write_text(json.dumps({"id": "c1"}))
        with pytest.raises(CorpusUnavailableError):
            CategoryDirectory.from_file(path)


class TestCorpusReaders:
    """Tests for the corpus readers."""

    def test_in_memory(self, sample_raw_corpus):
        records = InMemoryCorpusReader.from_raw(sample_raw_corpus).read_records()
        assert [r.data_id for r in records] == ["pdf-1", "json-1", "audio-1", "image-1"]
        assert len(records[3].annotations) == 2

    def test_json_file(self, test_data_dir, sample_raw_corpus):
        path = test_data_dir / "corpus.json"
        path.write_text(json.dumps(sample_raw_corpus + ["not a record"]))
        records = JsonFileCorpusReader(path).read_records()
        assert len(records) == 4

    def test_missing_file(self, test_data_dir):
        with pytest.raises(CorpusUnavailableError):
            JsonFileCorpusReader(test_data_dir / "missing.json").read_records()

    def test_invalid_json(self, test_data_dir):
        path = test_data_dir / "corpus.json"
        path.write_text("{not json")
        with pytest.raises(CorpusUnavailableError):
            JsonFileCorpusReader(path).read_records()
