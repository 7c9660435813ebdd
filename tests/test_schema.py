"""Tests for dungeon document validation."""

import copy
import json

import pytest
from jsonschema import ValidationError

from crawler.core.loader.schema import DUNGEON_SCHEMA
from crawler.core.loader.validator import document_issues, validate_document
from game.bootstrap import dungeons_dir, find_dungeon, list_dungeons, load_document


@pytest.fixture
def sample_payload():
    with open(dungeons_dir() / "sample.json", encoding="utf-8") as f:
        return json.load(f)


class TestSchemaValidation:
    """Test JSON schema validation."""

    def test_valid_schema(self, sample_payload):
        assert validate_document(sample_payload) is True

    def test_missing_required_field(self, sample_payload):
        del sample_payload["rects"]
        with pytest.raises(ValidationError):
            validate_document(sample_payload)

    def test_invalid_door_direction(self, sample_payload):
        sample_payload["doors"][0]["dir"]["x"] = 2
        with pytest.raises(ValidationError):
            validate_document(sample_payload)

    def test_note_without_position(self, sample_payload):
        del sample_payload["notes"][0]["pos"]
        with pytest.raises(ValidationError):
            validate_document(sample_payload)

    def test_extra_fields_are_allowed(self, sample_payload):
        sample_payload["notes"][0]["ref"] = "12"
        sample_payload["generator"] = "watabou"
        assert validate_document(sample_payload) is True

    def test_schema_lists_required_fields(self):
        assert set(DUNGEON_SCHEMA["required"]) == {"title", "story", "rects", "doors", "notes"}


class TestDocumentIssues:
    def test_sample_has_no_issues(self, sample_payload):
        assert document_issues(sample_payload) == []

    def test_door_without_cell(self, sample_payload):
        broken = copy.deepcopy(sample_payload)
        broken["doors"].append({"x": 20, "y": 20, "dir": {"x": 0, "y": 1}, "type": 1})
        issues = document_issues(broken)
        assert len(issues) == 1
        assert "has no matching 1x1 rect" in issues[0]

    def test_document_without_rooms(self):
        payload = {"title": "", "story": "", "rects": [], "doors": [], "notes": []}
        assert document_issues(payload) == ["Document has no rooms"]


def test_bundled_dungeons_are_valid():
    paths = list_dungeons()
    assert paths
    for path in paths:
        assert load_document(path)["title"]


def test_find_dungeon_by_name():
    assert find_dungeon("sample").name == "sample.json"
    assert find_dungeon("no-such-dungeon") is None
