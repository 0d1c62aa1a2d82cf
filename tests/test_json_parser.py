"""Tests for JSON extraction from model replies."""

import pytest

from resume_pipeline.utils.json_parser import extract_json


class TestExtractJson:
    def test_direct_json(self):
        assert extract_json('{"scores": []}') == {"scores": []}

    def test_fenced_code_block(self):
        text = '```json\n{"scores": [{"id": "a1", "score": 80}]}\n```'
        assert extract_json(text)["scores"][0]["score"] == 80

    def test_fenced_without_language_tag(self):
        assert extract_json('```\n{"key": "value"}\n```') == {"key": "value"}

    def test_embedded_in_prose(self):
        text = 'Here are the scores: {"scores": [{"id": "a1", "score": 90}]} Hope that helps.'
        assert extract_json(text) == {"scores": [{"id": "a1", "score": 90}]}

    def test_bare_array(self):
        assert extract_json('Result:\n[{"id": "a1"}]') == [{"id": "a1"}]

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError, match="Could not extract JSON"):
            extract_json("no json here at all")

    def test_empty_string_raises(self):
        with pytest.raises(ValueError):
            extract_json("")
