"""Tests for utils/json_parser.py: layered repair and CSS fix / design issue shapes."""

import pytest

from errors import ErrorKind, ResponseParseError
from utils.json_parser import (
    extract_json_text,
    parse_css_fix_set,
    parse_design_issues,
    repair_and_parse_json,
)
from conftest import CSS_FIX_RESPONSE


class TestRepairAndParseJson:
    def test_valid_json(self):
        assert repair_and_parse_json('{"a": 1}') == {"a": 1}

    def test_markdown_code_block(self):
        assert repair_and_parse_json('```json\n{"a": [1, 2]}\n```') == {"a": [1, 2]}

    def test_prose_around_object(self):
        text = 'Here are the fixes you asked for:\n{"a": 1}\nLet me know if you need more.'
        assert repair_and_parse_json(text) == {"a": 1}

    def test_trailing_comma(self):
        assert repair_and_parse_json('{"a": [1, 2,], "b": 2,}') == {"a": [1, 2], "b": 2}

    def test_comments(self):
        text = '{"a": 1, // first\n"b": /* second */ 2}'
        assert repair_and_parse_json(text) == {"a": 1, "b": 2}

    def test_truncated_json_is_parse_failure(self):
        with pytest.raises(ResponseParseError) as exc_info:
            repair_and_parse_json('{"fixes": [{"selector": ".a", "css": "x"')
        assert exc_info.value.kind == ErrorKind.PARSE_FAILURE
        assert exc_info.value.message == "Failed to parse AI response"

    def test_extract_keeps_bare_arrays(self):
        assert extract_json_text('[{"a": 1}]') == '[{"a": 1}]'

    def test_prose_before_bare_array(self):
        text = "Here are the issues:\n[{\"a\": 1}, {\"b\": [2]}]\nHope this helps."
        assert repair_and_parse_json(text) == [{"a": 1}, {"b": [2]}]

    def test_extract_stops_at_matching_bracket(self):
        text = 'Result: {"css": "a { color: red; }"} and {"ignored": true}'
        assert extract_json_text(text) == '{"css": "a { color: red; }"}'


class TestParseCssFixSet:
    def test_full_response(self):
        fix_set = parse_css_fix_set(CSS_FIX_RESPONSE)
        assert fix_set.fixes[0].selector == ".hero img"
        assert fix_set.fixes[0].impact == "high"
        assert fix_set.media_queries[0].query == "(max-width: 480px)"
        assert fix_set.media_queries[0].rules[0].selector == "nav a"

    def test_media_queries_default_to_empty(self):
        fix_set = parse_css_fix_set(
            '{"fixes": [{"selector": "body", "css": "margin: 0;", "description": "Reset", "impact": "low"}]}'
        )
        assert fix_set.media_queries == []
        assert fix_set.fixes[0].impact == "low"

    def test_missing_impact_is_parse_failure(self):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_css_fix_set('{"fixes": [{"selector": "body", "css": "margin: 0;", "description": "Reset"}]}')
        assert "impact" in exc_info.value.details

    def test_missing_fixes_array(self):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_css_fix_set('{"mediaQueries": []}')
        assert "fixes" in exc_info.value.details

    def test_fixes_must_be_a_list(self):
        with pytest.raises(ResponseParseError):
            parse_css_fix_set('{"fixes": "max-width: 100%"}')

    def test_invalid_fix_field(self):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_css_fix_set('{"fixes": [{"selector": "", "css": "margin: 0;"}]}')
        assert "selector" in exc_info.value.details

    def test_array_instead_of_object(self):
        with pytest.raises(ResponseParseError):
            parse_css_fix_set('[{"selector": "body", "css": "margin: 0;"}]')


class TestParseDesignIssues:
    def test_issues_object(self):
        issues = parse_design_issues(
            '{"issues": [{"type": "overlap", "title": "Header overlaps hero", '
            '"description": "The fixed header covers the hero", "element": "header", '
            '"bounds": {"x": 0, "y": 0, "width": 390, "height": 80}}]}'
        )
        assert len(issues) == 1
        assert issues[0].bounds.height == 80

    def test_bare_array(self):
        issues = parse_design_issues(
            '[{"type": "spacing", "title": "Tight gutters", "description": "Cards touch"}]'
        )
        assert issues[0].element == ""
        assert issues[0].bounds is None

    def test_missing_issue_field(self):
        with pytest.raises(ResponseParseError):
            parse_design_issues('{"issues": [{"type": "overlap"}]}')

    def test_prose_before_bare_array(self):
        issues = parse_design_issues(
            'Here are the issues:\n'
            '[{"type": "overlap", "title": "Header overlap", "description": "Covers hero"}]'
        )
        assert len(issues) == 1
        assert issues[0].title == "Header overlap"

    def test_object_without_issues_is_parse_failure(self):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_design_issues('{"error": "cannot analyze"}')
        assert exc_info.value.kind == ErrorKind.PARSE_FAILURE
        assert "issues" in exc_info.value.details

    def test_empty_issues_list(self):
        assert parse_design_issues('{"issues": []}') == []
