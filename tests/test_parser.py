import json

import pytest

from smartadd.ai.parser import parse_llm_response
from smartadd.core.errors import ParseError, PipelineStage


class TestParseLLMResponse:
    def test_plain_array(self):
        assert parse_llm_response('["src/a.ts", "src/b.ts"]') == ["src/a.ts", "src/b.ts"]

    def test_fenced_json(self):
        raw = '```json\n["src/a.ts","src/missing.ts"]\n```'
        assert parse_llm_response(raw) == ["src/a.ts", "src/missing.ts"]

    def test_fence_without_language(self):
        assert parse_llm_response('```\n["a.py"]\n```') == ["a.py"]

    def test_fence_surrounded_by_prose(self):
        raw = 'Here are the matching files:\n\n```json\n["tests/a.test.ts"]\n```\n\nLet me know if you need more.'
        assert parse_llm_response(raw) == ["tests/a.test.ts"]

    def test_list_in_later_fence(self):
        raw = 'Tree I used:\n```\nproj/\n  src/\n```\nAnswer:\n```json\n["src/a.ts"]\n```'
        assert parse_llm_response(raw) == ["src/a.ts"]

    def test_list_after_non_json_fence(self):
        raw = '```python\nprint(1)\n```\n["src/a.ts"]'
        assert parse_llm_response(raw) == ["src/a.ts"]

    def test_array_embedded_in_prose(self):
        raw = 'The relevant [auth] files are ["src/auth.ts", "src/session.ts"] in my view.'
        assert parse_llm_response(raw) == ["src/auth.ts", "src/session.ts"]

    def test_empty_array_means_nothing_matched(self):
        assert parse_llm_response("[]") == []
        assert parse_llm_response("```json\n[]\n```") == []

    def test_duplicates_and_order_preserved(self):
        assert parse_llm_response('["b", "a", "b"]') == ["b", "a", "b"]

    @pytest.mark.parametrize("paths", [
        ["src/a.ts"],
        ["z.py", "a.py", "m/n/o.py"],
        ["docs/Read Me.md", "src/ünïcode.ts", "weird\\win\\path.cs"],
    ])
    def test_fenced_round_trip(self, paths):
        raw = f"```json\n{json.dumps(paths)}\n```"
        assert parse_llm_response(raw) == paths

    @pytest.mark.parametrize("raw", ["", "   ", "\n\t\n"])
    def test_rejects_empty_input(self, raw):
        with pytest.raises(ParseError):
            parse_llm_response(raw)

    @pytest.mark.parametrize("raw", [
        '{"files": ["src/a.ts"]}',
        '"src/a.ts"',
        "42",
        "null",
    ])
    def test_rejects_non_list_structures(self, raw):
        with pytest.raises(ParseError) as exc_info:
            parse_llm_response(raw)
        assert exc_info.value.raw_text == raw

    @pytest.mark.parametrize("raw", [
        '["src/a.ts", ""]',
        '["src/a.ts", 3]',
        '["src/a.ts", null]',
        '[["nested.ts"]]',
    ])
    def test_rejects_invalid_elements(self, raw):
        with pytest.raises(ParseError) as exc_info:
            parse_llm_response(raw)
        assert exc_info.value.raw_text == raw

    def test_rejects_prose_without_list(self):
        raw = "I could not find any files related to authentication."
        with pytest.raises(ParseError) as exc_info:
            parse_llm_response(raw)
        assert exc_info.value.raw_text == raw
        assert exc_info.value.stage == PipelineStage.PARSE

    def test_rejects_unterminated_array(self):
        with pytest.raises(ParseError):
            parse_llm_response('["src/a.ts", "src/b.ts"')
