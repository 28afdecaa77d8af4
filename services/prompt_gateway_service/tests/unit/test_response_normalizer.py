"""Tests for response normalization and the structured-output fallback branch."""

from __future__ import annotations

import json

from prometheus_client import REGISTRY

from services.prompt_gateway_service.enums import ExpectedShape
from services.prompt_gateway_service.fallback_payloads import FALLBACK_CSS, FALLBACK_JS
from services.prompt_gateway_service.response_normalizer import normalize, strip_code_fence


def _fallback_count(shape: ExpectedShape) -> float:
    value = REGISTRY.get_sample_value(
        "prompt_gateway_normalization_fallbacks_total", {"shape": shape.value}
    )
    return value or 0.0


class TestPlainShape:
    def test_text_is_wrapped_unchanged(self) -> None:
        """Plain output is returned exactly as received."""
        raw = "```js\nconsole.log(1)\n```"

        result = normalize(raw, ExpectedShape.PLAIN)

        assert result.success is True
        assert result.processed_text == raw
        assert result.payload is None
        assert result.degraded is False

    def test_response_body_shape(self) -> None:
        """A success serializes to success and processedText only."""
        result = normalize("hello", ExpectedShape.PLAIN)

        assert result.to_response_body() == {"success": True, "processedText": "hello"}


class TestStructuredShapes:
    def test_valid_files_bundle_keeps_raw_text(self) -> None:
        """A valid bundle is parsed into payload while processedText stays the raw reply."""
        bundle = {
            "files": {"app/page.tsx": "export default function Page() {}"},
            "description": "A page",
        }
        raw = json.dumps(bundle)

        result = normalize(raw, ExpectedShape.JSON_FILES_BUNDLE)

        assert result.processed_text == raw
        assert result.payload == bundle
        assert result.degraded is False

    def test_fenced_json_is_accepted(self) -> None:
        """A ```json fence around valid JSON is not a fallback."""
        raw = '```json\n{"html": "<p>x</p>", "css": "p{}", "js": ""}\n```'

        result = normalize(raw, ExpectedShape.JSON_CODE_TRIPLE)

        assert result.degraded is False
        assert result.payload == {"html": "<p>x</p>", "css": "p{}", "js": ""}

    def test_stackblitz_config_is_preserved(self) -> None:
        """Extra stackblitzConfig keys survive validation."""
        bundle = {
            "files": {"README.md": "# hi"},
            "description": "d",
            "stackblitzConfig": {"title": "T", "template": "nextjs"},
        }

        result = normalize(json.dumps(bundle), ExpectedShape.JSON_FILES_BUNDLE)

        assert result.payload is not None
        assert result.payload["stackblitzConfig"] == {"title": "T", "template": "nextjs"}

    def test_valid_edit_bundle(self) -> None:
        """A well-formed edit bundle is parsed without fallback."""
        edit = {"files": {"a.js": "x"}, "explanation": "renamed", "changes": ["rename"]}

        result = normalize(json.dumps(edit), ExpectedShape.JSON_EDIT_BUNDLE)

        assert result.payload == edit
        assert result.degraded is False


class TestFallback:
    def test_invalid_json_files_bundle_falls_back_to_project(self) -> None:
        """Unparseable bundles become a starter project holding the raw reply in its README."""
        raw = "Here is your app: it has a header and a footer."
        before = _fallback_count(ExpectedShape.JSON_FILES_BUNDLE)

        result = normalize(raw, ExpectedShape.JSON_FILES_BUNDLE)

        assert result.success is True
        assert result.degraded is True
        assert result.payload is not None
        assert "package.json" in result.payload["files"]
        assert raw in result.payload["files"]["README.md"]
        assert json.loads(result.processed_text) == result.payload
        assert _fallback_count(ExpectedShape.JSON_FILES_BUNDLE) == before + 1

    def test_fallback_project_is_deterministic(self) -> None:
        """The same invalid reply always produces the same starter project."""
        first = normalize("not json", ExpectedShape.JSON_FILES_BUNDLE)
        second = normalize("not json", ExpectedShape.JSON_FILES_BUNDLE)

        assert first == second

    def test_invalid_code_triple_uses_raw_text_as_html(self) -> None:
        """Non-JSON code output becomes the html part with fallback css and js."""
        raw = "<div>Just some html</div>"

        result = normalize(raw, ExpectedShape.JSON_CODE_TRIPLE)

        assert result.degraded is True
        assert result.payload == {"html": raw, "css": FALLBACK_CSS, "js": FALLBACK_JS}

    def test_schema_mismatch_falls_back(self) -> None:
        """Valid JSON with the wrong keys is treated like invalid JSON."""
        raw = json.dumps({"html": "<p></p>"})

        result = normalize(raw, ExpectedShape.JSON_CODE_TRIPLE)

        assert result.degraded is True
        assert result.payload is not None
        assert result.payload["html"] == raw

    def test_json_array_falls_back(self) -> None:
        """A top-level array is not an edit bundle; its text becomes the explanation."""
        result = normalize("[1, 2, 3]", ExpectedShape.JSON_EDIT_BUNDLE)

        assert result.degraded is True
        assert result.payload == {"files": {}, "explanation": "[1, 2, 3]", "changes": []}

    def test_empty_files_mapping_falls_back(self) -> None:
        """A bundle with no files counts as invalid."""
        raw = json.dumps({"files": {}, "description": "nothing"})

        result = normalize(raw, ExpectedShape.JSON_FILES_BUNDLE)

        assert result.degraded is True


def test_strip_code_fence_leaves_unfenced_text() -> None:
    """Surrounding whitespace is trimmed and a bare fence removed."""
    assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'
    assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'
