"""Tests for AI extraction response handling."""

import pytest

from variance_ingestion.adapters.extraction import (
    check_extraction_response,
    strip_code_fences,
)
from variance_kernel.exceptions import ExtractionError


class TestStripCodeFences:
    def test_fenced_csv(self):
        assert strip_code_fences("```csv\nCategory,Budget\nA,1\n```") == "Category,Budget\nA,1"

    def test_bare_fence(self):
        assert strip_code_fences("```\nA,B\n```") == "A,B"

    def test_unfenced_text_unchanged(self):
        assert strip_code_fences("Category,Budget\nA,1") == "Category,Budget\nA,1"


class TestCheckExtractionResponse:
    def test_success_returns_csv(self):
        body = check_extraction_response("  Category,Budget,Actual\nA,1,2\n ")
        assert body == "Category,Budget,Actual\nA,1,2"

    def test_error_sentinel_raises_with_reason(self, captured_logs):
        with pytest.raises(ExtractionError) as exc_info:
            check_extraction_response("ERROR: image is not a table")
        assert exc_info.value.reason == "image is not a table"
        assert exc_info.value.code == "EXTRACTION_FAILED"
        assert any(r["message"] == "extraction_reported_failure" for r in captured_logs())

    def test_error_inside_fence_detected(self):
        with pytest.raises(ExtractionError):
            check_extraction_response("```\nERROR: blurry\n```")

    def test_custom_prefix(self):
        with pytest.raises(ExtractionError, match="nope"):
            check_extraction_response("FAILED nope", error_prefix="FAILED")

    def test_prefix_only_at_start(self):
        body = check_extraction_response("Category,Budget,Actual\nERROR: x,1,2")
        assert body.startswith("Category")
