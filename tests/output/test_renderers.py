"""Tests for the Rich stderr renderers."""

from __future__ import annotations

from patchctl.output.renderers import render_error, render_summary
from patchctl.services.result import ServiceError, ServiceResult


def _summary_result(**meta: object) -> ServiceResult:
    return ServiceResult(
        ok=True,
        op="generate_overrides",
        data={
            "count": 1,
            "groups": [
                {
                    "origin": "https://example.org/repo",
                    "raw_origins": [],
                    "entries": [{"name": "core", "path": "/src/core"}],
                },
                {"origin": "https://other.example/x", "raw_origins": [], "entries": []},
            ],
        },
        meta=dict(meta) or None,
    )


class TestRenderSummary:
    def test_table_lists_every_override(self) -> None:
        output = render_summary(_summary_result())
        assert "1 override(s) in 2 section(s)" in output
        assert "https://example.org/repo" in output
        assert "core" in output
        assert "/src/core" in output
        assert "(none)" in output

    def test_span_tree(self) -> None:
        telemetry = {
            "name": "OverrideService.generate",
            "duration_ms": 12.5,
            "children": [
                {"name": "load_source", "duration_ms": 10.0, "annotations": {"packages": 2}},
            ],
        }
        output = render_summary(_summary_result(telemetry=telemetry))
        assert "OverrideService.generate" in output
        assert "load_source" in output
        assert "packages=2" in output


class TestRenderError:
    def test_message(self) -> None:
        result = ServiceResult(
            ok=False,
            op="generate_overrides",
            error=ServiceError(
                code="SOURCE_MEMBER_NOT_FOUND",
                message="Could not find member 'core' in source packages",
                detail={"name": "core"},
            ),
        )
        assert "Could not find member 'core'" in render_error(result)
        assert "detail" not in render_error(result)
        assert "name: core" in render_error(result, verbose=True)
