"""Tests for the engine invocation tracer."""

from decimal import Decimal

from studio_engines.reconciliation import recalculate
from studio_engines.templates import template_for
from studio_engines.tracer import compute_input_fingerprint, traced_engine
from studio_kernel.domain.contract import Category


class TestFingerprint:

    def test_deterministic(self):
        kwargs = {"total": Decimal("100"), "category": Category.CIVIL}

        first = compute_input_fingerprint(("total", "category"), kwargs)
        second = compute_input_fingerprint(("total", "category"), dict(reversed(kwargs.items())))

        assert first == second
        assert len(first) == 16

    def test_differs_by_input(self):
        a = compute_input_fingerprint(("total",), {"total": Decimal("100")})
        b = compute_input_fingerprint(("total",), {"total": Decimal("101")})

        assert a != b

    def test_enum_uses_value(self):
        by_enum = compute_input_fingerprint(("category",), {"category": Category.DESIGN})
        by_token = compute_input_fingerprint(("category",), {"category": "design"})

        assert by_enum == by_token


class TestTracedEngine:

    def test_emits_trace_record(self, captured_logs):
        @traced_engine("sample_engine", "2.1", fingerprint_fields=("x",))
        def double(*, x):
            return x * 2

        assert double(x=21) == 42

        traces = [r for r in captured_logs() if r["message"] == "STUDIO_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "sample_engine"
        assert traces[0]["engine_version"] == "2.1"
        assert traces[0]["input_fingerprint"] == compute_input_fingerprint(("x",), {"x": 21})
        assert "duration_ms" in traces[0]

    def test_recalculate_is_traced(self, captured_logs):
        recalculate(template_for(Category.CIVIL), total=Decimal("1000"), category=Category.CIVIL)

        traces = [
            r for r in captured_logs()
            if r["message"] == "STUDIO_ENGINE_TRACE" and r["engine_name"] == "termin_recalculate"
        ]
        assert len(traces) == 1
        assert traces[0]["input_fingerprint"] != ""
