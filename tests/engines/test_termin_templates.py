"""Tests for the termin template provider."""

from decimal import Decimal

from studio_engines.templates import BUILT_IN_TEMPLATES, milestone_label, template_for
from studio_kernel.domain.contract import Category, MilestoneStatus


class TestBuiltInTemplates:

    def test_design_specs(self):
        milestones = template_for(Category.DESIGN)

        assert [m.spec for m in milestones] == ["DP", "50%", "30%", "Pelunasan"]

    def test_civil_specs(self):
        milestones = template_for(Category.CIVIL)

        assert [m.spec for m in milestones] == ["20%", "25%", "25%", "20%", "10%"]

    def test_interior_specs(self):
        milestones = template_for(Category.INTERIOR)

        assert [m.spec for m in milestones] == ["40%", "30%", "30%"]

    def test_labels_are_numbered(self):
        milestones = template_for(Category.CIVIL)

        assert [m.label for m in milestones] == [f"Termin {i}" for i in range(1, 6)]
        assert milestone_label(0) == "Termin 1"

    def test_skeleton_fields_empty(self):
        for category in BUILT_IN_TEMPLATES:
            for milestone in template_for(category):
                assert milestone.amount == Decimal("0")
                assert milestone.status is MilestoneStatus.UNSET
                assert milestone.payment_date is None

    def test_fresh_tuple_every_call(self):
        first = template_for(Category.DESIGN)
        second = template_for(Category.DESIGN)

        assert first == second
        assert first is not second

    def test_alias_token(self):
        assert [m.spec for m in template_for("Arsitektur")] == ["DP", "50%", "30%", "Pelunasan"]


class TestOverridesAndFallback:

    def test_override_replaces_built_in(self):
        overrides = {Category.INTERIOR: (("Booking", "50%"), ("Handover", "Pelunasan"))}

        milestones = template_for(Category.INTERIOR, overrides)

        assert [(m.label, m.spec) for m in milestones] == [
            ("Booking", "50%"),
            ("Handover", "Pelunasan"),
        ]

    def test_override_for_other_category_ignored(self):
        overrides = {Category.INTERIOR: (("Booking", "50%"),)}

        assert len(template_for(Category.CIVIL, overrides)) == 5

    def test_unknown_category_falls_back(self, captured_logs):
        milestones = template_for("landscape")

        assert len(milestones) == 1
        assert milestones[0].label == "Termin 1"
        assert milestones[0].spec == ""
        assert milestones[0].amount == Decimal("0")
        logs = captured_logs()
        assert any(
            r["message"] == "termin_template_fallback" and r["category"] == "landscape"
            for r in logs
        )
