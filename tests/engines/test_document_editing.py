"""
Tests for document editing operations.

Every amount-affecting edit returns a fully recalculated document; status
edits leave amounts alone.
"""

from datetime import date
from decimal import Decimal

import pytest

from studio_engines.editing import (
    change_category,
    mark_paid,
    mark_unpaid,
    new_document,
    reset_to_template,
    set_active_milestone,
    set_area,
    set_milestone_amount,
    set_milestone_label,
    set_milestone_spec,
    set_total_value,
    set_unit_price,
)
from studio_kernel.domain.contract import Category, MilestoneStatus
from studio_kernel.exceptions import (
    DerivedTotalError,
    InvalidContractValueError,
    MilestoneIndexError,
    UnknownCategoryError,
)


def _amounts(document) -> list[Decimal]:
    return [m.amount for m in document.milestones]


@pytest.fixture
def civil_doc(hundred_million):
    return new_document(Category.CIVIL, total_value=hundred_million)


@pytest.fixture
def design_doc():
    return new_document(Category.DESIGN, area=Decimal("100"))


class TestNewDocument:

    def test_template_applied_and_recalculated(self, civil_doc):
        assert len(civil_doc.milestones) == 5
        assert sum(_amounts(civil_doc)) == Decimal("100000000")

    def test_design_gets_default_unit_price(self, design_doc):
        assert design_doc.unit_price == Decimal("200000")
        assert design_doc.total_value == Decimal("20000000")

    def test_without_total_percentages_stay_zero(self):
        document = new_document("interior")

        assert _amounts(document) == [Decimal("0")] * 3

    def test_unknown_category_rejected(self):
        with pytest.raises(UnknownCategoryError):
            new_document("landscape")

    def test_negative_total_rejected(self):
        with pytest.raises(InvalidContractValueError):
            new_document(Category.CIVIL, total_value=Decimal("-1"))


class TestTotals:

    def test_set_total_recalculates(self, civil_doc):
        updated = set_total_value(civil_doc, Decimal("50000000"))

        assert updated.milestones[0].amount == Decimal("10000000")
        assert civil_doc.milestones[0].amount == Decimal("20000000")

    def test_total_of_design_with_area_is_derived(self, design_doc):
        with pytest.raises(DerivedTotalError):
            set_total_value(design_doc, Decimal("1"))

    def test_design_without_area_accepts_total(self):
        document = new_document(Category.DESIGN)

        updated = set_total_value(document, Decimal("50000000"))

        assert _amounts(updated) == [
            Decimal("2500000"),
            Decimal("25000000"),
            Decimal("15000000"),
            Decimal("7500000"),
        ]

    def test_set_area(self, design_doc):
        updated = set_area(design_doc, Decimal("150"))

        assert updated.total_value == Decimal("30000000")
        assert updated.milestones[1].amount == Decimal("15000000")

    def test_set_unit_price(self, design_doc):
        updated = set_unit_price(design_doc, Decimal("300000"))

        assert updated.total_value == Decimal("30000000")

    def test_area_only_for_design(self, civil_doc):
        with pytest.raises(DerivedTotalError):
            set_area(civil_doc, Decimal("10"))
        with pytest.raises(DerivedTotalError):
            set_unit_price(civil_doc, Decimal("10"))

    def test_negative_area_rejected(self, design_doc):
        with pytest.raises(InvalidContractValueError) as exc_info:
            set_area(design_doc, Decimal("-5"))

        assert exc_info.value.field == "area"


class TestMilestoneEdits:

    def test_spec_change_recalculates_all(self, hundred_million):
        document = new_document(Category.DESIGN, total_value=hundred_million)

        updated = set_milestone_spec(document, 1, "60%")

        assert updated.milestones[1].amount == Decimal("60000000")
        assert updated.milestones[3].amount == Decimal("7500000")

    def test_manual_amount_sticks_for_empty_spec(self, civil_doc):
        document = set_milestone_spec(civil_doc, 4, "")

        updated = set_milestone_amount(document, 4, Decimal("1234"))

        assert updated.milestones[4].amount == Decimal("1234")

    def test_manual_amount_overwritten_for_percentage(self, civil_doc):
        updated = set_milestone_amount(civil_doc, 0, Decimal("1234"))

        assert updated.milestones[0].amount == Decimal("20000000")

    def test_label_change(self, civil_doc):
        updated = set_milestone_label(civil_doc, 0, "Foundation")

        assert updated.milestones[0].label == "Foundation"
        assert _amounts(updated) == _amounts(civil_doc)

    def test_bad_index(self, civil_doc):
        with pytest.raises(MilestoneIndexError) as exc_info:
            set_milestone_spec(civil_doc, 5, "10%")

        assert exc_info.value.count == 5
        with pytest.raises(MilestoneIndexError):
            mark_paid(civil_doc, -1, date(2025, 1, 1))


class TestCategoryAndReset:

    def test_change_category_resets_template(self, civil_doc):
        updated = change_category(civil_doc, "interior")

        assert updated.category is Category.INTERIOR
        assert [m.spec for m in updated.milestones] == ["40%", "30%", "30%"]
        assert updated.milestones[0].amount == Decimal("40000000")

    def test_change_to_design_sets_unit_price(self, civil_doc):
        updated = change_category(civil_doc, Category.DESIGN)

        assert updated.unit_price == Decimal("200000")
        assert updated.milestones[0].amount == Decimal("2500000")

    def test_reset_discards_edits(self, civil_doc):
        edited = set_milestone_spec(civil_doc, 0, "abc")

        reset = reset_to_template(edited)

        assert reset.milestones[0].spec == "20%"
        assert reset.milestones[0].amount == Decimal("20000000")


class TestStatusEdits:

    def test_mark_paid(self, civil_doc):
        updated = mark_paid(civil_doc, 0, date(2025, 3, 1))

        assert updated.milestones[0].status is MilestoneStatus.SUCCESS
        assert updated.milestones[0].payment_date == date(2025, 3, 1)
        assert _amounts(updated) == _amounts(civil_doc)

    def test_mark_unpaid_keeps_payment_date(self, civil_doc):
        paid = mark_paid(civil_doc, 0, date(2025, 3, 1))

        reverted = mark_unpaid(paid, 0)

        assert reverted.milestones[0].status is MilestoneStatus.UNSET
        assert reverted.milestones[0].payment_date == date(2025, 3, 1)

    def test_active_milestone(self, civil_doc):
        updated = set_active_milestone(civil_doc, 2)

        assert updated.active_milestone_index == 2
        assert _amounts(updated) == _amounts(civil_doc)

    def test_active_milestone_out_of_range(self, civil_doc):
        with pytest.raises(MilestoneIndexError):
            set_active_milestone(civil_doc, 9)
