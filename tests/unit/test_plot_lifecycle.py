"""
Unit tests for the plot lifecycle.

Tests cover:
- Creation and duplicate detection
- Descriptive updates and bulk creation
- Booking validation and immediate sale at threshold
- Cancellation lock and field reset
- Deletion rules
"""

from decimal import Decimal

import pytest

from config import CommissionPolicy
from models import CommissionStatus, PlotStatus
from services import (
    BrokerNotFound,
    DuplicatePlot,
    InvalidAmount,
    InvalidPlotState,
    InvalidRequest,
    PlotNotFound,
    append_payment,
    book_plot,
    bulk_add_plots,
    can_delete_plot,
    cancel_booking,
    create_plot,
    delete_plot,
    update_plot,
)


class TestCreatePlot:
    """Inventory creation."""

    def test_new_plot_is_available(self, stores):
        """Test a created plot starts available and unbooked."""
        plot = create_plot(stores, "Green Valley", 1, plot_type="Residential", area=Decimal("200"))

        assert plot.status == PlotStatus.AVAILABLE
        assert plot.commission_status is None
        assert plot.payment_label == "Not booked"

    def test_duplicate_number_in_project(self, stores):
        """Test plot numbers are unique per project."""
        create_plot(stores, "Green Valley", 1)

        with pytest.raises(DuplicatePlot):
            create_plot(stores, "Green Valley", 1)

    def test_same_number_other_project(self, stores):
        """Test the same number is allowed in another project."""
        create_plot(stores, "Green Valley", 1)

        assert create_plot(stores, "Blue Hills", 1).id is not None

    def test_blank_project_rejected(self, stores):
        with pytest.raises(InvalidRequest):
            create_plot(stores, "  ", 1)


class TestUpdatePlot:
    """Descriptive edits."""

    def test_only_given_fields_change(self, stores):
        """Test unset fields keep their values."""
        plot = create_plot(stores, "Green Valley", 1, plot_type="Residential", block="A")

        update_plot(stores, plot.id, block="C", area=Decimal("180"))

        assert plot.block == "C"
        assert plot.area == Decimal("180")
        assert plot.plot_type == "Residential"

    def test_booked_plot_keeps_financials(self, booked_plot, stores):
        """Test editing a booked plot leaves status and amounts alone."""
        update_plot(stores, booked_plot.id, dimension="40x60")

        assert booked_plot.dimension == "40x60"
        assert booked_plot.status == PlotStatus.BOOKED
        assert booked_plot.total_plot_amount == Decimal("1000000.00")
        assert booked_plot.remaining_amount == Decimal("900000.00")
        assert booked_plot.commission_status == CommissionStatus.PENDING

    def test_unknown_plot(self, stores):
        with pytest.raises(PlotNotFound):
            update_plot(stores, 999, block="B")

    def test_non_positive_area(self, stores):
        plot = create_plot(stores, "Green Valley", 1)

        with pytest.raises(InvalidAmount):
            update_plot(stores, plot.id, area=Decimal("0"))


class TestBulkAddPlots:
    """Adding a numbered run of plots."""

    def test_numbers_from_start(self, stores):
        """Test count plots numbered upward from the starting number."""
        plots, skipped = bulk_add_plots(stores, "Green Valley", 3, starting_number=10, block="A")

        assert [p.plot_number for p in plots] == [10, 11, 12]
        assert skipped == []
        assert all(p.status == PlotStatus.AVAILABLE and p.block == "A" for p in plots)

    def test_existing_numbers_skipped(self, stores):
        """Test taken numbers are skipped and exactly count plots are added."""
        create_plot(stores, "Green Valley", 2)
        create_plot(stores, "Green Valley", 3)
        create_plot(stores, "Blue Hills", 1)

        plots, skipped = bulk_add_plots(stores, "Green Valley", 3)

        assert [p.plot_number for p in plots] == [1, 4, 5]
        assert skipped == [2, 3]
        assert len(stores.plots.list()) == 6

    def test_one_atomic_unit(self, stores):
        """Test a failure part-way leaves no plots behind."""
        original_add = stores.plots.add
        calls = []

        def failing_add(plot):
            calls.append(plot.plot_number)
            if len(calls) == 3:
                raise RuntimeError("insert failed")
            return original_add(plot)

        stores.plots.add = failing_add

        with pytest.raises(RuntimeError):
            bulk_add_plots(stores, "Green Valley", 5)

        assert stores.plots.rows == {}
        assert stores.rollbacks == 1

    @pytest.mark.parametrize("count,start", [(0, 1), (3, 0)])
    def test_invalid_run(self, stores, count, start):
        with pytest.raises(InvalidRequest):
            bulk_add_plots(stores, "Green Valley", count, starting_number=start)


class TestBookPlot:
    """Booking rules."""

    def test_booking_sets_pending_commission(self, booked_plot):
        """Test the reference booking derives 10% paid."""
        assert booked_plot.status == PlotStatus.BOOKED
        assert booked_plot.commission_status == CommissionStatus.PENDING
        assert booked_plot.remaining_amount == Decimal("900000.00")
        assert booked_plot.paid_percentage == Decimal("10.00")
        assert booked_plot.booked_at is not None

    def test_booking_above_total_rejected(self, stores, policy):
        plot = create_plot(stores, "Green Valley", 1)

        with pytest.raises(InvalidAmount):
            book_plot(stores, plot.id, "Buyer", Decimal("1000"), Decimal("1001"), policy=policy)
        assert plot.status == PlotStatus.AVAILABLE

    def test_unknown_broker_rejected(self, stores, policy):
        plot = create_plot(stores, "Green Valley", 1)

        with pytest.raises(BrokerNotFound):
            book_plot(stores, plot.id, "Buyer", Decimal("1000"), broker_id=42, policy=policy)
        assert plot.status == PlotStatus.AVAILABLE

    def test_booked_plot_cannot_be_rebooked(self, booked_plot, stores, policy):
        with pytest.raises(InvalidPlotState):
            book_plot(stores, booked_plot.id, "Someone Else", Decimal("1000"), policy=policy)

    def test_large_booking_sells_immediately(self, stores, chain, policy):
        """Test a booking at the threshold sells and distributes at once."""
        seller, _, _ = chain
        plot = create_plot(stores, "Green Valley", 1)

        outcome = book_plot(
            stores, plot.id, "Buyer", Decimal("1000000"), Decimal("500000"), broker_id=seller.id, policy=policy
        )

        assert outcome.sold_now is True
        assert plot.status == PlotStatus.SOLD
        assert plot.commission_status == CommissionStatus.PAID
        assert outcome.distribution.total_distributed == Decimal("85000.00")


class TestCancelBooking:
    """Cancellation lock and reset."""

    def test_cancel_resets_plot(self, booked_plot, stores, policy):
        """Test buyer, broker, amounts and commission are cleared."""
        cancel_booking(stores, booked_plot.id, policy)

        assert booked_plot.status == PlotStatus.AVAILABLE
        assert booked_plot.buyer_name is None
        assert booked_plot.broker_id is None
        assert booked_plot.total_plot_amount is None
        assert booked_plot.remaining_amount is None
        assert booked_plot.paid_percentage is None
        assert booked_plot.commission_status is None

    def test_cancel_locked_at_threshold(self, booked_plot, stores):
        """Test cancellation is rejected at 50% paid even if the plot is still booked."""
        policy = CommissionPolicy(trigger_percentage=Decimal("75"))
        append_payment(stores, booked_plot.id, Decimal("400000"), policy=policy)

        with pytest.raises(InvalidPlotState) as exc:
            cancel_booking(stores, booked_plot.id, policy)

        assert "Cannot cancel" in exc.value.message
        assert booked_plot.status == PlotStatus.BOOKED

    def test_sold_plot_cannot_be_cancelled(self, booked_plot, stores, policy):
        append_payment(stores, booked_plot.id, Decimal("400000"), policy=policy)

        with pytest.raises(InvalidPlotState):
            cancel_booking(stores, booked_plot.id, policy)

    def test_rebooking_ignores_old_payments(self, booked_plot, stores, policy):
        """Test payments of a cancelled booking stay on record but stop counting."""
        append_payment(stores, booked_plot.id, Decimal("200000"), policy=policy)
        cancel_booking(stores, booked_plot.id, policy)

        book_plot(stores, booked_plot.id, "New Buyer", Decimal("800000"), Decimal("80000"), policy=policy)

        assert len(stores.plots.payments(booked_plot.id)) == 1
        assert booked_plot.remaining_amount == Decimal("720000.00")
        assert booked_plot.paid_percentage == Decimal("10.00")


class TestDeletePlot:
    """Only untouched available plots can be deleted."""

    def test_fresh_plot_deletable(self, stores):
        plot = create_plot(stores, "Green Valley", 1)

        assert can_delete_plot(stores, plot.id) == (True, "Plot can be deleted")
        delete_plot(stores, plot.id)
        assert stores.plots.get(plot.id) is None

    def test_booked_plot_not_deletable(self, booked_plot, stores):
        allowed, reason = can_delete_plot(stores, booked_plot.id)

        assert allowed is False
        with pytest.raises(InvalidPlotState):
            delete_plot(stores, booked_plot.id)

    def test_plot_with_history_not_deletable(self, booked_plot, stores, policy):
        """Test a cancelled plot keeps its payment history and cannot be deleted."""
        append_payment(stores, booked_plot.id, Decimal("1000"), policy=policy)
        cancel_booking(stores, booked_plot.id, policy)

        assert can_delete_plot(stores, booked_plot.id) == (False, "Plot has payment history")

    def test_missing_plot(self, stores):
        assert can_delete_plot(stores, 404) == (False, "Plot not found")
