"""
Unit tests for reconciliation.

Tests cover:
- Repairing drifted totals
- Selling and distributing plots left behind at the threshold
- Idempotence
- reconcile_all collecting per-plot failures
"""

from decimal import Decimal

from config import CommissionPolicy
from models import CommissionStatus, PlotStatus
from services import (
    append_payment,
    create_plot,
    reconcile,
    reconcile_all,
)


class TestReconcile:
    """Single plot reconciliation."""

    def test_repairs_drift(self, booked_plot, stores, policy):
        """Test stored totals are re-derived from the records."""
        append_payment(stores, booked_plot.id, Decimal("100000"), policy=policy)
        booked_plot.remaining_amount = Decimal("5")
        booked_plot.paid_percentage = Decimal("99")

        result = reconcile(stores, booked_plot.id, policy)

        assert result.repaired is True
        assert booked_plot.remaining_amount == Decimal("800000.00")
        assert booked_plot.paid_percentage == Decimal("20.00")
        assert reconcile(stores, booked_plot.id, policy).repaired is False

    def test_sells_plot_left_at_threshold(self, booked_plot, stores, chain, policy):
        """Test a booked plot at 60% paid under a stricter old threshold is sold and paid once."""
        append_payment(stores, booked_plot.id, Decimal("500000"), policy=CommissionPolicy(trigger_percentage=Decimal("75")))
        assert booked_plot.status == PlotStatus.BOOKED

        result = reconcile(stores, booked_plot.id, policy)

        assert result.sold_now is True
        assert result.status == PlotStatus.SOLD
        assert result.commission_status == CommissionStatus.PAID
        assert result.distribution.total_distributed == Decimal("85000.00")

        again = reconcile(stores, booked_plot.id, policy)
        assert again.sold_now is False
        assert again.distribution is None
        assert again.commission_status == CommissionStatus.PAID
        assert len(stores.transactions.rows) == 3

    def test_distributes_sold_pending_plot(self, booked_plot, stores, policy):
        """Test a sold plot whose distribution never ran."""
        booked_plot.status = PlotStatus.SOLD

        result = reconcile(stores, booked_plot.id, policy)

        assert result.distribution.distributed is True
        assert booked_plot.commission_status == CommissionStatus.PAID

    def test_available_plot_untouched(self, stores, policy):
        plot = create_plot(stores, "Green Valley", 9)

        result = reconcile(stores, plot.id, policy)

        assert result.repaired is False
        assert result.distribution is None
        assert plot.status == PlotStatus.AVAILABLE


class TestReconcileAll:
    """Sweep over open plots."""

    def test_failure_does_not_stop_sweep(self, booked_plot, stores, policy):
        """Test a broken plot is reported while the others are reconciled."""
        broken = create_plot(stores, "Green Valley", 20)
        broken.status = PlotStatus.BOOKED
        booked_plot.remaining_amount = Decimal("1")

        summary = reconcile_all(stores, policy)

        assert summary.checked == 2
        assert summary.repaired == 1
        assert list(summary.failures) == [broken.id]
        assert "no total plot amount" in summary.failures[broken.id]
        assert booked_plot.remaining_amount == Decimal("900000.00")

    def test_sweep_is_idempotent(self, booked_plot, stores, policy):
        booked_plot.status = PlotStatus.SOLD
        first = reconcile_all(stores, policy)
        second = reconcile_all(stores, policy)

        assert first.distributed == 1
        assert second.checked == 0
        assert second.distributed == 0
