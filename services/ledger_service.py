# services/ledger_service.py
"""
Payment Ledger Service - append-only payment history per plot.

When a payment is received for a booked plot:
1. Validate the amount against the remaining balance (before any write)
2. Compute SHA-256 hash from plot_id + amount + payment_date + recorded_at + previous_hash
3. Store the record with a reference to the plot's previous record hash (chain)
4. Re-derive remaining_amount and paid_percentage from booking + payment sum
5. At the sale threshold flip the plot to sold and distribute commission

Everything above runs in one atomic unit. Payment records are never updated
or deleted.

Verification: recompute every hash of a plot's chain and compare the stored
plot totals with the derived ones.
"""
import hashlib
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_DOWN
from typing import List, Optional, Sequence, Tuple

from config import CommissionPolicy, get_commission_policy
from models import CommissionStatus, PaymentRecord, Plot, PlotStatus, utcnow
from .commission_service import DistributionResult, distribute_commission, quantize_money
from .errors import (
     InvalidAmount,
     InvalidPlotState,
     MissingTotalAmount,
     PaymentExceedsBalance,
     PlotNotFound,
)
from .stores import LedgerStores

logger = logging.getLogger(__name__)


# Genesis link: first payment of a plot
GENESIS_HASH = "0"

PERCENT_PLACES = Decimal("0.01")


@dataclass
class LedgerTotals:
     paid: Decimal
     remaining: Decimal
     percentage: Decimal


@dataclass
class PaymentOutcome:
     payment: Optional[PaymentRecord]
     plot: Plot
     totals: LedgerTotals
     sold_now: bool = False
     distribution: Optional[DistributionResult] = None


def _normalize_amount(amount: Decimal) -> str:
     """Normalize amount to canonical string for hashing (2 decimal places)."""
     return f"{Decimal(amount):.2f}"


def _normalize_timestamp(ts: datetime) -> str:
     return ts.replace(microsecond=0).isoformat()


def compute_payment_hash(
     plot_id: int,
     amount: Decimal,
     payment_date: date,
     recorded_at: datetime,
     previous_hash: str
) -> str:
     """
     Compute SHA-256 hash for a payment record.

     Input string: plot_id|amount|payment_date|recorded_at|previous_hash.
     Returns 64-char hex string.
     """
     payload = "|".join([
          str(plot_id),
          _normalize_amount(amount),
          payment_date.isoformat(),
          _normalize_timestamp(recorded_at),
          previous_hash
     ])
     return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def compute_paid_percentage(total: Decimal, paid: Decimal) -> Decimal:
     """100 * paid / total. Not clamped: above 100 means overpaid."""
     total = Decimal(total)
     if total <= 0:
          raise InvalidAmount("Total plot amount must be greater than zero")
     return Decimal(paid) * Decimal(100) / total


def current_cycle_payments(plot: Plot, payments: Sequence[PaymentRecord]) -> List[PaymentRecord]:
     """Payments of earlier, cancelled bookings stay in the history but no longer count."""
     return [p for p in payments if p.booking_cycle == plot.booking_cycle]


def derive_totals(plot: Plot, payments: Sequence[PaymentRecord]) -> LedgerTotals:
     """paid = booking_amount + sum of this booking's payment records."""
     if plot.total_plot_amount is None:
          raise MissingTotalAmount(plot.id)

     total = Decimal(plot.total_plot_amount)
     paid = Decimal(plot.booking_amount or 0)
     for record in current_cycle_payments(plot, payments):
          paid += Decimal(record.amount_received)

     return LedgerTotals(
          paid=paid,
          remaining=total - paid,
          percentage=compute_paid_percentage(total, paid)
     )


def stored_percentage(totals: LedgerTotals) -> Decimal:
     # Rounded down so a stored 50.00 never claims a threshold the exact value missed
     return totals.percentage.quantize(PERCENT_PLACES, rounding=ROUND_DOWN)


def apply_totals(plot: Plot, totals: LedgerTotals) -> None:
     plot.remaining_amount = totals.remaining
     plot.paid_percentage = stored_percentage(totals)


def settle(
     stores: LedgerStores,
     plot: Plot,
     totals: LedgerTotals,
     policy: CommissionPolicy
) -> Tuple[bool, Optional[DistributionResult]]:
     """
     Apply the sale threshold to a plot whose totals were just derived.

     A booked plot at or above the threshold becomes sold. A sold plot with
     pending commission is handed to the distributor. Must run inside the
     caller's atomic unit.

     Returns:
          (sold_now, distribution or None)
     """
     sold_now = False
     if plot.status == PlotStatus.BOOKED and totals.percentage >= policy.trigger_percentage:
          plot.status = PlotStatus.SOLD
          plot.sold_at = utcnow()
          sold_now = True
          logger.info(
               "Plot %s (%s #%s) crossed %s%% at %.2f%% paid; marked sold",
               plot.id, plot.project_name, plot.plot_number,
               policy.trigger_percentage, totals.percentage
          )

     distribution = None
     if plot.status == PlotStatus.SOLD and plot.commission_status == CommissionStatus.PENDING:
          distribution = distribute_commission(stores, plot.id, policy)
     return sold_now, distribution


def append_payment(
     stores: LedgerStores,
     plot_id: int,
     amount: Decimal,
     payment_date: Optional[date] = None,
     payment_method: Optional[str] = None,
     reference: Optional[str] = None,
     notes: Optional[str] = None,
     policy: Optional[CommissionPolicy] = None
) -> PaymentOutcome:
     """
     Record a payment against a booked plot.

     - Rejects amount <= 0, non-booked plots, plots without a total and
       amounts above the remaining balance; nothing is written in that case
     - Appends a hash-chained PaymentRecord
     - Re-derives remaining_amount / paid_percentage from the records
     - Crossing the threshold sells the plot and distributes commission
       in the same atomic unit

     Raises:
          InvalidAmount, PlotNotFound, InvalidPlotState, MissingTotalAmount,
          PaymentExceedsBalance, WalletUpsertFailed, TransactionWriteFailed
     """
     policy = policy or get_commission_policy()
     amount = quantize_money(Decimal(str(amount)))
     if amount <= 0:
          raise InvalidAmount("Payment amount must be greater than zero")

     with stores.atomic():
          plot = stores.plots.get(plot_id, for_update=True)
          if plot is None:
               raise PlotNotFound(plot_id)
          if plot.status != PlotStatus.BOOKED:
               raise InvalidPlotState(
                    f"Can only add payments to booked plots (plot {plot_id} is {plot.status.value})"
               )
          if plot.total_plot_amount is None:
               raise MissingTotalAmount(plot_id)

          history = stores.plots.payments(plot.id)
          before = derive_totals(plot, history)
          if amount > before.remaining:
               raise PaymentExceedsBalance(amount, before.remaining)

          recorded_at = utcnow()
          paid_on = payment_date or recorded_at.date()
          previous_hash = history[-1].transaction_hash if history else GENESIS_HASH
          record = PaymentRecord(
               plot_id=plot.id,
               booking_cycle=plot.booking_cycle,
               amount_received=amount,
               payment_date=paid_on,
               payment_method=payment_method,
               reference=reference,
               notes=notes,
               recorded_at=recorded_at,
               previous_hash=previous_hash,
               transaction_hash=compute_payment_hash(plot.id, amount, paid_on, recorded_at, previous_hash)
          )
          stores.plots.append_payment(record)

          after = derive_totals(plot, list(history) + [record])
          apply_totals(plot, after)
          logger.info(
               "Payment of %s recorded for plot %s; remaining %s (%.2f%% paid)",
               amount, plot.id, after.remaining, after.percentage
          )
          sold_now, distribution = settle(stores, plot, after, policy)

     return PaymentOutcome(
          payment=record,
          plot=plot,
          totals=after,
          sold_now=sold_now,
          distribution=distribution
     )


def verify_payment_history(stores: LedgerStores, plot_id: int) -> Tuple[bool, str]:
     """
     Verify a plot's payment chain and its stored totals.

     Returns:
          (success: bool, message: str)
          - (True, "Verification passed (n payments)") if every hash and link matches
          - (False, reason) on hash mismatch, broken chain or total drift
     """
     plot = stores.plots.get(plot_id)
     if plot is None:
          return False, "Plot not found"

     history = stores.plots.payments(plot_id)
     prev_hash = GENESIS_HASH
     for record in history:
          if record.previous_hash != prev_hash:
               return False, f"Chain broken at payment id={record.id}: previous_hash mismatch"
          computed = compute_payment_hash(
               record.plot_id,
               record.amount_received,
               record.payment_date,
               record.recorded_at,
               record.previous_hash
          )
          if computed != record.transaction_hash:
               return False, f"Hash mismatch at payment id={record.id}"
          prev_hash = record.transaction_hash

     if plot.status in (PlotStatus.BOOKED, PlotStatus.SOLD) and plot.total_plot_amount is not None:
          totals = derive_totals(plot, history)
          if plot.remaining_amount is None or Decimal(plot.remaining_amount) != totals.remaining:
               return False, f"Remaining amount drift: stored={plot.remaining_amount}, derived={totals.remaining}"
          if plot.paid_percentage is None or Decimal(plot.paid_percentage) != stored_percentage(totals):
               return False, (
                    f"Paid percentage drift: stored={plot.paid_percentage}, "
                    f"derived={stored_percentage(totals)}"
               )

     return True, f"Verification passed ({len(history)} payments)"
