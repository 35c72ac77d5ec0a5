# services/plot_service.py
"""
Plot lifecycle: create, book, cancel and delete.

available -> booked -> sold; booked -> available (cancel) only while the paid
percentage is below the cancellation lock. A booking that already covers the
sale threshold is sold (and its commission distributed) immediately.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from config import CommissionPolicy, get_commission_policy
from models import CommissionStatus, Plot, PlotStatus, utcnow
from .commission_service import quantize_money
from .errors import (
     BrokerNotFound,
     DuplicatePlot,
     InvalidAmount,
     InvalidPlotState,
     InvalidRequest,
     PlotNotFound,
)
from .ledger_service import PaymentOutcome, apply_totals, derive_totals, settle
from .stores import LedgerStores

logger = logging.getLogger(__name__)


def get_plot(stores: LedgerStores, plot_id: int) -> Plot:
     plot = stores.plots.get(plot_id)
     if plot is None:
          raise PlotNotFound(plot_id)
     return plot


def create_plot(
     stores: LedgerStores,
     project_name: str,
     plot_number: int,
     plot_type: Optional[str] = None,
     block: Optional[str] = None,
     dimension: Optional[str] = None,
     area: Optional[Decimal] = None
) -> Plot:
     """Add an available plot to the inventory. (project_name, plot_number) must be unique."""
     project_name = project_name.strip()
     if not project_name:
          raise InvalidRequest("Project name is required")

     with stores.atomic():
          if stores.plots.find_by_number(project_name, plot_number) is not None:
               raise DuplicatePlot(f"Plot #{plot_number} already exists in project {project_name}")
          plot = Plot(
               project_name=project_name,
               plot_number=plot_number,
               plot_type=plot_type,
               block=block,
               dimension=dimension,
               area=area,
               status=PlotStatus.AVAILABLE,
               booking_cycle=0,
               created_at=utcnow()
          )
          stores.plots.add(plot)

     logger.info("Created plot %s (%s #%s)", plot.id, project_name, plot_number)
     return plot


def update_plot(
     stores: LedgerStores,
     plot_id: int,
     plot_type: Optional[str] = None,
     block: Optional[str] = None,
     dimension: Optional[str] = None,
     area: Optional[Decimal] = None
) -> Plot:
     """
     Update the descriptive fields of a plot in any status.

     Only provided (non-None) fields change. Buyer, broker, amounts and
     status move only through booking, payments and cancellation.

     Raises:
          PlotNotFound, InvalidAmount (area <= 0)
     """
     if area is not None and Decimal(str(area)) <= 0:
          raise InvalidAmount("Plot area must be greater than zero")

     changes = {
          "plot_type": plot_type,
          "block": block,
          "dimension": dimension,
          "area": area,
     }
     with stores.atomic():
          plot = stores.plots.get(plot_id, for_update=True)
          if plot is None:
               raise PlotNotFound(plot_id)
          for field, value in changes.items():
               if value is not None:
                    setattr(plot, field, value)

     logger.info(
          "Updated plot %s: %s", plot_id,
          ", ".join(f"{k}={v}" for k, v in changes.items() if v is not None) or "no changes"
     )
     return plot


def bulk_add_plots(
     stores: LedgerStores,
     project_name: str,
     count: int,
     starting_number: int = 1,
     plot_type: Optional[str] = None,
     block: Optional[str] = None,
     dimension: Optional[str] = None,
     area: Optional[Decimal] = None
) -> Tuple[List[Plot], List[int]]:
     """
     Add count available plots to a project, numbered upward from starting_number.

     Numbers already taken in the project are skipped, so exactly count plots
     are added. All plots are created in one atomic unit.

     Returns:
          (created plots, skipped plot numbers)
     """
     project_name = project_name.strip()
     if not project_name:
          raise InvalidRequest("Project name is required")
     if count < 1:
          raise InvalidRequest("Number of plots to add must be at least 1")
     if starting_number < 1:
          raise InvalidRequest("Starting plot number must be at least 1")
     if area is not None and Decimal(str(area)) <= 0:
          raise InvalidAmount("Plot area must be greater than zero")

     created: List[Plot] = []
     skipped: List[int] = []
     number = starting_number
     with stores.atomic():
          while len(created) < count:
               if stores.plots.find_by_number(project_name, number) is not None:
                    skipped.append(number)
               else:
                    created.append(stores.plots.add(Plot(
                         project_name=project_name,
                         plot_number=number,
                         plot_type=plot_type,
                         block=block,
                         dimension=dimension,
                         area=area,
                         status=PlotStatus.AVAILABLE,
                         booking_cycle=0,
                         created_at=utcnow()
                    )))
               number += 1

     logger.info(
          "Added %s plots to %s (#%s-#%s), skipped %s existing",
          len(created), project_name, created[0].plot_number, created[-1].plot_number, len(skipped)
     )
     return created, skipped


def book_plot(
     stores: LedgerStores,
     plot_id: int,
     buyer_name: str,
     total_amount: Decimal,
     booking_amount: Decimal = Decimal("0"),
     broker_id: Optional[int] = None,
     policy: Optional[CommissionPolicy] = None
) -> PaymentOutcome:
     """
     Book an available plot for a buyer.

     Sets the total and booking amounts, marks commission pending and derives
     remaining / paid percentage. If the booking amount alone reaches the sale
     threshold the plot is sold and commission distributed in the same unit.

     Raises:
          InvalidAmount: total <= 0, booking < 0 or booking > total
          PlotNotFound, BrokerNotFound
          InvalidPlotState: plot is not available
     """
     policy = policy or get_commission_policy()
     total = quantize_money(Decimal(str(total_amount)))
     booking = quantize_money(Decimal(str(booking_amount or 0)))
     if total <= 0:
          raise InvalidAmount("Total plot amount must be greater than zero")
     if booking < 0:
          raise InvalidAmount("Booking amount cannot be negative")
     if booking > total:
          raise InvalidAmount(f"Booking amount {booking} exceeds total plot amount {total}")
     if not buyer_name or not buyer_name.strip():
          raise InvalidRequest("Buyer name is required to book a plot")

     with stores.atomic():
          plot = stores.plots.get(plot_id, for_update=True)
          if plot is None:
               raise PlotNotFound(plot_id)
          if plot.status != PlotStatus.AVAILABLE:
               raise InvalidPlotState(f"Only available plots can be booked (plot {plot_id} is {plot.status.value})")
          if broker_id is not None and stores.brokers.get(broker_id) is None:
               raise BrokerNotFound(broker_id)

          plot.status = PlotStatus.BOOKED
          plot.buyer_name = buyer_name.strip()
          plot.broker_id = broker_id
          plot.total_plot_amount = total
          plot.booking_amount = booking
          plot.commission_status = CommissionStatus.PENDING
          plot.booking_cycle = (plot.booking_cycle or 0) + 1
          plot.booked_at = utcnow()
          plot.sold_at = None

          totals = derive_totals(plot, stores.plots.payments(plot.id))
          apply_totals(plot, totals)
          logger.info(
               "Booked plot %s for %s (total %s, booking %s, broker %s)",
               plot.id, plot.buyer_name, total, booking, broker_id
          )
          sold_now, distribution = settle(stores, plot, totals, policy)

     return PaymentOutcome(payment=None, plot=plot, totals=totals, sold_now=sold_now, distribution=distribution)


def cancel_booking(stores: LedgerStores, plot_id: int, policy: Optional[CommissionPolicy] = None) -> Plot:
     """
     Cancel a booking and return the plot to the available pool.

     Payment history is kept for audit; it belongs to the old booking cycle
     and no longer counts toward a future booking.

     Raises:
          PlotNotFound
          InvalidPlotState: not booked, or paid percentage >= cancellation lock
     """
     policy = policy or get_commission_policy()
     with stores.atomic():
          plot = stores.plots.get(plot_id, for_update=True)
          if plot is None:
               raise PlotNotFound(plot_id)
          if plot.status != PlotStatus.BOOKED:
               raise InvalidPlotState(f"Only booked plots can be cancelled (plot {plot_id} is {plot.status.value})")

          totals = derive_totals(plot, stores.plots.payments(plot.id))
          if totals.percentage >= policy.cancellation_lock_percentage:
               raise InvalidPlotState(
                    f"Cannot cancel booking: {totals.percentage:.2f}% paid "
                    f"(locked at {policy.cancellation_lock_percentage}%)"
               )

          buyer = plot.buyer_name
          plot.clear_booking()

     logger.info("Cancelled booking of plot %s (buyer %s)", plot_id, buyer)
     return plot


def can_delete_plot(stores: LedgerStores, plot_id: int) -> Tuple[bool, str]:
     """
     Check if a plot can be deleted.

     Returns:
          (allowed: bool, reason: str)
     """
     plot = stores.plots.get(plot_id)
     if plot is None:
          return False, "Plot not found"
     if plot.status != PlotStatus.AVAILABLE:
          return False, f"Cannot delete a {plot.status.value} plot"
     if stores.plots.payments(plot_id):
          return False, "Plot has payment history"
     if stores.transactions.for_plot(plot_id):
          return False, "Plot has related transactions"
     return True, "Plot can be deleted"


def delete_plot(stores: LedgerStores, plot_id: int) -> None:
     with stores.atomic():
          plot = stores.plots.get(plot_id, for_update=True)
          if plot is None:
               raise PlotNotFound(plot_id)
          allowed, reason = can_delete_plot(stores, plot_id)
          if not allowed:
               raise InvalidPlotState(reason)
          stores.plots.delete(plot)
     logger.info("Deleted plot %s", plot_id)
