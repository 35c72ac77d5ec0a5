# services/reconciliation_service.py
"""
Reconciliation - idempotent repair of derived plot state.

reconcile() re-derives remaining_amount / paid_percentage from the payment
records, promotes booked plots at or above the threshold to sold and
distributes commission that is still pending. Running it twice changes
nothing the second time.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from config import CommissionPolicy, get_commission_policy
from models import CommissionStatus, PlotStatus
from .commission_service import DistributionResult
from .errors import LedgerError, PlotNotFound
from .ledger_service import apply_totals, derive_totals, settle, stored_percentage
from .stores import LedgerStores

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
     plot_id: int
     status: PlotStatus
     commission_status: Optional[CommissionStatus]
     repaired: bool = False
     sold_now: bool = False
     distribution: Optional[DistributionResult] = None


@dataclass
class ReconcileSummary:
     checked: int = 0
     repaired: int = 0
     sold: int = 0
     distributed: int = 0
     failures: Dict[int, str] = field(default_factory=dict)
     results: List[ReconcileResult] = field(default_factory=list)


def _drifted(stored, derived: Decimal) -> bool:
     return stored is None or Decimal(stored) != derived


def reconcile(stores: LedgerStores, plot_id: int, policy: Optional[CommissionPolicy] = None) -> ReconcileResult:
     """
     Bring one plot's derived fields and commission in line with its payments.

     Raises:
          PlotNotFound, MissingTotalAmount (booked/sold plot without a total),
          WalletUpsertFailed, TransactionWriteFailed
     """
     policy = policy or get_commission_policy()
     with stores.atomic():
          plot = stores.plots.get(plot_id, for_update=True)
          if plot is None:
               raise PlotNotFound(plot_id)

          result = ReconcileResult(plot_id=plot.id, status=plot.status, commission_status=plot.commission_status)
          if plot.status not in (PlotStatus.BOOKED, PlotStatus.SOLD):
               return result

          totals = derive_totals(plot, stores.plots.payments(plot.id))
          if _drifted(plot.remaining_amount, totals.remaining) or _drifted(
               plot.paid_percentage, stored_percentage(totals)
          ):
               logger.warning(
                    "Plot %s drifted: remaining %s -> %s, paid %s%% -> %s%%",
                    plot.id, plot.remaining_amount, totals.remaining,
                    plot.paid_percentage, stored_percentage(totals)
               )
               apply_totals(plot, totals)
               result.repaired = True

          result.sold_now, result.distribution = settle(stores, plot, totals, policy)
          result.status = plot.status
          result.commission_status = plot.commission_status

     logger.info(
          "Reconciled plot %s: repaired=%s sold_now=%s distributed=%s",
          plot_id, result.repaired, result.sold_now,
          bool(result.distribution and result.distribution.distributed)
     )
     return result


def reconcile_all(stores: LedgerStores, policy: Optional[CommissionPolicy] = None) -> ReconcileSummary:
     """
     Reconcile every booked plot and every sold plot whose commission is pending.

     Each plot runs in its own atomic unit; a failure is logged, recorded in
     the summary and does not stop the sweep.
     """
     policy = policy or get_commission_policy()
     candidates = stores.plots.list(status=PlotStatus.BOOKED) + [
          plot for plot in stores.plots.list(status=PlotStatus.SOLD)
          if plot.commission_status == CommissionStatus.PENDING
     ]
     plot_ids = [plot.id for plot in candidates]

     summary = ReconcileSummary()
     for plot_id in plot_ids:
          summary.checked += 1
          try:
               result = reconcile(stores, plot_id, policy)
          except LedgerError as e:
               logger.error("Reconcile failed for plot %s: %s", plot_id, e.message)
               summary.failures[plot_id] = e.message
               continue
          summary.results.append(result)
          if result.repaired:
               summary.repaired += 1
          if result.sold_now:
               summary.sold += 1
          if result.distribution is not None and result.distribution.distributed:
               summary.distributed += 1

     logger.info(
          "Reconciled %s plots: %s repaired, %s sold, %s distributed, %s failed",
          summary.checked, summary.repaired, summary.sold, summary.distributed, len(summary.failures)
     )
     return summary
