# services/commission_service.py
"""
Commission Distributor - credits the selling broker and their upline once a
plot is sold.

Level 0 is the selling broker (direct-sale balance), levels 1..n walk up the
referral chain (downline-sale balance). Rates come from CommissionPolicy.

At-most-once is guarded three ways:
1. claim_commission() flips commission_status pending -> paid with a
   conditional update; only one caller wins
2. Each credit first checks the ledger for (wallet, plot, level)
3. The transactions table has a unique index on (wallet, plot, level)
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterator, List, Optional, Tuple

from config import CommissionPolicy, get_commission_policy
from models import (
     Broker,
     CommissionStatus,
     Plot,
     PlotStatus,
     TransactionType,
     WalletBucket,
     WalletTransaction,
     utcnow,
)
from .errors import BrokerNotFound, InvalidPlotState, MissingTotalAmount, PlotNotFound
from .stores import BrokerStore, LedgerStores

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


@dataclass
class CommissionCredit:
     broker_id: int
     level: int
     amount: Decimal
     bucket: WalletBucket


@dataclass
class DistributionResult:
     plot_id: int
     distributed: bool = False
     already_distributed: bool = False
     credits: List[CommissionCredit] = field(default_factory=list)

     @property
     def total_distributed(self) -> Decimal:
          return sum((c.amount for c in self.credits), Decimal("0.00"))


def quantize_money(value) -> Decimal:
     return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def commission_amount(total: Decimal, rate: Decimal) -> Decimal:
     """total * rate / 100, rounded half-up to the cent."""
     return quantize_money(Decimal(total) * Decimal(rate) / Decimal(100))


def commission_breakdown(total: Decimal, policy: Optional[CommissionPolicy] = None) -> Dict:
     """
     Per-level commission for a plot total, assuming a full upline.

     Returns:
          {"total_plot_amount", "levels": [{"level", "rate", "amount"}], "total_commission"}
     """
     policy = policy or get_commission_policy()
     levels = [
          {"level": level, "rate": rate, "amount": commission_amount(total, rate)}
          for level, rate in enumerate(policy.level_rates)
     ]
     return {
          "total_plot_amount": quantize_money(total),
          "levels": levels,
          "total_commission": sum((entry["amount"] for entry in levels), Decimal("0.00")),
     }


def walk_upline(brokers: BrokerStore, seller: Broker, max_depth: int) -> Iterator[Tuple[int, Broker]]:
     """
     Yield (level, broker) for the seller's upline, level 1 first.

     Stops at the top of the tree, at max_depth, at a dangling upline_id and
     at the first broker already visited (a cycle in the data).
     """
     seen = {seller.id}
     current = seller
     for level in range(1, max_depth + 1):
          if current.upline_id is None:
               return
          if current.upline_id in seen:
               logger.warning(
                    "Referral cycle detected at broker %s (upline %s); stopping upline walk",
                    current.id, current.upline_id
               )
               return
          upline = brokers.get(current.upline_id)
          if upline is None:
               logger.warning("Upline %s of broker %s not found; stopping upline walk", current.upline_id, current.id)
               return
          seen.add(upline.id)
          yield level, upline
          current = upline


def _describe(plot: Plot, seller: Broker, level: int) -> str:
     where = f"plot #{plot.plot_number} ({plot.project_name})"
     if level == 0:
          return f"Direct commission for {where}"
     return f"Level {level} commission from {seller.full_name}'s sale of {where}"


def _credit(
     stores: LedgerStores,
     plot: Plot,
     seller: Broker,
     broker: Broker,
     level: int,
     policy: CommissionPolicy,
     result: DistributionResult
) -> None:
     amount = commission_amount(plot.total_plot_amount, policy.rate_for_level(level))
     if amount <= 0:
          return
     if stores.transactions.exists(broker.id, plot.id, level):
          logger.warning(
               "Commission for broker %s, plot %s, level %s already recorded; skipping",
               broker.id, plot.id, level
          )
          return

     bucket = WalletBucket.DIRECT if level == 0 else WalletBucket.DOWNLINE
     stores.wallets.credit(broker.id, bucket, amount)
     stores.transactions.append(WalletTransaction(
          wallet_owner_id=broker.id,
          type=TransactionType.COMMISSION,
          wallet_bucket=bucket,
          amount=amount,
          description=_describe(plot, seller, level),
          plot_id=plot.id,
          level=level,
          reference_id=f"plot-{plot.id}",
          created_at=utcnow()
     ))
     result.credits.append(CommissionCredit(broker_id=broker.id, level=level, amount=amount, bucket=bucket))


def distribute_commission(
     stores: LedgerStores,
     plot_id: int,
     policy: Optional[CommissionPolicy] = None
) -> DistributionResult:
     """
     Distribute commission for a sold plot, at most once.

     - Already paid: no-op, result.already_distributed is True
     - Plot must be sold with commission pending and a total amount
     - No broker on the plot: marked paid, no credits
     - Seller gets level 0 into direct-sale balance, upline levels go to
       downline-sale balance

     Raises:
          PlotNotFound, InvalidPlotState, MissingTotalAmount, BrokerNotFound,
          WalletUpsertFailed, TransactionWriteFailed
     """
     policy = policy or get_commission_policy()
     result = DistributionResult(plot_id=plot_id)

     with stores.atomic():
          plot = stores.plots.get(plot_id, for_update=True)
          if plot is None:
               raise PlotNotFound(plot_id)
          if plot.commission_status == CommissionStatus.PAID:
               logger.info("Commission for plot %s already distributed; nothing to do", plot_id)
               result.already_distributed = True
               return result
          if plot.status != PlotStatus.SOLD:
               raise InvalidPlotState(
                    f"Commission can only be distributed for sold plots (plot {plot_id} is {plot.status.value})"
               )
          if plot.commission_status != CommissionStatus.PENDING:
               raise InvalidPlotState(f"Plot {plot_id} has no pending commission")
          if plot.total_plot_amount is None:
               raise MissingTotalAmount(plot_id)

          if not stores.plots.claim_commission(plot.id):
               logger.info("Commission for plot %s claimed by another caller", plot_id)
               result.already_distributed = True
               return result
          result.distributed = True

          if plot.broker_id is None:
               logger.info("Plot %s sold without a broker; commission marked paid with no credits", plot_id)
               return result

          seller = stores.brokers.get(plot.broker_id)
          if seller is None:
               raise BrokerNotFound(plot.broker_id)

          _credit(stores, plot, seller, seller, 0, policy, result)
          for level, upline in walk_upline(stores.brokers, seller, policy.max_upline_depth):
               _credit(stores, plot, seller, upline, level, policy, result)

     logger.info(
          "Distributed %s commission for plot %s across %s credits",
          result.total_distributed, plot_id, len(result.credits)
     )
     return result
