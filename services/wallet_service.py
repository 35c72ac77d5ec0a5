# services/wallet_service.py
"""
Broker wallets: balances, admin adjustments and withdrawal requests.

Every balance change is paired with an immutable WalletTransaction. Amounts
are signed: commissions and credits positive, withdrawals and debits negative,
so a wallet's total equals the sum of its transactions.
"""
import logging
from decimal import Decimal
from typing import Optional

from models import (
     PaymentType,
     TransactionType,
     Wallet,
     WalletBucket,
     WalletTransaction,
     WithdrawalRequest,
     WithdrawalStatus,
     utcnow,
)
from .commission_service import quantize_money
from .errors import (
     BrokerNotFound,
     InsufficientBalance,
     InvalidAmount,
     InvalidRequest,
     InvalidWithdrawalState,
     WithdrawalNotFound,
)
from .stores import LedgerStores

logger = logging.getLogger(__name__)

APPROVE = "approve"
REJECT = "reject"


def _require_broker(stores: LedgerStores, broker_id: int) -> None:
     if stores.brokers.get(broker_id) is None:
          raise BrokerNotFound(broker_id)


def get_wallet(stores: LedgerStores, broker_id: int) -> Wallet:
     """Return the broker's wallet, creating an empty one on first access."""
     _require_broker(stores, broker_id)
     wallet = stores.wallets.get(broker_id)
     if wallet is not None:
          return wallet
     with stores.atomic():
          wallet = stores.wallets.save(Wallet.empty(broker_id))
     logger.info("Created wallet for broker %s", broker_id)
     return wallet


def available_balance(stores: LedgerStores, broker_id: int) -> Decimal:
     """Total balance minus amounts already requested for withdrawal."""
     wallet = stores.wallets.get(broker_id)
     total = Decimal(wallet.total_balance) if wallet is not None else Decimal("0.00")
     return total - stores.withdrawals.pending_total(broker_id)


def adjust_wallet(
     stores: LedgerStores,
     broker_id: int,
     amount: Decimal,
     bucket: WalletBucket,
     description: str
) -> WalletTransaction:
     """
     Admin credit (amount > 0) or debit (amount < 0) of one wallet bucket.

     Raises:
          BrokerNotFound, InvalidAmount (zero), InvalidRequest (no description),
          InsufficientBalance (debit below zero)
     """
     amount = quantize_money(Decimal(str(amount)))
     if amount == 0:
          raise InvalidAmount("Adjustment amount cannot be zero")
     if not description or not description.strip():
          raise InvalidRequest("Adjustment requires a description")

     with stores.atomic():
          _require_broker(stores, broker_id)
          wallet = stores.wallets.get(broker_id, for_update=True)
          current = wallet.balance_of(bucket) if wallet is not None else Decimal("0.00")
          if current + amount < 0:
               raise InsufficientBalance(
                    f"Cannot debit {-amount} from {bucket.value} balance of {current}"
               )
          stores.wallets.credit(broker_id, bucket, amount)
          tx = stores.transactions.append(WalletTransaction(
               wallet_owner_id=broker_id,
               type=TransactionType.ADJUSTMENT,
               wallet_bucket=bucket,
               amount=amount,
               description=description.strip(),
               created_at=utcnow()
          ))

     logger.info("Adjusted %s balance of broker %s by %s", bucket.value, broker_id, amount)
     return tx


def request_withdrawal(
     stores: LedgerStores,
     broker_id: int,
     amount: Decimal,
     note: Optional[str] = None
) -> WithdrawalRequest:
     """
     Raise a pending withdrawal request. The wallet is debited only on approval.

     Raises:
          BrokerNotFound, InvalidAmount, InsufficientBalance
     """
     amount = quantize_money(Decimal(str(amount)))
     if amount <= 0:
          raise InvalidAmount("Withdrawal amount must be greater than zero")

     with stores.atomic():
          _require_broker(stores, broker_id)
          available = available_balance(stores, broker_id)
          if amount > available:
               raise InsufficientBalance(f"Requested {amount} exceeds available balance of {available}")
          request = stores.withdrawals.add(WithdrawalRequest(
               broker_id=broker_id,
               amount=amount,
               status=WithdrawalStatus.PENDING,
               note=note,
               requested_at=utcnow()
          ))

     logger.info("Broker %s requested withdrawal of %s (request %s)", broker_id, amount, request.id)
     return request


def _debit(stores: LedgerStores, request: WithdrawalRequest, bucket: WalletBucket, amount: Decimal) -> None:
     stores.wallets.credit(request.broker_id, bucket, -amount)
     stores.transactions.append(WalletTransaction(
          wallet_owner_id=request.broker_id,
          type=TransactionType.WITHDRAWAL,
          wallet_bucket=bucket,
          amount=-amount,
          description=f"Withdrawal #{request.id} via {request.payment_type.value}",
          reference_id=f"withdrawal-{request.id}",
          created_at=utcnow()
     ))


def process_withdrawal(
     stores: LedgerStores,
     request_id: int,
     action: str,
     processed_by: str,
     payment_type: Optional[PaymentType] = None,
     rejection_reason: Optional[str] = None
) -> WithdrawalRequest:
     """
     Approve or reject a pending withdrawal request.

     Approve: requires payment_type; debits the direct-sale balance first and
     the downline balance for the rest, one withdrawal transaction per bucket.
     Reject: requires a reason; balances are untouched.

     Raises:
          WithdrawalNotFound, InvalidWithdrawalState, InvalidRequest,
          InsufficientBalance
     """
     if action not in (APPROVE, REJECT):
          raise InvalidRequest(f"Unknown action '{action}'; use approve or reject")
     if action == APPROVE and payment_type is None:
          raise InvalidRequest("Payment type is required to approve a withdrawal")
     if action == REJECT and not (rejection_reason and rejection_reason.strip()):
          raise InvalidRequest("Rejection reason is required")

     with stores.atomic():
          request = stores.withdrawals.get(request_id, for_update=True)
          if request is None:
               raise WithdrawalNotFound(request_id)
          if request.status != WithdrawalStatus.PENDING:
               raise InvalidWithdrawalState(
                    f"Withdrawal request {request_id} is already {request.status.value}"
               )

          request.processed_by = processed_by
          request.processed_at = utcnow()

          if action == REJECT:
               request.status = WithdrawalStatus.REJECTED
               request.rejection_reason = rejection_reason.strip()
          else:
               amount = Decimal(request.amount)
               wallet = stores.wallets.get(request.broker_id, for_update=True)
               if wallet is None or Decimal(wallet.total_balance) < amount:
                    raise InsufficientBalance(
                         f"Wallet of broker {request.broker_id} cannot cover withdrawal of {amount}"
                    )
               request.status = WithdrawalStatus.APPROVED
               request.payment_type = payment_type

               from_direct = min(amount, wallet.balance_of(WalletBucket.DIRECT))
               from_downline = amount - from_direct
               if from_direct > 0:
                    _debit(stores, request, WalletBucket.DIRECT, from_direct)
               if from_downline > 0:
                    _debit(stores, request, WalletBucket.DOWNLINE, from_downline)

     logger.info("Withdrawal request %s %s by %s", request_id, request.status.value, processed_by)
     return request
