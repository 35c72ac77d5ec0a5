# models/__init__.py
from .base import Base, utcnow
from .broker import Broker
from .plot import Plot, PlotStatus, CommissionStatus
from .payment_record import PaymentRecord
from .wallet import Wallet, WalletBucket
from .wallet_transaction import WalletTransaction, TransactionType
from .withdrawal_request import WithdrawalRequest, WithdrawalStatus, PaymentType

__all__ = [
     "Base",
     "utcnow",
     "Broker",
     "Plot",
     "PlotStatus",
     "CommissionStatus",
     "PaymentRecord",
     "Wallet",
     "WalletBucket",
     "WalletTransaction",
     "TransactionType",
     "WithdrawalRequest",
     "WithdrawalStatus",
     "PaymentType",
]
