# schemas/__init__.py
from .commission import (
     PlotRef,
     LegacyPlotRef,
     CreditResponse,
     DistributionResponse,
     BreakdownResponse,
     ReconcileResponse,
     ReconcileAllResponse,
)
from .plot import (
     PlotCreate,
     PlotUpdate,
     PlotBulkCreate,
     BulkAddResponse,
     BookingRequest,
     PlotResponse,
     PlotListResponse,
     BookingResponse,
     DeletableResponse,
)
from .payment import (
     PaymentCreate,
     PaymentRecordResponse,
     PaymentResponse,
     PaymentHistoryResponse,
     VerificationResponse,
)
from .broker import BrokerCreate, BrokerResponse, DownlineNode
from .wallet import WalletResponse, TransactionResponse, TransactionListResponse, WalletAdjustment
from .withdrawal import (
     WithdrawalAction,
     WithdrawalCreate,
     WithdrawalProcess,
     WithdrawalResponse,
     WithdrawalListResponse,
)

__all__ = [
     "PlotRef",
     "LegacyPlotRef",
     "CreditResponse",
     "DistributionResponse",
     "BreakdownResponse",
     "ReconcileResponse",
     "ReconcileAllResponse",
     "PlotCreate",
     "PlotUpdate",
     "PlotBulkCreate",
     "BulkAddResponse",
     "BookingRequest",
     "PlotResponse",
     "PlotListResponse",
     "BookingResponse",
     "DeletableResponse",
     "PaymentCreate",
     "PaymentRecordResponse",
     "PaymentResponse",
     "PaymentHistoryResponse",
     "VerificationResponse",
     "BrokerCreate",
     "BrokerResponse",
     "DownlineNode",
     "WalletResponse",
     "TransactionResponse",
     "TransactionListResponse",
     "WalletAdjustment",
     "WithdrawalAction",
     "WithdrawalCreate",
     "WithdrawalProcess",
     "WithdrawalResponse",
     "WithdrawalListResponse",
]
