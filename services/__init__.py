# services/__init__.py
from .errors import (
     LedgerError,
     PlotNotFound,
     BrokerNotFound,
     WithdrawalNotFound,
     InvalidPlotState,
     InvalidWithdrawalState,
     InvalidRequest,
     DuplicatePlot,
     InvalidAmount,
     PaymentExceedsBalance,
     MissingTotalAmount,
     InsufficientBalance,
     WalletUpsertFailed,
     TransactionWriteFailed,
)
from .sql_stores import SqlStores
from .commission_service import (
     CommissionCredit,
     DistributionResult,
     commission_breakdown,
     distribute_commission,
     walk_upline,
)
from .ledger_service import (
     GENESIS_HASH,
     LedgerTotals,
     PaymentOutcome,
     append_payment,
     compute_paid_percentage,
     compute_payment_hash,
     derive_totals,
     verify_payment_history,
)
from .plot_service import (
     book_plot,
     bulk_add_plots,
     can_delete_plot,
     cancel_booking,
     create_plot,
     delete_plot,
     get_plot,
     update_plot,
)
from .reconciliation_service import ReconcileResult, ReconcileSummary, reconcile, reconcile_all
from .wallet_service import (
     adjust_wallet,
     available_balance,
     get_wallet,
     process_withdrawal,
     request_withdrawal,
)
from .broker_service import create_broker, downline_tree, get_broker

__all__ = [
     "LedgerError",
     "PlotNotFound",
     "BrokerNotFound",
     "WithdrawalNotFound",
     "InvalidPlotState",
     "InvalidWithdrawalState",
     "InvalidRequest",
     "DuplicatePlot",
     "InvalidAmount",
     "PaymentExceedsBalance",
     "MissingTotalAmount",
     "InsufficientBalance",
     "WalletUpsertFailed",
     "TransactionWriteFailed",
     "SqlStores",
     "CommissionCredit",
     "DistributionResult",
     "commission_breakdown",
     "distribute_commission",
     "walk_upline",
     "GENESIS_HASH",
     "LedgerTotals",
     "PaymentOutcome",
     "append_payment",
     "compute_paid_percentage",
     "compute_payment_hash",
     "derive_totals",
     "verify_payment_history",
     "book_plot",
     "can_delete_plot",
     "cancel_booking",
     "create_plot",
     "delete_plot",
     "get_plot",
     "update_plot",
     "bulk_add_plots",
     "ReconcileResult",
     "ReconcileSummary",
     "reconcile",
     "reconcile_all",
     "adjust_wallet",
     "available_balance",
     "get_wallet",
     "process_withdrawal",
     "request_withdrawal",
     "create_broker",
     "downline_tree",
     "get_broker",
]
