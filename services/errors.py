# services/errors.py
"""
Domain errors raised by the ledger, commission and wallet services.

Validation errors are raised before any write. Persistence errors
(WalletUpsertFailed, TransactionWriteFailed) abort the surrounding atomic
unit so nothing is half-applied.
"""


class LedgerError(Exception):
     """Base class for all domain errors. http_status is used by the API layer."""
     http_status = 400

     def __init__(self, message: str):
          super().__init__(message)
          self.message = message


class PlotNotFound(LedgerError):
     http_status = 404

     def __init__(self, plot_id: int):
          super().__init__(f"Plot with ID {plot_id} not found")
          self.plot_id = plot_id


class BrokerNotFound(LedgerError):
     http_status = 404

     def __init__(self, broker_id: int):
          super().__init__(f"Broker with ID {broker_id} not found")
          self.broker_id = broker_id


class WithdrawalNotFound(LedgerError):
     http_status = 404

     def __init__(self, request_id: int):
          super().__init__(f"Withdrawal request with ID {request_id} not found")
          self.request_id = request_id


class InvalidPlotState(LedgerError):
     http_status = 409


class InvalidWithdrawalState(LedgerError):
     http_status = 409


class DuplicatePlot(LedgerError):
     http_status = 409


class InvalidAmount(LedgerError):
     pass


class PaymentExceedsBalance(LedgerError):

     def __init__(self, amount, remaining):
          super().__init__(f"Payment amount {amount} exceeds remaining balance of {remaining}")
          self.amount = amount
          self.remaining = remaining


class MissingTotalAmount(LedgerError):

     def __init__(self, plot_id: int):
          super().__init__(f"Plot {plot_id} has no total plot amount set")
          self.plot_id = plot_id


class InsufficientBalance(LedgerError):
     pass


class WalletUpsertFailed(LedgerError):
     http_status = 500


class TransactionWriteFailed(LedgerError):
     http_status = 500


class InvalidRequest(LedgerError):
     """Missing or malformed input that is not an amount."""
