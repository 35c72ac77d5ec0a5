# services/stores.py
"""
Repository interfaces used by the ledger, commission and wallet services.

The services never touch a database session directly; they receive a
LedgerStores bundle. services.sql_stores provides the SQLAlchemy version,
tests substitute in-memory fakes.
"""
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import List, Optional, Protocol

from models import (
     Broker,
     PaymentRecord,
     Plot,
     PlotStatus,
     Wallet,
     WalletBucket,
     WalletTransaction,
     WithdrawalRequest,
     WithdrawalStatus,
)


class PlotStore(Protocol):

     def get(self, plot_id: int, for_update: bool = False) -> Optional[Plot]: ...

     def find_by_number(self, project_name: str, plot_number: int) -> Optional[Plot]: ...

     def list(self, status: Optional[PlotStatus] = None, broker_id: Optional[int] = None) -> List[Plot]: ...

     def add(self, plot: Plot) -> Plot: ...

     def delete(self, plot: Plot) -> None: ...

     def payments(self, plot_id: int) -> List[PaymentRecord]: ...

     def append_payment(self, record: PaymentRecord) -> PaymentRecord: ...

     def claim_commission(self, plot_id: int) -> bool:
          """Atomically move commission_status pending -> paid. True if this caller won."""
          ...


class BrokerStore(Protocol):

     def get(self, broker_id: int) -> Optional[Broker]: ...

     def add(self, broker: Broker) -> Broker: ...

     def children(self, broker_id: int) -> List[Broker]: ...

     def list(self) -> List[Broker]: ...


class WalletStore(Protocol):

     def get(self, owner_id: int, for_update: bool = False) -> Optional[Wallet]: ...

     def credit(self, owner_id: int, bucket: WalletBucket, amount: Decimal) -> Wallet:
          """Upsert: create a zero wallet if missing, then add amount to one bucket."""
          ...

     def save(self, wallet: Wallet) -> Wallet: ...


class TransactionStore(Protocol):

     def append(self, tx: WalletTransaction) -> WalletTransaction: ...

     def exists(self, owner_id: int, plot_id: int, level: int) -> bool: ...

     def for_owner(self, owner_id: int) -> List[WalletTransaction]: ...

     def for_plot(self, plot_id: int) -> List[WalletTransaction]: ...


class WithdrawalStore(Protocol):

     def get(self, request_id: int, for_update: bool = False) -> Optional[WithdrawalRequest]: ...

     def add(self, request: WithdrawalRequest) -> WithdrawalRequest: ...

     def pending_total(self, broker_id: int) -> Decimal: ...

     def list(
          self,
          status: Optional[WithdrawalStatus] = None,
          broker_id: Optional[int] = None,
     ) -> List[WithdrawalRequest]: ...


class LedgerStores(Protocol):
     """Bundle of stores sharing one unit of work."""

     plots: PlotStore
     brokers: BrokerStore
     wallets: WalletStore
     transactions: TransactionStore
     withdrawals: WithdrawalStore

     def atomic(self) -> AbstractContextManager:
          """All writes inside commit together or not at all. Nested calls join the outer unit."""
          ...
