# services/sql_stores.py
"""
SQLAlchemy implementation of the ledger stores.

All stores share one Session. SqlStores.atomic() commits only when the
outermost unit finishes and rolls the whole session back on any error.
Row locks (with_for_update) are honoured by SQL Server / PostgreSQL and
ignored by SQLite.
"""
import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Generator, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from models import (
     Broker,
     CommissionStatus,
     PaymentRecord,
     Plot,
     PlotStatus,
     Wallet,
     WalletBucket,
     WalletTransaction,
     WithdrawalRequest,
     WithdrawalStatus,
)
from .errors import TransactionWriteFailed, WalletUpsertFailed

logger = logging.getLogger(__name__)


def _locked(db: Session, query: Query) -> Query:
     """
     Lock the row and reload it from the database.

     Pending changes of this unit are flushed first so the reload keeps them;
     objects loaded earlier in the session (e.g. by a listing) are refreshed
     instead of returned as they were.
     """
     db.flush()
     return query.with_for_update().populate_existing()


class SqlPlotStore:

     def __init__(self, db: Session):
          self.db = db

     def get(self, plot_id: int, for_update: bool = False) -> Optional[Plot]:
          query = self.db.query(Plot).filter(Plot.id == plot_id)
          if for_update:
               query = _locked(self.db, query)
          return query.first()

     def find_by_number(self, project_name: str, plot_number: int) -> Optional[Plot]:
          return (
               self.db.query(Plot)
               .filter(Plot.project_name == project_name, Plot.plot_number == plot_number)
               .first()
          )

     def list(self, status: Optional[PlotStatus] = None, broker_id: Optional[int] = None) -> List[Plot]:
          query = self.db.query(Plot)
          if status is not None:
               query = query.filter(Plot.status == status)
          if broker_id is not None:
               query = query.filter(Plot.broker_id == broker_id)
          return query.order_by(Plot.project_name, Plot.plot_number).all()

     def add(self, plot: Plot) -> Plot:
          self.db.add(plot)
          self.db.flush()
          return plot

     def delete(self, plot: Plot) -> None:
          self.db.delete(plot)
          self.db.flush()

     def payments(self, plot_id: int) -> List[PaymentRecord]:
          return (
               self.db.query(PaymentRecord)
               .filter(PaymentRecord.plot_id == plot_id)
               .order_by(PaymentRecord.id)
               .all()
          )

     def append_payment(self, record: PaymentRecord) -> PaymentRecord:
          self.db.add(record)
          self.db.flush()
          return record

     def claim_commission(self, plot_id: int) -> bool:
          # Pending plot changes (e.g. status -> sold) must reach the row before the conditional update
          self.db.flush()
          updated = (
               self.db.query(Plot)
               .filter(Plot.id == plot_id, Plot.commission_status == CommissionStatus.PENDING)
               .update({Plot.commission_status: CommissionStatus.PAID}, synchronize_session="evaluate")
          )
          return updated == 1


class SqlBrokerStore:

     def __init__(self, db: Session):
          self.db = db

     def get(self, broker_id: int) -> Optional[Broker]:
          return self.db.query(Broker).filter(Broker.id == broker_id).first()

     def add(self, broker: Broker) -> Broker:
          self.db.add(broker)
          self.db.flush()
          return broker

     def children(self, broker_id: int) -> List[Broker]:
          return self.db.query(Broker).filter(Broker.upline_id == broker_id).order_by(Broker.id).all()

     def list(self) -> List[Broker]:
          return self.db.query(Broker).order_by(Broker.id).all()


class SqlWalletStore:

     def __init__(self, db: Session):
          self.db = db

     def get(self, owner_id: int, for_update: bool = False) -> Optional[Wallet]:
          query = self.db.query(Wallet).filter(Wallet.owner_id == owner_id)
          if for_update:
               query = _locked(self.db, query)
          return query.first()

     def credit(self, owner_id: int, bucket: WalletBucket, amount: Decimal) -> Wallet:
          try:
               wallet = self.get(owner_id, for_update=True)
               if wallet is None:
                    wallet = Wallet.empty(owner_id)
                    self.db.add(wallet)
               wallet.apply(bucket, amount)
               self.db.flush()
               return wallet
          except SQLAlchemyError as e:
               logger.error("Wallet upsert failed for broker %s: %s", owner_id, e)
               raise WalletUpsertFailed(f"Failed to credit wallet of broker {owner_id}") from e

     def save(self, wallet: Wallet) -> Wallet:
          try:
               self.db.add(wallet)
               self.db.flush()
               return wallet
          except SQLAlchemyError as e:
               raise WalletUpsertFailed(f"Failed to update wallet of broker {wallet.owner_id}") from e


class SqlTransactionStore:

     def __init__(self, db: Session):
          self.db = db

     def append(self, tx: WalletTransaction) -> WalletTransaction:
          try:
               self.db.add(tx)
               self.db.flush()
               return tx
          except SQLAlchemyError as e:
               logger.error("Transaction write failed for broker %s: %s", tx.wallet_owner_id, e)
               raise TransactionWriteFailed(
                    f"Failed to record {tx.type.value} transaction for broker {tx.wallet_owner_id}"
               ) from e

     def exists(self, owner_id: int, plot_id: int, level: int) -> bool:
          return (
               self.db.query(WalletTransaction.id)
               .filter(
                    WalletTransaction.wallet_owner_id == owner_id,
                    WalletTransaction.plot_id == plot_id,
                    WalletTransaction.level == level,
               )
               .first()
               is not None
          )

     def for_owner(self, owner_id: int) -> List[WalletTransaction]:
          return (
               self.db.query(WalletTransaction)
               .filter(WalletTransaction.wallet_owner_id == owner_id)
               .order_by(WalletTransaction.id.desc())
               .all()
          )

     def for_plot(self, plot_id: int) -> List[WalletTransaction]:
          return (
               self.db.query(WalletTransaction)
               .filter(WalletTransaction.plot_id == plot_id)
               .order_by(WalletTransaction.id)
               .all()
          )


class SqlWithdrawalStore:

     def __init__(self, db: Session):
          self.db = db

     def get(self, request_id: int, for_update: bool = False) -> Optional[WithdrawalRequest]:
          query = self.db.query(WithdrawalRequest).filter(WithdrawalRequest.id == request_id)
          if for_update:
               query = _locked(self.db, query)
          return query.first()

     def add(self, request: WithdrawalRequest) -> WithdrawalRequest:
          self.db.add(request)
          self.db.flush()
          return request

     def pending_total(self, broker_id: int) -> Decimal:
          total = (
               self.db.query(func.coalesce(func.sum(WithdrawalRequest.amount), 0))
               .filter(
                    WithdrawalRequest.broker_id == broker_id,
                    WithdrawalRequest.status == WithdrawalStatus.PENDING,
               )
               .scalar()
          )
          return Decimal(str(total or 0))

     def list(
          self,
          status: Optional[WithdrawalStatus] = None,
          broker_id: Optional[int] = None,
     ) -> List[WithdrawalRequest]:
          query = self.db.query(WithdrawalRequest)
          if status is not None:
               query = query.filter(WithdrawalRequest.status == status)
          if broker_id is not None:
               query = query.filter(WithdrawalRequest.broker_id == broker_id)
          return query.order_by(WithdrawalRequest.requested_at.desc(), WithdrawalRequest.id.desc()).all()


class SqlStores:
     """All stores over one session, with a depth-counted unit of work."""

     def __init__(self, db: Session):
          self.db = db
          self.plots = SqlPlotStore(db)
          self.brokers = SqlBrokerStore(db)
          self.wallets = SqlWalletStore(db)
          self.transactions = SqlTransactionStore(db)
          self.withdrawals = SqlWithdrawalStore(db)
          self._depth = 0

     @contextmanager
     def atomic(self) -> Generator[None, None, None]:
          self._depth += 1
          try:
               yield
               if self._depth == 1:
                    self.db.commit()
          except Exception:
               if self._depth == 1:
                    self.db.rollback()
               raise
          finally:
               self._depth -= 1
