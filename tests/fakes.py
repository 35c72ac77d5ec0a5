"""
In-memory implementations of the ledger stores.

Rows are plain (transient) ORM instances. atomic() snapshots every row's
column values at the outermost level and restores them on error, so
rollback behaves like a database transaction.
"""

import itertools
from contextlib import contextmanager
from decimal import Decimal
from typing import Dict, List, Optional, Set

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
from services.errors import TransactionWriteFailed, WalletUpsertFailed


def column_values(row) -> dict:
    """Mapped column attributes of a row."""
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


class FakePlotStore:

    def __init__(self, owner: "InMemoryStores"):
        self.owner = owner
        self.rows: Dict[int, Plot] = {}
        self.payment_rows: List[PaymentRecord] = []
        self.claim_fails = False
        self._ids = itertools.count(1)
        self._payment_ids = itertools.count(1)

    def get(self, plot_id: int, for_update: bool = False) -> Optional[Plot]:
        return self.rows.get(plot_id)

    def find_by_number(self, project_name: str, plot_number: int) -> Optional[Plot]:
        for plot in self.rows.values():
            if plot.project_name == project_name and plot.plot_number == plot_number:
                return plot
        return None

    def list(self, status: Optional[PlotStatus] = None, broker_id: Optional[int] = None) -> List[Plot]:
        plots = [
            p for p in self.rows.values()
            if (status is None or p.status == status) and (broker_id is None or p.broker_id == broker_id)
        ]
        return sorted(plots, key=lambda p: (p.project_name, p.plot_number))

    def add(self, plot: Plot) -> Plot:
        plot.id = next(self._ids)
        self.rows[plot.id] = plot
        return plot

    def delete(self, plot: Plot) -> None:
        del self.rows[plot.id]

    def payments(self, plot_id: int) -> List[PaymentRecord]:
        return [p for p in self.payment_rows if p.plot_id == plot_id]

    def append_payment(self, record: PaymentRecord) -> PaymentRecord:
        record.id = next(self._payment_ids)
        self.payment_rows.append(record)
        return record

    def claim_commission(self, plot_id: int) -> bool:
        plot = self.rows[plot_id]
        if self.claim_fails or plot.commission_status != CommissionStatus.PENDING:
            return False
        plot.commission_status = CommissionStatus.PAID
        return True


class FakeBrokerStore:

    def __init__(self, owner: "InMemoryStores"):
        self.owner = owner
        self.rows: Dict[int, Broker] = {}
        self._ids = itertools.count(1)

    def get(self, broker_id: int) -> Optional[Broker]:
        return self.rows.get(broker_id)

    def add(self, broker: Broker) -> Broker:
        broker.id = next(self._ids)
        self.rows[broker.id] = broker
        return broker

    def children(self, broker_id: int) -> List[Broker]:
        return [b for b in self.rows.values() if b.upline_id == broker_id]

    def list(self) -> List[Broker]:
        return list(self.rows.values())


class FakeWalletStore:

    def __init__(self, owner: "InMemoryStores"):
        self.owner = owner
        self.rows: Dict[int, Wallet] = {}
        self.fail_for: Set[int] = set()
        self._ids = itertools.count(1)

    def get(self, owner_id: int, for_update: bool = False) -> Optional[Wallet]:
        return self.rows.get(owner_id)

    def credit(self, owner_id: int, bucket: WalletBucket, amount: Decimal) -> Wallet:
        if owner_id in self.fail_for:
            raise WalletUpsertFailed(f"Failed to credit wallet of broker {owner_id}")
        wallet = self.rows.get(owner_id)
        if wallet is None:
            wallet = self.save(Wallet.empty(owner_id))
        wallet.apply(bucket, amount)
        return wallet

    def save(self, wallet: Wallet) -> Wallet:
        if wallet.id is None:
            wallet.id = next(self._ids)
        self.rows[wallet.owner_id] = wallet
        return wallet


class FakeTransactionStore:

    def __init__(self, owner: "InMemoryStores"):
        self.owner = owner
        self.rows: List[WalletTransaction] = []
        self._ids = itertools.count(1)

    def append(self, tx: WalletTransaction) -> WalletTransaction:
        # Same rule as the unique index on (wallet_owner_id, plot_id, level)
        if tx.plot_id is not None and self.exists(tx.wallet_owner_id, tx.plot_id, tx.level):
            raise TransactionWriteFailed(
                f"Failed to record {tx.type.value} transaction for broker {tx.wallet_owner_id}"
            )
        tx.id = next(self._ids)
        self.rows.append(tx)
        return tx

    def exists(self, owner_id: int, plot_id: int, level: int) -> bool:
        return any(
            t.wallet_owner_id == owner_id and t.plot_id == plot_id and t.level == level
            for t in self.rows
        )

    def for_owner(self, owner_id: int) -> List[WalletTransaction]:
        return [t for t in reversed(self.rows) if t.wallet_owner_id == owner_id]

    def for_plot(self, plot_id: int) -> List[WalletTransaction]:
        return [t for t in self.rows if t.plot_id == plot_id]


class FakeWithdrawalStore:

    def __init__(self, owner: "InMemoryStores"):
        self.owner = owner
        self.rows: Dict[int, WithdrawalRequest] = {}
        self._ids = itertools.count(1)

    def get(self, request_id: int, for_update: bool = False) -> Optional[WithdrawalRequest]:
        return self.rows.get(request_id)

    def add(self, request: WithdrawalRequest) -> WithdrawalRequest:
        request.id = next(self._ids)
        self.rows[request.id] = request
        return request

    def pending_total(self, broker_id: int) -> Decimal:
        return sum(
            (Decimal(r.amount) for r in self.rows.values()
             if r.broker_id == broker_id and r.status == WithdrawalStatus.PENDING),
            Decimal("0.00"),
        )

    def list(
        self,
        status: Optional[WithdrawalStatus] = None,
        broker_id: Optional[int] = None,
    ) -> List[WithdrawalRequest]:
        return [
            r for r in sorted(self.rows.values(), key=lambda r: r.id, reverse=True)
            if (status is None or r.status == status) and (broker_id is None or r.broker_id == broker_id)
        ]


class InMemoryStores:
    """LedgerStores bundle with snapshot/restore transactions."""

    def __init__(self):
        self.plots = FakePlotStore(self)
        self.brokers = FakeBrokerStore(self)
        self.wallets = FakeWalletStore(self)
        self.transactions = FakeTransactionStore(self)
        self.withdrawals = FakeWithdrawalStore(self)
        self.commits = 0
        self.rollbacks = 0
        self._depth = 0

    def _containers(self):
        return [
            (self.plots, "rows"),
            (self.plots, "payment_rows"),
            (self.brokers, "rows"),
            (self.wallets, "rows"),
            (self.transactions, "rows"),
            (self.withdrawals, "rows"),
        ]

    def _snapshot(self):
        containers = []
        values = []
        for store, attr in self._containers():
            container = getattr(store, attr)
            containers.append(container.copy())
            rows = container.values() if isinstance(container, dict) else container
            values.extend((row, column_values(row)) for row in rows)
        return containers, values

    def _restore(self, snapshot) -> None:
        containers, values = snapshot
        for (store, attr), saved in zip(self._containers(), containers):
            setattr(store, attr, saved)
        for row, columns in values:
            for key, value in columns.items():
                setattr(row, key, value)

    @contextmanager
    def atomic(self):
        snapshot = self._snapshot() if self._depth == 0 else None
        self._depth += 1
        try:
            yield
            if self._depth == 1:
                self.commits += 1
        except Exception:
            if self._depth == 1:
                self._restore(snapshot)
                self.rollbacks += 1
            raise
        finally:
            self._depth -= 1
