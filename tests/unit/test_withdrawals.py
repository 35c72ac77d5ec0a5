"""
Unit tests for wallets, adjustments and withdrawal requests.

Tests cover:
- Lazy wallet creation
- Adjustments (credit, debit, no negative bucket)
- Available balance = total - pending requests
- Approval order (direct first, then downline) and rejection
"""

from decimal import Decimal

import pytest

from models import PaymentType, TransactionType, WalletBucket, WithdrawalStatus
from services import (
    BrokerNotFound,
    InsufficientBalance,
    InvalidAmount,
    InvalidRequest,
    InvalidWithdrawalState,
    adjust_wallet,
    available_balance,
    create_broker,
    get_wallet,
    process_withdrawal,
    request_withdrawal,
)


@pytest.fixture
def funded(stores):
    """Broker with 1,000 direct and 500 downline balance."""
    broker = create_broker(stores, "Funded Broker")
    adjust_wallet(stores, broker.id, Decimal("1000"), WalletBucket.DIRECT, "Opening balance")
    adjust_wallet(stores, broker.id, Decimal("500"), WalletBucket.DOWNLINE, "Opening balance")
    return broker


def ledger_sum(stores, broker):
    return sum((Decimal(t.amount) for t in stores.transactions.for_owner(broker.id)), Decimal("0"))


class TestWallet:
    """Wallet access and adjustments."""

    def test_wallet_created_lazily(self, stores):
        """Test an empty wallet is created on first access."""
        broker = create_broker(stores, "New Broker")

        wallet = get_wallet(stores, broker.id)

        assert wallet.total_balance == Decimal("0.00")
        assert stores.wallets.get(broker.id) is wallet

    def test_unknown_broker(self, stores):
        with pytest.raises(BrokerNotFound):
            get_wallet(stores, 99)

    def test_adjustments_keep_total(self, funded, stores):
        """Test total = direct + downline = sum of transactions."""
        wallet = stores.wallets.get(funded.id)

        assert wallet.total_balance == Decimal("1500.00")
        assert ledger_sum(stores, funded) == wallet.total_balance
        assert all(t.type == TransactionType.ADJUSTMENT for t in stores.transactions.rows)

    def test_debit_below_zero_rejected(self, funded, stores):
        """Test a debit larger than the bucket."""
        with pytest.raises(InsufficientBalance):
            adjust_wallet(stores, funded.id, Decimal("-600"), WalletBucket.DOWNLINE, "Too much")
        assert stores.wallets.get(funded.id).downline_sale_balance == Decimal("500.00")

    def test_zero_adjustment_rejected(self, funded, stores):
        with pytest.raises(InvalidAmount):
            adjust_wallet(stores, funded.id, Decimal("0"), WalletBucket.DIRECT, "Nothing")


class TestRequestWithdrawal:
    """Requests against the available balance."""

    def test_pending_requests_reduce_available(self, funded, stores):
        """Test a second request cannot spend what the first reserved."""
        request_withdrawal(stores, funded.id, Decimal("1200"))

        assert available_balance(stores, funded.id) == Decimal("300.00")
        with pytest.raises(InsufficientBalance):
            request_withdrawal(stores, funded.id, Decimal("301"))

    def test_request_does_not_debit(self, funded, stores):
        request = request_withdrawal(stores, funded.id, Decimal("100"), note="March")

        assert request.status == WithdrawalStatus.PENDING
        assert stores.wallets.get(funded.id).total_balance == Decimal("1500.00")

    def test_non_positive_amount(self, funded, stores):
        with pytest.raises(InvalidAmount):
            request_withdrawal(stores, funded.id, Decimal("0"))


class TestProcessWithdrawal:
    """Approval and rejection by an admin."""

    def test_approve_debits_direct_first(self, funded, stores):
        """Test 1,200 takes all 1,000 direct and 200 downline."""
        request = request_withdrawal(stores, funded.id, Decimal("1200"))

        process_withdrawal(stores, request.id, "approve", "7", payment_type=PaymentType.CHEQUE)

        wallet = stores.wallets.get(funded.id)
        assert request.status == WithdrawalStatus.APPROVED
        assert request.processed_by == "7"
        assert wallet.direct_sale_balance == Decimal("0.00")
        assert wallet.downline_sale_balance == Decimal("300.00")
        assert wallet.total_balance == Decimal("300.00")
        debits = [t for t in stores.transactions.rows if t.type == TransactionType.WITHDRAWAL]
        assert [(t.wallet_bucket, t.amount) for t in debits] == [
            (WalletBucket.DIRECT, Decimal("-1000.00")),
            (WalletBucket.DOWNLINE, Decimal("-200.00")),
        ]
        assert ledger_sum(stores, funded) == wallet.total_balance

    def test_approve_requires_payment_type(self, funded, stores):
        request = request_withdrawal(stores, funded.id, Decimal("100"))

        with pytest.raises(InvalidRequest):
            process_withdrawal(stores, request.id, "approve", "7")
        assert request.status == WithdrawalStatus.PENDING

    def test_reject_requires_reason(self, funded, stores):
        request = request_withdrawal(stores, funded.id, Decimal("100"))

        with pytest.raises(InvalidRequest):
            process_withdrawal(stores, request.id, "reject", "7", rejection_reason="  ")

    def test_reject_keeps_balance(self, funded, stores):
        """Test a rejected request frees the reserved amount."""
        request = request_withdrawal(stores, funded.id, Decimal("1500"))

        process_withdrawal(stores, request.id, "reject", "7", rejection_reason="Bank details missing")

        assert request.status == WithdrawalStatus.REJECTED
        assert request.rejection_reason == "Bank details missing"
        assert available_balance(stores, funded.id) == Decimal("1500.00")

    def test_only_pending_can_be_processed(self, funded, stores):
        """Test a processed request cannot be processed again."""
        request = request_withdrawal(stores, funded.id, Decimal("100"))
        process_withdrawal(stores, request.id, "approve", "7", payment_type=PaymentType.CASH)

        with pytest.raises(InvalidWithdrawalState):
            process_withdrawal(stores, request.id, "approve", "7", payment_type=PaymentType.CASH)
        assert stores.wallets.get(funded.id).total_balance == Decimal("1400.00")

    def test_balance_spent_elsewhere_blocks_approval(self, funded, stores):
        """Test approval re-checks the wallet."""
        request = request_withdrawal(stores, funded.id, Decimal("1500"))
        stores.wallets.get(funded.id).apply(WalletBucket.DIRECT, Decimal("-1000"))

        with pytest.raises(InsufficientBalance):
            process_withdrawal(stores, request.id, "approve", "7", payment_type=PaymentType.CASH)
        assert request.status == WithdrawalStatus.PENDING
