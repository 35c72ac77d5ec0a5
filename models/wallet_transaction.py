# models/wallet_transaction.py
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, Index, func, text
from .base import Base, Money
from .wallet import WalletBucket


class TransactionType(str, enum.Enum):
     COMMISSION = "commission"
     WITHDRAWAL = "withdrawal"
     ADJUSTMENT = "adjustment"


class WalletTransaction(Base):
     """
     Immutable ledger entry tied to a broker's wallet.

     Commission entries reference the plot that triggered them and the level
     they were paid at (0 = direct sale, 1.. = upline level). The filtered
     unique index makes a second credit for the same (wallet, plot, level)
     impossible even if two distributions race.
     """
     __tablename__ = "transactions"
     __table_args__ = (
          Index(
               "uq_transactions_owner_plot_level",
               "wallet_owner_id",
               "plot_id",
               "level",
               unique=True,
               mssql_where=text("plot_id IS NOT NULL"),
               postgresql_where=text("plot_id IS NOT NULL"),
               sqlite_where=text("plot_id IS NOT NULL"),
          ),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     wallet_owner_id = Column(
          Integer,
          ForeignKey("brokers.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     type = Column(
          Enum(TransactionType, name="transaction_type", create_constraint=True),
          nullable=False,
          index=True
     )
     wallet_bucket = Column(
          Enum(WalletBucket, name="wallet_bucket", create_constraint=True),
          nullable=False
     )
     amount = Column(Money, nullable=False)
     description = Column(Text, nullable=True)
     plot_id = Column(Integer, ForeignKey("plots.id", ondelete="RESTRICT"), nullable=True, index=True)
     level = Column(Integer, nullable=True)
     reference_id = Column(String(64), nullable=True)

     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<WalletTransaction(id={self.id}, owner={self.wallet_owner_id}, type='{self.type}', amount={self.amount})>"
