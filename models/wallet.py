# models/wallet.py
import enum
from decimal import Decimal

from sqlalchemy import Column, Integer, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base, Money


class WalletBucket(str, enum.Enum):
     """Which wallet balance a credit or debit applies to."""
     DIRECT = "direct"
     DOWNLINE = "downline"


class Wallet(Base):
     """
     Wallet model - one per broker, created lazily on the first credit.

     total_balance is always direct_sale_balance + downline_sale_balance.
     """
     __tablename__ = "wallets"

     id = Column(Integer, primary_key=True, autoincrement=True)
     owner_id = Column(
          Integer,
          ForeignKey("brokers.id", ondelete="CASCADE"),
          nullable=False,
          unique=True,
          index=True
     )
     direct_sale_balance = Column(Money, default=0, nullable=False)
     downline_sale_balance = Column(Money, default=0, nullable=False)
     total_balance = Column(Money, default=0, nullable=False)

     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=True)

     # Relationships
     owner = relationship("Broker", back_populates="wallet")

     def __repr__(self):
          return f"<Wallet(owner_id={self.owner_id}, total={self.total_balance})>"

     @classmethod
     def empty(cls, owner_id: int) -> "Wallet":
          zero = Decimal("0.00")
          return cls(
               owner_id=owner_id,
               direct_sale_balance=zero,
               downline_sale_balance=zero,
               total_balance=zero
          )

     def balance_of(self, bucket: WalletBucket) -> Decimal:
          if bucket == WalletBucket.DIRECT:
               return Decimal(self.direct_sale_balance)
          return Decimal(self.downline_sale_balance)

     def apply(self, bucket: WalletBucket, amount: Decimal) -> None:
          """Add a signed amount to one bucket and keep the total in step."""
          if bucket == WalletBucket.DIRECT:
               self.direct_sale_balance = Decimal(self.direct_sale_balance) + amount
          else:
               self.downline_sale_balance = Decimal(self.downline_sale_balance) + amount
          self.total_balance = Decimal(self.direct_sale_balance) + Decimal(self.downline_sale_balance)
