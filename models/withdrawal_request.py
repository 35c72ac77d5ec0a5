# models/withdrawal_request.py
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from .base import Base, Money


class WithdrawalStatus(str, enum.Enum):
     PENDING = "pending"
     APPROVED = "approved"
     REJECTED = "rejected"


class PaymentType(str, enum.Enum):
     CASH = "cash"
     CHEQUE = "cheque"
     ONLINE_TRANSFER = "online_transfer"


class WithdrawalRequest(Base):
     """
     Withdrawal request raised by a broker against their wallet.
     The wallet is only debited when an admin approves the request.
     """
     __tablename__ = "withdrawal_requests"

     id = Column(Integer, primary_key=True, autoincrement=True)
     broker_id = Column(Integer, ForeignKey("brokers.id", ondelete="CASCADE"), nullable=False, index=True)
     amount = Column(Money, nullable=False)
     status = Column(
          Enum(WithdrawalStatus, name="withdrawal_status", create_constraint=True),
          default=WithdrawalStatus.PENDING,
          nullable=False,
          index=True
     )
     note = Column(Text, nullable=True)

     # Set when processed
     payment_type = Column(Enum(PaymentType, name="withdrawal_payment_type", create_constraint=True), nullable=True)
     rejection_reason = Column(String(500), nullable=True)
     processed_by = Column(String(100), nullable=True)

     requested_at = Column(DateTime, server_default=func.now(), nullable=False)
     processed_at = Column(DateTime, nullable=True)

     # Relationships
     broker = relationship("Broker")

     def __repr__(self):
          return f"<WithdrawalRequest(id={self.id}, broker_id={self.broker_id}, amount={self.amount}, status='{self.status}')>"
