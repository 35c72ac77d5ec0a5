# models/payment_record.py
"""
PaymentRecord model - append-only payment history of a booked plot.

Each record stores a SHA-256 hash of (plot_id + amount + payment_date +
recorded_at + previous_hash) and a reference to the previous record's hash
for the same plot, forming one chain per plot.
Records are never updated or deleted; modification is prevented at the
application layer.
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base, Money


class PaymentRecord(Base):
     """Immutable payment entry. Created by the payment ledger updater."""
     __tablename__ = "payment_history"

     id = Column(Integer, primary_key=True, autoincrement=True)
     plot_id = Column(
          Integer,
          ForeignKey("plots.id", ondelete="RESTRICT"),  # Keep the audit trail
          nullable=False,
          index=True
     )
     booking_cycle = Column(Integer, nullable=False, default=0)
     amount_received = Column(Money, nullable=False)
     payment_date = Column(Date, nullable=False)
     payment_method = Column(String(50), nullable=True)
     reference = Column(String(100), nullable=True, index=True)  # Cheque no. / bank transfer id, outside the chain
     notes = Column(Text, nullable=True)

     transaction_hash = Column(String(64), nullable=False, unique=True, index=True)  # SHA-256 hex length
     previous_hash = Column(String(64), nullable=False)  # "0" for the first payment of a plot
     recorded_at = Column(DateTime, nullable=False)

     # Relationships
     plot = relationship("Plot", back_populates="payments")

     def __repr__(self):
          return f"<PaymentRecord(id={self.id}, plot_id={self.plot_id}, amount={self.amount_received})>"
