# models/plot.py
import enum
from decimal import Decimal

from sqlalchemy import (
     Column, Integer, String, Numeric, DateTime, ForeignKey, Enum, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from .base import Base, Money, Percentage


class PlotStatus(str, enum.Enum):
     """Sale state of a plot."""
     AVAILABLE = "available"
     BOOKED = "booked"
     SOLD = "sold"
     CANCELLED = "cancelled"


class CommissionStatus(str, enum.Enum):
     """Guards a sold plot against a second commission distribution."""
     PENDING = "pending"
     PAID = "paid"


class Plot(Base):
     """
     Plot model - a sellable unit of real estate inventory.

     Lifecycle: available -> booked -> sold, with booked -> available (cancel)
     as the only reverse edge. remaining_amount and paid_percentage are derived
     from the booking amount plus the payment history and are never hand-set.
     """
     __tablename__ = "plots"
     __table_args__ = (
          UniqueConstraint("project_name", "plot_number", name="uq_plots_project_plot_number"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     project_name = Column(String(255), nullable=False, index=True)
     plot_number = Column(Integer, nullable=False)

     # Descriptive
     plot_type = Column(String(100), nullable=True)
     block = Column(String(50), nullable=True)
     dimension = Column(String(100), nullable=True)
     area = Column(Numeric(10, 2), nullable=True)  # in gaj

     status = Column(
          Enum(PlotStatus, name="plot_status", create_constraint=True),
          default=PlotStatus.AVAILABLE,
          nullable=False,
          index=True
     )

     # Booking
     buyer_name = Column(String(255), nullable=True)
     broker_id = Column(Integer, ForeignKey("brokers.id", ondelete="SET NULL"), nullable=True, index=True)

     # Financials
     total_plot_amount = Column(Money, nullable=True)
     booking_amount = Column(Money, nullable=True)
     remaining_amount = Column(Money, nullable=True)
     paid_percentage = Column(Percentage, nullable=True)

     # Incremented on every booking; payments belong to one booking cycle
     booking_cycle = Column(Integer, default=0, nullable=False)

     commission_status = Column(
          Enum(CommissionStatus, name="commission_status", create_constraint=True),
          nullable=True,
          index=True
     )

     # Timestamps
     booked_at = Column(DateTime, nullable=True)
     sold_at = Column(DateTime, nullable=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, onupdate=func.now(), nullable=True)

     # Relationships
     broker = relationship("Broker", back_populates="plots")
     payments = relationship(
          "PaymentRecord",
          back_populates="plot",
          order_by="PaymentRecord.id",
          passive_deletes=True
     )

     def __repr__(self):
          return f"<Plot(id={self.id}, project='{self.project_name}', number={self.plot_number}, status='{self.status}')>"

     @property
     def is_overpaid(self) -> bool:
          """Paid percentage above 100 is a data-quality signal, not clamped."""
          return self.paid_percentage is not None and Decimal(self.paid_percentage) > 100

     @property
     def payment_label(self) -> str:
          if self.paid_percentage is None:
               return "Not booked"
          if self.is_overpaid:
               return "Overpaid"
          return f"{Decimal(self.paid_percentage):.2f}% paid"

     def clear_booking(self) -> None:
          """Reset buyer, broker and financial fields back to an unbooked plot."""
          self.status = PlotStatus.AVAILABLE
          self.buyer_name = None
          self.broker_id = None
          self.total_plot_amount = None
          self.booking_amount = None
          self.remaining_amount = None
          self.paid_percentage = None
          self.commission_status = None
          self.booked_at = None
          self.sold_at = None
