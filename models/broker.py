# models/broker.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base


class Broker(Base):
     """
     Broker profile - a participant in the referral hierarchy.

     upline_id points at the broker who referred this one. Each broker has at
     most one upline, so the hierarchy is a tree.
     """
     __tablename__ = "brokers"

     id = Column(Integer, primary_key=True, autoincrement=True)
     full_name = Column(String(200), nullable=False)
     email = Column(String(255), nullable=True, unique=True)
     phone = Column(String(50), nullable=True)
     upline_id = Column(Integer, ForeignKey("brokers.id"), nullable=True, index=True)

     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     upline = relationship("Broker", remote_side=[id], back_populates="downline")
     downline = relationship("Broker", back_populates="upline")
     plots = relationship("Plot", back_populates="broker")
     wallet = relationship("Wallet", back_populates="owner", uselist=False)

     def __repr__(self):
          return f"<Broker(id={self.id}, name='{self.full_name}', upline_id={self.upline_id})>"
