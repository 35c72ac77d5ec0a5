# schemas/payment.py
"""
Pydantic schemas for the plot payment history API.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from .commission import DistributionResponse
from .plot import PlotResponse


class PaymentCreate(BaseModel):
     """Request body for POST /api/plots/{plot_id}/payments."""

     amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2, description="Amount received")
     payment_date: Optional[date] = Field(None, description="Date received (defaults to today)")
     payment_method: Optional[str] = Field(None, max_length=50, description="cash, cheque, online_transfer...")
     reference: Optional[str] = Field(None, max_length=100, description="Cheque number or bank transfer id")
     notes: Optional[str] = Field(None, max_length=1000)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "amount": 400000.00,
                    "payment_date": "2026-03-15",
                    "payment_method": "cheque",
                    "reference": "CHQ-004512",
                    "notes": "Second installment"
               }
          }
     )


class PaymentRecordResponse(BaseModel):
     """A single entry of a plot's payment history."""

     id: int
     plot_id: int
     amount_received: Decimal
     payment_date: date
     payment_method: Optional[str] = None
     reference: Optional[str] = None
     notes: Optional[str] = None
     recorded_at: datetime
     transaction_hash: str = Field(..., description="Chain hash for client verification")
     previous_hash: str

     model_config = ConfigDict(from_attributes=True)


class PaymentResponse(BaseModel):
     """Response for POST /api/plots/{plot_id}/payments."""

     payment: PaymentRecordResponse
     plot: PlotResponse
     sold_now: bool = Field(default=False, description="True if this payment crossed the sale threshold")
     distribution: Optional[DistributionResponse] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "payment": {
                         "id": 7,
                         "plot_id": 1,
                         "amount_received": 400000.00,
                         "payment_date": "2026-03-15",
                         "recorded_at": "2026-03-15T09:12:44",
                         "transaction_hash": "a1b2c3d4e5f6...",
                         "previous_hash": "0"
                    },
                    "plot": {"id": 1, "status": "sold", "paid_percentage": 50.00},
                    "sold_now": True,
                    "distribution": {"plot_id": 1, "distributed": True, "total_distributed": 85000.00}
               }
          }
     )


class PaymentHistoryResponse(BaseModel):
     plot_id: int
     payments: List[PaymentRecordResponse]
     total_received: Decimal


class VerificationResponse(BaseModel):
     """Response for GET /api/plots/{plot_id}/payments/verify."""

     plot_id: int
     verified: bool
     message: str
