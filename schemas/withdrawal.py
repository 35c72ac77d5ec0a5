# schemas/withdrawal.py
"""
Pydantic schemas for broker withdrawal requests.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from models import PaymentType, WithdrawalStatus


class WithdrawalAction(str, Enum):
     APPROVE = "approve"
     REJECT = "reject"


class WithdrawalCreate(BaseModel):
     broker_id: int = Field(..., gt=0)
     amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
     note: Optional[str] = Field(None, max_length=1000)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {"broker_id": 3, "amount": 10000.00, "note": "March payout"}
          }
     )


class WithdrawalProcess(BaseModel):
     """Admin decision on a pending request."""
     action: WithdrawalAction
     payment_type: Optional[PaymentType] = Field(None, description="Required to approve")
     rejection_reason: Optional[str] = Field(None, max_length=500, description="Required to reject")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {"action": "approve", "payment_type": "online_transfer"}
          }
     )


class WithdrawalResponse(BaseModel):
     id: int
     broker_id: int
     amount: Decimal
     status: WithdrawalStatus
     note: Optional[str] = None
     payment_type: Optional[PaymentType] = None
     rejection_reason: Optional[str] = None
     processed_by: Optional[str] = None
     requested_at: Optional[datetime] = None
     processed_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class WithdrawalListResponse(BaseModel):
     requests: List[WithdrawalResponse]
     total: int
