# schemas/wallet.py
"""
Pydantic schemas for broker wallets and their transactions.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from models import TransactionType, WalletBucket


class WalletResponse(BaseModel):
     owner_id: int
     direct_sale_balance: Decimal
     downline_sale_balance: Decimal
     total_balance: Decimal
     available_balance: Decimal = Field(..., description="Total balance minus pending withdrawals")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "owner_id": 3,
                    "direct_sale_balance": 60000.00,
                    "downline_sale_balance": 20000.00,
                    "total_balance": 80000.00,
                    "available_balance": 70000.00
               }
          }
     )


class TransactionResponse(BaseModel):
     id: int
     wallet_owner_id: int
     type: TransactionType
     wallet_bucket: WalletBucket
     amount: Decimal = Field(..., description="Signed: credits positive, debits negative")
     description: Optional[str] = None
     plot_id: Optional[int] = None
     level: Optional[int] = None
     reference_id: Optional[str] = None
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class TransactionListResponse(BaseModel):
     transactions: List[TransactionResponse]
     total: int


class WalletAdjustment(BaseModel):
     """Admin credit (positive) or debit (negative) of one wallet bucket."""
     amount: Decimal = Field(..., max_digits=14, decimal_places=2)
     bucket: WalletBucket = WalletBucket.DIRECT
     description: str = Field(..., min_length=1, max_length=500)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "amount": -1500.00,
                    "bucket": "direct",
                    "description": "Correction for duplicate cheque"
               }
          }
     )
