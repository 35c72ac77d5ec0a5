# schemas/commission.py
"""
Pydantic schemas for commission distribution and reconciliation.
"""
from decimal import Decimal
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, ConfigDict

from models import PlotStatus, CommissionStatus, WalletBucket


class PlotRef(BaseModel):
     """Body for endpoints that act on one plot."""
     plot_id: int = Field(..., gt=0)


class LegacyPlotRef(BaseModel):
     """Body of POST /api/recalculate-commission ({"plotId": 1})."""
     plot_id: int = Field(..., gt=0, alias="plotId")

     model_config = ConfigDict(populate_by_name=True)


class CreditResponse(BaseModel):
     broker_id: int
     level: int = Field(..., description="0 = selling broker, 1.. = upline level")
     amount: Decimal
     bucket: WalletBucket

     model_config = ConfigDict(from_attributes=True)


class DistributionResponse(BaseModel):
     plot_id: int
     distributed: bool
     already_distributed: bool = False
     credits: List[CreditResponse] = []
     total_distributed: Decimal = Decimal("0.00")

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "plot_id": 1,
                    "distributed": True,
                    "already_distributed": False,
                    "credits": [
                         {"broker_id": 3, "level": 0, "amount": 60000.00, "bucket": "direct"},
                         {"broker_id": 2, "level": 1, "amount": 20000.00, "bucket": "downline"},
                         {"broker_id": 1, "level": 2, "amount": 5000.00, "bucket": "downline"}
                    ],
                    "total_distributed": 85000.00
               }
          }
     )


class LevelAmount(BaseModel):
     level: int
     rate: Decimal = Field(..., description="Percent of total plot amount")
     amount: Decimal


class BreakdownResponse(BaseModel):
     total_plot_amount: Decimal
     levels: List[LevelAmount]
     total_commission: Decimal


class ReconcileResponse(BaseModel):
     plot_id: int
     status: PlotStatus
     commission_status: Optional[CommissionStatus] = None
     repaired: bool
     sold_now: bool
     distribution: Optional[DistributionResponse] = None

     model_config = ConfigDict(from_attributes=True)


class ReconcileAllResponse(BaseModel):
     checked: int
     repaired: int
     sold: int
     distributed: int
     failures: Dict[int, str]

     model_config = ConfigDict(from_attributes=True)
