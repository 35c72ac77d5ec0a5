# schemas/plot.py
"""
Pydantic schemas for Plot API request/response validation.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from models import PlotStatus, CommissionStatus
from .commission import DistributionResponse


class PlotCreate(BaseModel):
     """Schema for adding a plot to the inventory."""
     project_name: str = Field(..., min_length=1, max_length=255, description="Project the plot belongs to")
     plot_number: int = Field(..., gt=0, description="Plot number, unique within the project")
     plot_type: Optional[str] = Field(None, max_length=100)
     block: Optional[str] = Field(None, max_length=50)
     dimension: Optional[str] = Field(None, max_length=100, description="e.g. 30x60")
     area: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2, description="Area in gaj")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "project_name": "Green Valley",
                    "plot_number": 12,
                    "plot_type": "Residential",
                    "block": "B",
                    "dimension": "30x60",
                    "area": 200.00
               }
          }
     )


class PlotUpdate(BaseModel):
     """Schema for editing a plot. Only provided fields are changed; amounts and status are not editable here."""
     plot_type: Optional[str] = Field(None, max_length=100)
     block: Optional[str] = Field(None, max_length=50)
     dimension: Optional[str] = Field(None, max_length=100)
     area: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)

     model_config = ConfigDict(
          extra="forbid",
          json_schema_extra={
               "example": {
                    "block": "C",
                    "dimension": "40x60"
               }
          }
     )


class PlotBulkCreate(BaseModel):
     """Schema for adding a run of plots to a project."""
     project_name: str = Field(..., min_length=1, max_length=255)
     count: int = Field(..., ge=1, le=500, description="Number of plots to add")
     starting_number: int = Field(default=1, ge=1, description="First plot number to try; taken numbers are skipped")
     plot_type: Optional[str] = Field(None, max_length=100)
     block: Optional[str] = Field(None, max_length=50)
     dimension: Optional[str] = Field(None, max_length=100)
     area: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "project_name": "Green Valley",
                    "count": 20,
                    "starting_number": 1,
                    "plot_type": "Residential",
                    "block": "A",
                    "area": 150.00
               }
          }
     )


class BookingRequest(BaseModel):
     """Schema for booking an available plot."""
     buyer_name: str = Field(..., min_length=1, max_length=255)
     total_plot_amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
     booking_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=14, decimal_places=2)
     broker_id: Optional[int] = Field(None, gt=0, description="Selling broker (optional)")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "buyer_name": "Ravi Kumar",
                    "total_plot_amount": 1000000.00,
                    "booking_amount": 100000.00,
                    "broker_id": 3
               }
          }
     )


class PlotResponse(BaseModel):
     """Schema for plot response."""
     id: int
     project_name: str
     plot_number: int
     plot_type: Optional[str] = None
     block: Optional[str] = None
     dimension: Optional[str] = None
     area: Optional[Decimal] = None
     status: PlotStatus
     buyer_name: Optional[str] = None
     broker_id: Optional[int] = None
     total_plot_amount: Optional[Decimal] = None
     booking_amount: Optional[Decimal] = None
     remaining_amount: Optional[Decimal] = None
     paid_percentage: Optional[Decimal] = None
     payment_label: str
     commission_status: Optional[CommissionStatus] = None
     booked_at: Optional[datetime] = None
     sold_at: Optional[datetime] = None
     created_at: Optional[datetime] = None

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 1,
                    "project_name": "Green Valley",
                    "plot_number": 12,
                    "status": "booked",
                    "buyer_name": "Ravi Kumar",
                    "broker_id": 3,
                    "total_plot_amount": 1000000.00,
                    "booking_amount": 100000.00,
                    "remaining_amount": 900000.00,
                    "paid_percentage": 10.00,
                    "payment_label": "10.00% paid",
                    "commission_status": "pending",
                    "booked_at": "2026-03-01T10:30:00"
               }
          }
     )


class PlotListResponse(BaseModel):
     plots: List[PlotResponse]
     total: int


class BookingResponse(BaseModel):
     """Result of booking a plot; distribution is set when the booking alone sold it."""
     plot: PlotResponse
     sold_now: bool = False
     distribution: Optional[DistributionResponse] = None


class BulkAddResponse(BaseModel):
     plots: List[PlotResponse]
     added: int
     skipped_numbers: List[int] = Field(default_factory=list, description="Numbers already taken in the project")


class DeletableResponse(BaseModel):
     plot_id: int
     can_delete: bool
     reason: str
