# schemas/broker.py
"""
Pydantic schemas for Broker API request/response validation.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict


class BrokerCreate(BaseModel):
     """Schema for registering a broker."""
     full_name: str = Field(..., min_length=1, max_length=200)
     email: Optional[str] = Field(None, max_length=255)
     phone: Optional[str] = Field(None, max_length=50)
     upline_id: Optional[int] = Field(None, gt=0, description="Referring broker (must exist)")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "full_name": "Anita Sharma",
                    "email": "anita@example.com",
                    "phone": "+91 98765 43210",
                    "upline_id": 1
               }
          }
     )


class BrokerResponse(BaseModel):
     id: int
     full_name: str
     email: Optional[str] = None
     phone: Optional[str] = None
     upline_id: Optional[int] = None
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class DownlineNode(BaseModel):
     """One broker in the referral tree; level 0 is the root."""
     id: int
     full_name: str
     level: int
     children: List["DownlineNode"] = []

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "id": 1,
                    "full_name": "Anita Sharma",
                    "level": 0,
                    "children": [
                         {"id": 2, "full_name": "Vikram Rao", "level": 1, "children": []}
                    ]
               }
          }
     )
