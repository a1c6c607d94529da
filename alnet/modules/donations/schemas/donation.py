from enum import Enum
from typing import Dict, Optional
from datetime import datetime
from decimal import Decimal

from pydantic import Field, field_validator

from alnet.schemas.base import CamelModel


class DonationType(str, Enum):
    ONE_TIME = "one_time"
    RECURRING = "recurring"


class DonationStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class DonationCreate(CamelModel):
    amount: Decimal = Field(..., gt=0, le=1_000_000, max_digits=10, decimal_places=2)
    currency: str = Field("USD", min_length=3, max_length=3)
    type: DonationType = DonationType.ONE_TIME
    message: Optional[str] = Field(None, max_length=1000)
    is_anonymous: bool = False
    campaign_id: Optional[str] = Field(None, max_length=255)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        if not v.isalpha():
            raise ValueError("currency must be a three letter code")
        return v.upper()


class DonationStatusUpdate(CamelModel):
    status: DonationStatus


class DonationOut(CamelModel):
    id: str
    user_id: Optional[str] = None
    amount: Decimal
    currency: str
    type: DonationType
    status: DonationStatus
    message: Optional[str] = None
    is_anonymous: bool
    campaign_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class DonationStatistics(CamelModel):
    count: int
    donors: int
    completed_total_by_currency: Dict[str, Decimal]
    by_status: Dict[str, int]
