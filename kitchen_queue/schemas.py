"""
Pydantic Schemas for Request/Response Validation

Kitchen queue API:
- Queue board rows with structured wait estimates
- Kitchen staff status / estimate updates
- Development order creation
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Any
from datetime import datetime
from enum import Enum


# =============================================================================
# ENUMS
# =============================================================================

class KitchenStatusEnum(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in-progress"
    READY = "ready"
    DELIVERED = "delivered"


class OrderStatusEnum(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderCreate(BaseModel):
    """Request schema for creating an order (development seeding)."""
    order_number: Optional[int] = Field(None, ge=1, examples=[42])
    status: OrderStatusEnum = Field(default=OrderStatusEnum.PENDING)
    kitchen_status: KitchenStatusEnum = Field(default=KitchenStatusEnum.NEW)
    estimated_completion_time: Optional[datetime] = Field(
        None, examples=["2024-01-15T18:30:00Z"]
    )


class KitchenStatusUpdate(BaseModel):
    """
    Kitchen staff update.

    At least one of ``kitchen_status`` or ``estimated_completion_time``
    must be given; ``clear_estimate`` removes an existing estimate.
    """
    kitchen_status: Optional[KitchenStatusEnum] = Field(None, examples=["in-progress"])
    estimated_completion_time: Optional[datetime] = Field(None)
    estimated_minutes: Optional[int] = Field(None, ge=1, le=240, examples=[12])
    clear_estimate: bool = False

    @field_validator("estimated_completion_time")
    @classmethod
    def validate_estimate(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            raise ValueError("estimated_completion_time must include a timezone offset")
        return v

    def has_estimate_change(self) -> bool:
        return (
            self.clear_estimate
            or self.estimated_completion_time is not None
            or self.estimated_minutes is not None
        )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OrderResponse(BaseModel):
    """Response schema for a single order."""
    id: Any
    order_number: int
    status: str
    kitchen_status: str
    estimated_completion_time: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


class OrderListResponse(BaseModel):
    """Response for listing multiple orders."""
    total: int
    orders: List[OrderResponse]


class KitchenStatusUpdateResponse(BaseModel):
    """Response after a kitchen update."""
    success: bool
    changed: bool
    previous_status: Optional[str] = None
    order: OrderResponse


class WaitEstimateResponse(BaseModel):
    kind: str
    minutes: Optional[int] = None


class QueueRowResponse(BaseModel):
    """One line of the queue board."""
    order_id: Any
    order_number: int
    kitchen_status: str
    status_key: str
    status_tone: str
    status_text: str
    wait: WaitEstimateResponse
    wait_text: str
    created_at: Optional[datetime]
    highlight: bool


class QueueResponse(BaseModel):
    """Queue board payload."""
    current_time: datetime
    language: str
    rtl: bool
    labels: dict[str, str]
    rows: List[QueueRowResponse]


class AdvanceReportResponse(BaseModel):
    """Outcome of an on-demand auto-advance pass."""
    checked_at: datetime
    visible: int
    advanced: List[Any]
    unchanged: List[Any]
    not_found: List[Any]
    failed: List[Any]
    skipped: List[Any]


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    order_store: str
    redis: str
    scheduler: str
    timestamp: datetime
