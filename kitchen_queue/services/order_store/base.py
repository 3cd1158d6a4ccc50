"""
Order Store Abstract Base Class

Defines the interface contract between the queue engine and whatever owns
the order records. Both InMemoryOrderStore and SqlOrderStore implement it.

Contract:
    - ``list_orders`` returns snapshots; they may be stale by the time the
      caller acts on them.
    - ``update_kitchen_status`` is an idempotent, forward-only command.
      Moving an order to a status at or before its current one is a
      successful no-op (``changed=False``), never an error. An unknown id
      is reported with ``not_found=True``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional

from kitchen_queue.models import KitchenStatus, OrderStatus


class OrderStoreError(Exception):
    """The order store could not be read or written."""


@dataclass(frozen=True)
class OrderSnapshot:
    """
    Read-only view of one order at the time it was read.

    Timestamps are kept exactly as the store returned them; consumers
    normalise them with ``coerce_timestamp`` and must cope with None or
    malformed values.

    Attributes:
        id: Store identifier
        order_number: Daily display number
        created_at: Creation timestamp (immutable)
        updated_at: Timestamp of the last mutation
        status: Overall order status
        kitchen_status: Kitchen lifecycle status
        estimated_completion_time: Kitchen estimate, if any
    """
    id: Any
    order_number: int
    created_at: Any
    updated_at: Any
    status: OrderStatus = OrderStatus.PENDING
    kitchen_status: KitchenStatus = KitchenStatus.NEW
    estimated_completion_time: Any = None

    @classmethod
    def from_record(cls, record: Any) -> "OrderSnapshot":
        """Build a snapshot from any object with order attributes (ORM row)."""
        return cls(
            id=record.id,
            order_number=record.order_number,
            created_at=record.created_at,
            updated_at=record.updated_at,
            status=OrderStatus(record.status),
            kitchen_status=KitchenStatus(record.kitchen_status),
            estimated_completion_time=record.estimated_completion_time,
        )

    def evolve(self, **changes: Any) -> "OrderSnapshot":
        """Copy with some fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        def _iso(value: Any) -> Any:
            return value.isoformat() if isinstance(value, datetime) else value

        return {
            "id": self.id,
            "order_number": self.order_number,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "status": self.status.value,
            "kitchen_status": self.kitchen_status.value,
            "estimated_completion_time": _iso(self.estimated_completion_time),
        }


@dataclass
class KitchenStatusUpdateResult:
    """
    Result of a kitchen status (or estimate) update.

    Attributes:
        success: False only when the order does not exist
        order: Snapshot after the update (None when not found)
        changed: Whether the record was actually modified
        not_found: The order id is unknown to the store
        previous_status: Kitchen status before the update
        error_message: Human-readable reason for a failure
    """
    success: bool
    order: Optional[OrderSnapshot] = None
    changed: bool = False
    not_found: bool = False
    previous_status: Optional[KitchenStatus] = None
    error_message: Optional[str] = None

    @classmethod
    def missing(cls, order_id: Any) -> "KitchenStatusUpdateResult":
        return cls(
            success=False,
            not_found=True,
            error_message=f"Order {order_id} not found",
        )


class BaseOrderStore(ABC):
    """Abstract base class for order stores."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def list_orders(
        self,
        created_since: Optional[datetime] = None,
    ) -> list[OrderSnapshot]:
        """
        Return order snapshots.

        Args:
            created_since: Optional lower bound on ``created_at``; stores
                may use it to narrow the read, callers still filter.
        """
        pass

    @abstractmethod
    async def get_order(self, order_id: Any) -> Optional[OrderSnapshot]:
        """Return one order, or None if it does not exist."""
        pass

    @abstractmethod
    async def update_kitchen_status(
        self,
        order_id: Any,
        new_status: KitchenStatus,
    ) -> KitchenStatusUpdateResult:
        """Move an order forward to ``new_status`` (idempotent, forward-only)."""
        pass

    @abstractmethod
    async def update_estimate(
        self,
        order_id: Any,
        estimated_completion_time: Optional[datetime],
    ) -> KitchenStatusUpdateResult:
        """
        Set or clear the kitchen's estimated completion time.

        A delivered order, or an unchanged estimate, is a successful no-op.
        """
        pass

    @abstractmethod
    async def create_order(
        self,
        order_number: Optional[int] = None,
        status: OrderStatus = OrderStatus.PENDING,
        kitchen_status: KitchenStatus = KitchenStatus.NEW,
        estimated_completion_time: Optional[datetime] = None,
    ) -> OrderSnapshot:
        """
        Create an order stamped with the store clock.

        ``order_number`` defaults to one more than today's highest number.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check store connectivity."""
        pass
