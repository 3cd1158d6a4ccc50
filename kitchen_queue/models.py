"""
SQLAlchemy Database Models

Order records as seen by the kitchen queue:
- Overall order status (pending / completed / cancelled)
- Kitchen status, a separate forward-only lifecycle
- Kitchen-supplied estimated completion time
"""

from sqlalchemy import Column, Integer, DateTime, Enum, Index
from kitchen_queue.database import Base
import enum


class OrderStatus(str, enum.Enum):
    """Overall order lifecycle."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class KitchenStatus(str, enum.Enum):
    """
    Kitchen-facing lifecycle, in order.

    new -> in-progress -> ready -> delivered. Declaration order is the
    lifecycle order; ``rank`` exposes it.
    """
    NEW = "new"
    IN_PROGRESS = "in-progress"
    READY = "ready"
    DELIVERED = "delivered"

    @property
    def rank(self) -> int:
        return KITCHEN_STATUS_SEQUENCE.index(self)

    @property
    def is_terminal(self) -> bool:
        return self is KitchenStatus.DELIVERED

    def earlier(self) -> list["KitchenStatus"]:
        """Statuses strictly before this one."""
        return list(KITCHEN_STATUS_SEQUENCE[: self.rank])


KITCHEN_STATUS_SEQUENCE: tuple[KitchenStatus, ...] = tuple(KitchenStatus)


def is_forward_transition(current: KitchenStatus, new: KitchenStatus) -> bool:
    """Return True only if ``new`` comes strictly after ``current``."""
    return KitchenStatus(new).rank > KitchenStatus(current).rank


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Order(Base):
    """
    Order table - the kitchen queue's view of a POS order.

    Rows are created by the ordering workflow and never deleted; the
    queue hides them once they are delivered or from a previous day.
    """
    __tablename__ = "orders"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Daily display number shown on the queue board
    order_number = Column(Integer, nullable=False)

    status = Column(
        Enum(OrderStatus, name="order_status", values_callable=_enum_values),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )
    kitchen_status = Column(
        Enum(KitchenStatus, name="kitchen_status", values_callable=_enum_values),
        default=KitchenStatus.NEW,
        nullable=False,
        index=True,
    )
    estimated_completion_time = Column(DateTime(timezone=True), nullable=True)

    # Set by the store from the injected clock, not by the database server
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_orders_created_kitchen", "created_at", "kitchen_status"),
    )

    def __repr__(self):
        return f"<Order #{self.order_number} ({self.id}) - {self.kitchen_status.value}>"
