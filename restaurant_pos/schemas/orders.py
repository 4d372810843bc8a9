"""
Request and response schemas for orders
"""

from sqlmodel import SQLModel, Field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
import uuid

from restaurant_pos.models.menu_item import ItemType
from restaurant_pos.models.order import Order, OrderStatus
from restaurant_pos.models.order_item import OrderItemStatus


class OrderItemCreate(SQLModel):
    """Schema for one requested order line"""
    menu_item_id: uuid.UUID
    quantity: int = Field(default=1, ge=1)
    notes: Optional[str] = Field(default=None, max_length=1000)


class OrderCreate(SQLModel):
    """Schema for placing a new order"""
    table_number: int = Field(ge=1)
    customer_count: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = Field(default=None, max_length=2000)
    items: List[OrderItemCreate] = Field(min_length=1)


class AdditionalItemsCreate(SQLModel):
    """Schema for appending items to an order already sent to the stations"""
    items: List[OrderItemCreate] = Field(min_length=1)


class OrderItemRead(SQLModel):
    """Schema for order item response"""
    id: uuid.UUID
    menu_item_id: uuid.UUID
    name: str
    item_type: ItemType
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    status: OrderItemStatus
    notes: Optional[str] = None
    is_additional: bool = False


class OrderRead(SQLModel):
    """Schema for order response"""
    id: uuid.UUID
    business_unit_id: uuid.UUID
    order_number: str
    table_number: int
    waiter_name: Optional[str] = None
    status: OrderStatus
    customer_count: Optional[int] = None
    notes: Optional[str] = None
    total_amount: Decimal
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[OrderItemRead] = []

    @classmethod
    def from_order(cls, order: Order) -> "OrderRead":
        return cls(
            id=order.id,
            business_unit_id=order.business_unit_id,
            order_number=order.order_number,
            table_number=order.table_number,
            waiter_name=order.waiter_name,
            status=order.status,
            customer_count=order.customer_count,
            notes=order.notes,
            total_amount=order.total_amount,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[OrderItemRead.model_validate(item, from_attributes=True) for item in order.items],
        )
