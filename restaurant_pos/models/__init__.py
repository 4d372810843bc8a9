from restaurant_pos.models.business_unit import BusinessUnit
from restaurant_pos.models.user import User, UserRole
from restaurant_pos.models.menu_item import MenuItem, ItemType
from restaurant_pos.models.order import Order, OrderStatus
from restaurant_pos.models.order_item import OrderItem, OrderItemStatus
from restaurant_pos.models.station_ticket import (
    StationTicket, Station, TicketStatus, TicketPriority
)
from restaurant_pos.models.audit_log import AuditLog, AuditAction
