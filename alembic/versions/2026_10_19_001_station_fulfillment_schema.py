"""Station fulfillment schema: business units, users, menu, orders, station tickets, audit

Revision ID: 001_station_fulfillment
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_station_fulfillment'
down_revision = None
branch_labels = None
depends_on = None

# Enum columns store member names
user_role = sa.Enum('ADMIN', 'MANAGER', 'WAITER', 'CASHIER', 'KITCHEN', 'BAR', name='userrole')
item_type = sa.Enum('FOOD', 'DRINK', name='itemtype')
order_status = sa.Enum(
    'PENDING', 'CONFIRMED', 'IN_PROGRESS', 'READY', 'SERVED', 'COMPLETED', 'CANCELLED',
    name='orderstatus'
)
order_item_status = sa.Enum(
    'PENDING', 'CONFIRMED', 'PREPARING', 'READY', 'SERVED', 'CANCELLED',
    name='orderitemstatus'
)
station = sa.Enum('KITCHEN', 'BAR', name='station')
ticket_status = sa.Enum('PENDING', 'PREPARING', 'READY', 'SERVED', name='ticketstatus')
audit_action = sa.Enum('CREATE', 'UPDATE', 'DELETE', name='auditaction')


def upgrade() -> None:
    op.create_table(
        'business_units',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('code', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_business_units_code', 'business_units', ['code'], unique=True)
    op.create_index('ix_business_units_is_active', 'business_units', ['is_active'])

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_unit_id', sa.Uuid(), sa.ForeignKey('business_units.id'), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_business_unit_id', 'users', ['business_unit_id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_is_active', 'users', ['is_active'])

    op.create_table(
        'menu_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_unit_id', sa.Uuid(), sa.ForeignKey('business_units.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.String(2000), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('item_type', item_type, nullable=False),
        sa.Column('prep_time', sa.Integer(), nullable=True),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_menu_items_business_unit_id', 'menu_items', ['business_unit_id'])
    op.create_index('ix_menu_items_item_type', 'menu_items', ['item_type'])
    op.create_index('ix_menu_items_is_available', 'menu_items', ['is_available'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_unit_id', sa.Uuid(), sa.ForeignKey('business_units.id'), nullable=False),
        sa.Column('order_number', sa.String(100), nullable=False),
        sa.Column('table_number', sa.Integer(), nullable=False),
        sa.Column('waiter_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('waiter_name', sa.String(255), nullable=True),
        sa.Column('status', order_status, nullable=False),
        sa.Column('customer_count', sa.Integer(), nullable=True),
        sa.Column('notes', sa.String(2000), nullable=True),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('business_unit_id', 'order_number', name='uq_order_business_unit_number'),
    )
    op.create_index('ix_orders_business_unit_id', 'orders', ['business_unit_id'])
    op.create_index('ix_orders_order_number', 'orders', ['order_number'])
    op.create_index('ix_orders_waiter_id', 'orders', ['waiter_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('menu_item_id', sa.Uuid(), sa.ForeignKey('menu_items.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('item_type', item_type, nullable=False),
        sa.Column('prep_time', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', order_item_status, nullable=False),
        sa.Column('notes', sa.String(1000), nullable=True),
        sa.Column('is_additional', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_menu_item_id', 'order_items', ['menu_item_id'])
    op.create_index('ix_order_items_item_type', 'order_items', ['item_type'])
    op.create_index('ix_order_items_status', 'order_items', ['status'])

    op.create_table(
        'station_tickets',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('station', station, nullable=False),
        sa.Column('business_unit_id', sa.Uuid(), sa.ForeignKey('business_units.id'), nullable=False),
        sa.Column('order_id', sa.Uuid(), sa.ForeignKey('orders.id'), nullable=True),
        sa.Column('order_number', sa.String(100), nullable=False),
        sa.Column('is_additional', sa.Boolean(), nullable=False),
        sa.Column('table_number', sa.Integer(), nullable=False),
        sa.Column('waiter_name', sa.String(255), nullable=True),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('notes', sa.String(2000), nullable=True),
        sa.Column('status', ticket_status, nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('estimated_time', sa.Integer(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('picked_up_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_station_tickets_station', 'station_tickets', ['station'])
    op.create_index('ix_station_tickets_business_unit_id', 'station_tickets', ['business_unit_id'])
    op.create_index('ix_station_tickets_order_id', 'station_tickets', ['order_id'])
    op.create_index('ix_station_tickets_order_number', 'station_tickets', ['order_number'])
    op.create_index('ix_station_tickets_status', 'station_tickets', ['status'])
    op.create_index('ix_station_tickets_priority', 'station_tickets', ['priority'])
    op.create_index('ix_station_tickets_created_at', 'station_tickets', ['created_at'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_unit_id', sa.Uuid(), nullable=False),
        sa.Column('table_name', sa.String(100), nullable=False),
        sa.Column('record_id', sa.String(100), nullable=False),
        sa.Column('action', audit_action, nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_audit_logs_business_unit_id', 'audit_logs', ['business_unit_id'])
    op.create_index('ix_audit_logs_table_name', 'audit_logs', ['table_name'])
    op.create_index('ix_audit_logs_record_id', 'audit_logs', ['record_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('station_tickets')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('menu_items')
    op.drop_table('users')
    op.drop_table('business_units')

    bind = op.get_bind()
    for enum_type in (audit_action, ticket_status, station, order_item_status, order_status, item_type, user_role):
        enum_type.drop(bind, checkfirst=True)
