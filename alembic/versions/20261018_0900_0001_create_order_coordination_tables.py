"""Create order coordination tables

Revision ID: 0001_order_coordination
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_order_coordination'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade():
    # Catalog and settings, read by the ordering core
    op.create_table(
        'menu_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('price', sa.Numeric(12, 3), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('recipe', sa.JSON(), nullable=True),
        sa.Column('modifier_groups', sa.JSON(), nullable=True),
        sa.Column('station_name', sa.String(length=100), nullable=True),
        sa.Column('prep_time_minutes', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_menu_items_id', 'menu_items', ['id'])
    op.create_index('ix_menu_items_restaurant_id', 'menu_items', ['restaurant_id'])
    op.create_index('ix_menu_items_category', 'menu_items', ['category'])
    op.create_index('idx_menu_item_restaurant_category', 'menu_items',
                    ['restaurant_id', 'category'])

    op.create_table(
        'taxes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('rate', sa.Numeric(6, 3), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_taxes_id', 'taxes', ['id'])
    op.create_index('ix_taxes_restaurant_id', 'taxes', ['restaurant_id'])

    op.create_table(
        'restaurant_profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('currency_code', sa.String(length=3), nullable=False),
        sa.Column('applied_tax_ids', sa.JSON(), nullable=False),
        sa.Column('kitchen_stations', sa.JSON(), nullable=False),
        sa.Column('is_locked', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_restaurant_profiles_id', 'restaurant_profiles', ['id'])
    op.create_index('ix_restaurant_profiles_restaurant_id', 'restaurant_profiles',
                    ['restaurant_id'], unique=True)

    op.create_table(
        'ingredients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('unit', sa.String(length=20), nullable=False),
        sa.Column('cost', sa.Numeric(12, 3), nullable=False),
        sa.Column('stock', sa.Numeric(14, 3), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ingredients_id', 'ingredients', ['id'])
    op.create_index('ix_ingredients_restaurant_id', 'ingredients', ['restaurant_id'])

    # Orders
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('order_type', sa.String(length=20), nullable=False),
        sa.Column('plate_number', sa.String(length=50), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_method', sa.String(length=20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('subtotal', sa.Numeric(12, 3), nullable=False),
        sa.Column('taxes', sa.JSON(), nullable=False),
        sa.Column('tax_amount', sa.Numeric(12, 3), nullable=False),
        sa.Column('tip', sa.Numeric(12, 3), nullable=False),
        sa.Column('platform_fee', sa.Numeric(12, 3), nullable=False),
        sa.Column('applied_discounts', sa.JSON(), nullable=False),
        sa.Column('discount_amount', sa.Numeric(12, 3), nullable=False),
        sa.Column('total', sa.Numeric(12, 3), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_id', 'orders', ['id'])
    op.create_index('ix_orders_restaurant_id', 'orders', ['restaurant_id'])
    op.create_index('ix_orders_plate_number', 'orders', ['plate_number'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('idx_orders_restaurant_status', 'orders', ['restaurant_id', 'status'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('line_index', sa.Integer(), nullable=False),
        sa.Column('menu_item_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('base_price', sa.Numeric(12, 3), nullable=False),
        sa.Column('price', sa.Numeric(12, 3), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('selected_modifiers', sa.JSON(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_completed', sa.Boolean(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('inventory_deducted', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id', 'line_index', name='uq_order_item_line'),
    )
    op.create_index('ix_order_items_id', 'order_items', ['id'])
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_menu_item_id', 'order_items', ['menu_item_id'])

    op.create_table(
        'inventory_adjustments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ingredient_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('quantity_before', sa.Numeric(14, 3), nullable=False),
        sa.Column('quantity_change', sa.Numeric(14, 3), nullable=False),
        sa.Column('quantity_after', sa.Numeric(14, 3), nullable=False),
        sa.Column('unit', sa.String(length=20), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['ingredient_id'], ['ingredients.id']),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_inventory_adjustments_id', 'inventory_adjustments', ['id'])
    op.create_index('ix_inventory_adjustments_ingredient_id', 'inventory_adjustments',
                    ['ingredient_id'])
    op.create_index('ix_inventory_adjustments_order_id', 'inventory_adjustments',
                    ['order_id'])

    # Floor plan
    op.create_table(
        'floor_plans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('grid_width', sa.Integer(), nullable=False),
        sa.Column('grid_height', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_floor_plans_id', 'floor_plans', ['id'])
    op.create_index('ix_floor_plans_restaurant_id', 'floor_plans', ['restaurant_id'],
                    unique=True)

    op.create_table(
        'floor_plan_tables',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('floor_plan_id', sa.Integer(), nullable=False),
        sa.Column('label', sa.String(length=50), nullable=False),
        sa.Column('manual_status', sa.String(length=20), nullable=True),
        sa.Column('position_x', sa.Integer(), nullable=False),
        sa.Column('position_y', sa.Integer(), nullable=False),
        sa.Column('width', sa.Integer(), nullable=False),
        sa.Column('height', sa.Integer(), nullable=False),
        sa.Column('shape', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['floor_plan_id'], ['floor_plans.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('floor_plan_id', 'label', name='uq_floor_plan_table_label'),
    )
    op.create_index('ix_floor_plan_tables_id', 'floor_plan_tables', ['id'])
    op.create_index('ix_floor_plan_tables_floor_plan_id', 'floor_plan_tables',
                    ['floor_plan_id'])

    # Close-out
    op.create_table(
        'z_reports',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.String(length=50), nullable=False),
        sa.Column('store_name', sa.String(length=200), nullable=False),
        sa.Column('report_date', sa.DateTime(), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('gross_sales', sa.Numeric(14, 3), nullable=False),
        sa.Column('discounts', sa.Numeric(14, 3), nullable=False),
        sa.Column('net_sales', sa.Numeric(14, 3), nullable=False),
        sa.Column('tax_amount', sa.Numeric(14, 3), nullable=False),
        sa.Column('tips', sa.Numeric(14, 3), nullable=False),
        sa.Column('total_revenue', sa.Numeric(14, 3), nullable=False),
        sa.Column('cash_payments', sa.Numeric(14, 3), nullable=False),
        sa.Column('card_payments', sa.Numeric(14, 3), nullable=False),
        sa.Column('other_payments', sa.Numeric(14, 3), nullable=False),
        sa.Column('total_payments', sa.Numeric(14, 3), nullable=False),
        sa.Column('total_orders', sa.Integer(), nullable=False),
        sa.Column('cash_counted', sa.Numeric(14, 3), nullable=False),
        sa.Column('cash_variance', sa.Numeric(14, 3), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', 'restaurant_id'),
    )
    op.create_index('ix_z_reports_restaurant_id', 'z_reports', ['restaurant_id'])
    op.create_index('ix_z_reports_end_date', 'z_reports', ['end_date'])


def downgrade():
    op.drop_table('z_reports')
    op.drop_table('floor_plan_tables')
    op.drop_table('floor_plans')
    op.drop_table('inventory_adjustments')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('ingredients')
    op.drop_table('restaurant_profiles')
    op.drop_table('taxes')
    op.drop_table('menu_items')
