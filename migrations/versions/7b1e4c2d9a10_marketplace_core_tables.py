"""vendor onboarding, subscriptions, notifications, chat, catalog and analytics tables

Revision ID: 7b1e4c2d9a10
Revises:
Create Date: 2025-09-02 10:30:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '7b1e4c2d9a10'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('email_verified_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'vendor_registration_requests',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('full_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('company_name', sa.String(150), nullable=False),
        sa.Column('business_type', sa.String(100)),
        sa.Column('business_category', sa.String(100)),
        sa.Column('years_in_business', sa.String(20)),
        sa.Column('number_of_employees', sa.String(20)),
        sa.Column('address_line1', sa.String(255)),
        sa.Column('address_line2', sa.String(255)),
        sa.Column('landmark', sa.String(255)),
        sa.Column('city', sa.String(100)),
        sa.Column('state', sa.String(100), nullable=False, server_default='Kerala'),
        sa.Column('pin_code', sa.String(12)),
        sa.Column('latitude', sa.Float()),
        sa.Column('longitude', sa.Float()),
        sa.Column('delivery_radius', sa.Float(), nullable=False, server_default='5'),
        sa.Column('agent_code', sa.String(50)),
        sa.Column('agent_name', sa.String(100)),
        sa.Column('agent_phone', sa.String(20)),
        sa.Column('agent_visit_date', sa.String(30)),
        sa.Column('reference_notes', sa.Text()),
        sa.Column('gst_number', sa.String(20)),
        sa.Column('gst_verified', sa.Boolean()),
        sa.Column('gst_details', sa.JSON()),
        sa.Column('gst_certificate', sa.String(500)),
        sa.Column('logo', sa.String(500)),
        sa.Column('banner', sa.String(500)),
        sa.Column('tagline', sa.String(255)),
        sa.Column('selected_package', sa.String(20), nullable=False, server_default='premium'),
        sa.Column('billing_cycle', sa.String(20), nullable=False, server_default='monthly'),
        sa.Column('add_ons', sa.JSON()),
        sa.Column('terms_accepted', sa.Boolean()),
        sa.Column('privacy_accepted', sa.Boolean()),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('reviewed_by', sa.BigInteger(), sa.ForeignKey('users.id')),
        sa.Column('reviewed_at', sa.DateTime()),
        sa.Column('rejection_reason', sa.Text()),
        *_timestamps(),
    )
    op.create_index('ix_vendor_registration_requests_status', 'vendor_registration_requests', ['status'])
    op.create_index(
        'uq_vendor_registration_open_email',
        'vendor_registration_requests',
        ['email'],
        unique=True,
        postgresql_where=sa.text("status != 'rejected'"),
        sqlite_where=sa.text("status != 'rejected'"),
    )

    op.create_table(
        'vendor_profiles',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('store_name', sa.String(150), nullable=False),
        sa.Column('store_slug', sa.String(160), nullable=False),
        sa.Column('description', sa.String(500)),
        sa.Column('address', sa.String(500)),
        sa.Column('city', sa.String(100)),
        sa.Column('state', sa.String(100)),
        sa.Column('zip_code', sa.String(12)),
        sa.Column('latitude', sa.Float()),
        sa.Column('longitude', sa.Float()),
        sa.Column('delivery_radius', sa.Float()),
        sa.Column('business_license', sa.String(50)),
        sa.Column('logo_url', sa.String(500)),
        sa.Column('banner_url', sa.String(500)),
        sa.Column('is_verified', sa.Boolean()),
        sa.Column('is_active', sa.Boolean()),
        *_timestamps(),
    )
    op.create_index('ix_vendor_profiles_store_slug', 'vendor_profiles', ['store_slug'], unique=True)

    op.create_table(
        'vendor_subscriptions',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('vendor_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('plan_type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('is_trial', sa.Boolean()),
        sa.Column('trial_ends_at', sa.DateTime()),
        sa.Column('auto_renew', sa.Boolean()),
        sa.Column('cancelled_at', sa.DateTime()),
        sa.Column('max_products', sa.Integer(), nullable=False),
        sa.Column('max_orders', sa.Integer(), nullable=False),
        sa.Column('storage_limit', sa.Integer(), nullable=False),
        sa.Column('analytics_access', sa.Boolean()),
        sa.Column('priority_support', sa.Boolean()),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('billing_cycle', sa.String(20), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'payments',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('vendor_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('gateway_order_id', sa.String(64), nullable=False, unique=True),
        sa.Column('gateway_payment_id', sa.String(64)),
        sa.Column('plan_type', sa.String(20), nullable=False),
        sa.Column('billing_cycle', sa.String(20), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('failure_reason', sa.String(255)),
        *_timestamps(),
    )
    op.create_index('ix_payments_vendor_id', 'payments', ['vendor_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('data', sa.JSON()),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_index('ix_notifications_user_read', 'notifications', ['user_id', 'is_read'])

    op.create_table(
        'chats',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('created_by', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_table(
        'chat_participants',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('chat_id', sa.BigInteger(), sa.ForeignKey('chats.id'), nullable=False),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('joined_at', sa.DateTime()),
        sa.UniqueConstraint('chat_id', 'user_id', name='uq_chat_participant'),
    )
    op.create_table(
        'chat_messages',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('chat_id', sa.BigInteger(), sa.ForeignKey('chats.id'), nullable=False),
        sa.Column('sender_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('receiver_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('type', sa.String(10), nullable=False),
        sa.Column('status', sa.String(10), nullable=False),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('read_at', sa.DateTime()),
    )
    op.create_index('ix_chat_messages_chat_id', 'chat_messages', ['chat_id'])

    op.create_table(
        'products',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('vendor_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('brand', sa.String(80)),
        sa.Column('description', sa.Text()),
        sa.Column('category', sa.String(80)),
        sa.Column('tags', sa.String(255)),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('quantity', sa.Integer()),
        sa.Column('is_active', sa.Boolean()),
        sa.Column('order_count', sa.Integer()),
        sa.Column('image_url', sa.String(500)),
        *_timestamps(),
    )
    op.create_index('ix_products_vendor_active', 'products', ['vendor_id', 'is_active'])

    op.create_table(
        'orders',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('customer_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('vendor_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('status', sa.String(30)),
        sa.Column('delivery_notes', sa.Text()),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_orders_vendor_created', 'orders', ['vendor_id', 'created_at'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('order_id', sa.BigInteger(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('product_id', sa.BigInteger(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('name', sa.String(150)),
        sa.Column('unit_price', sa.Numeric(10, 2)),
        sa.Column('quantity', sa.Integer()),
        sa.Column('subtotal', sa.Numeric(10, 2)),
    )

    op.create_table(
        'vendor_analytics',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('vendor_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('views', sa.Integer(), nullable=False),
        sa.Column('total_orders', sa.Integer(), nullable=False),
        sa.Column('total_revenue', sa.Numeric(12, 2), nullable=False),
        sa.Column('updated_at', sa.DateTime()),
        sa.UniqueConstraint('vendor_id', 'date', name='uq_vendor_analytics_day'),
    )

    op.create_table(
        'trending_searches',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('query', sa.String(100), nullable=False, unique=True),
        sa.Column('search_count', sa.Integer(), nullable=False),
        sa.Column('last_searched', sa.DateTime()),
    )


def downgrade():
    op.drop_table('trending_searches')
    op.drop_table('vendor_analytics')
    op.drop_table('order_items')
    op.drop_index('ix_orders_vendor_created', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_products_vendor_active', table_name='products')
    op.drop_table('products')
    op.drop_index('ix_chat_messages_chat_id', table_name='chat_messages')
    op.drop_table('chat_messages')
    op.drop_table('chat_participants')
    op.drop_table('chats')
    op.drop_index('ix_notifications_user_read', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_payments_vendor_id', table_name='payments')
    op.drop_table('payments')
    op.drop_table('vendor_subscriptions')
    op.drop_index('ix_vendor_profiles_store_slug', table_name='vendor_profiles')
    op.drop_table('vendor_profiles')
    op.drop_index('uq_vendor_registration_open_email', table_name='vendor_registration_requests')
    op.drop_index('ix_vendor_registration_requests_status', table_name='vendor_registration_requests')
    op.drop_table('vendor_registration_requests')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
