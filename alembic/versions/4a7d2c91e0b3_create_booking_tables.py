"""create booking tables

Revision ID: 4a7d2c91e0b3
Revises:
Create Date: 2026-10-19 10:12:41.218553

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4a7d2c91e0b3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    """Upgrade schema."""

    # 1. users (mirrors Supabase auth users)
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=True, unique=True),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('profile_image_url', sa.String(), nullable=True),
        sa.Column('title', sa.String(200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='guest'),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('stripe_customer_id', sa.String(), nullable=True),
        sa.Column('stripe_account_id', sa.String(), nullable=True),
        sa.Column('stripe_onboarding_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'])

    # 2. host_availability
    op.create_table(
        'host_availability',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('day_of_week', sa.Integer(), nullable=True),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('day_of_week IS NULL OR (day_of_week >= 0 AND day_of_week <= 6)', name='ck_host_availability_dow'),
        sa.CheckConstraint('start_time < end_time', name='ck_host_availability_window'),
    )
    op.create_index('ix_host_availability_user_id', 'host_availability', ['user_id'])

    # 3. host_pricing
    op.create_table(
        'host_pricing',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='EUR'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_custom', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('includes_screen_sharing', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('includes_translation', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('includes_recording', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('includes_transcription', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'duration', name='uq_host_pricing_user_duration'),
    )
    op.create_index('ix_host_pricing_user_id', 'host_pricing', ['user_id'])

    # 4. booking_sessions
    op.create_table(
        'booking_sessions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('host_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('guest_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('selected_date', sa.Date(), nullable=False),
        sa.Column('selected_time', sa.String(5), nullable=False),
        sa.Column('selected_duration', sa.Integer(), nullable=False),
        sa.Column('selected_services', sa.JSON(), nullable=True),
        sa.Column('call_language', sa.String(10), nullable=True),
        sa.Column('base_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('services_total', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('service_fees', sa.JSON(), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False, server_default='EUR'),
        sa.Column('status', sa.String(20), nullable=False, server_default='created'),
        sa.Column('payment_intent_id', sa.String(), nullable=True, unique=True),
        sa.Column('checkout_claimed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('abandoned_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_booking_sessions_host_id', 'booking_sessions', ['host_id'])
    op.create_index('ix_booking_sessions_status', 'booking_sessions', ['status'])

    # 5. bookings
    op.create_table(
        'bookings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('host_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('guest_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('booking_session_id', sa.Uuid(), sa.ForeignKey('booking_sessions.id'), nullable=True, unique=True),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='EUR'),
        sa.Column('call_language', sa.String(10), nullable=True),
        sa.Column('services', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='confirmed'),
        sa.Column('agora_channel_name', sa.String(), nullable=True),
        *_timestamps(),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_by', sa.String(10), nullable=True),
    )
    op.create_index('ix_bookings_host_id', 'bookings', ['host_id'])
    op.create_index('ix_bookings_guest_id', 'bookings', ['guest_id'])
    op.create_index('idx_bookings_host_date', 'bookings', ['host_id', 'scheduled_date'])

    # 6. stripe_payments
    op.create_table(
        'stripe_payments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('booking_session_id', sa.Uuid(), sa.ForeignKey('booking_sessions.id'), nullable=False),
        sa.Column('booking_id', sa.Uuid(), sa.ForeignKey('bookings.id', ondelete='SET NULL'), nullable=True),
        sa.Column('stripe_payment_intent_id', sa.String(), nullable=False, unique=True),
        sa.Column('stripe_customer_id', sa.String(), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('host_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('commission_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('vat_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='EUR'),
        sa.Column('screen_sharing_fee', sa.Numeric(10, 2), server_default='0'),
        sa.Column('translation_fee', sa.Numeric(10, 2), server_default='0'),
        sa.Column('recording_fee', sa.Numeric(10, 2), server_default='0'),
        sa.Column('transcription_fee', sa.Numeric(10, 2), server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        *_timestamps(),
    )
    op.create_index('ix_stripe_payments_booking_session_id', 'stripe_payments', ['booking_session_id'])

    # 7. invoices
    op.create_table(
        'invoices',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('invoice_number', sa.String(30), nullable=False, unique=True),
        sa.Column('payment_id', sa.Uuid(), sa.ForeignKey('stripe_payments.id', ondelete='CASCADE'), nullable=True),
        sa.Column('booking_id', sa.Uuid(), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('host_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='EUR'),
        sa.Column('issue_date', sa.Date(), nullable=False),
        sa.Column('download_count', sa.Integer(), server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_invoices_user_id', 'invoices', ['user_id'])

    # 8. admin_config
    op.create_table(
        'admin_config',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('key', sa.String(100), nullable=False, unique=True),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('updated_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('admin_config')
    op.drop_index('ix_invoices_user_id', table_name='invoices')
    op.drop_table('invoices')
    op.drop_index('ix_stripe_payments_booking_session_id', table_name='stripe_payments')
    op.drop_table('stripe_payments')
    op.drop_index('idx_bookings_host_date', table_name='bookings')
    op.drop_index('ix_bookings_guest_id', table_name='bookings')
    op.drop_index('ix_bookings_host_id', table_name='bookings')
    op.drop_table('bookings')
    op.drop_index('ix_booking_sessions_status', table_name='booking_sessions')
    op.drop_index('ix_booking_sessions_host_id', table_name='booking_sessions')
    op.drop_table('booking_sessions')
    op.drop_index('ix_host_pricing_user_id', table_name='host_pricing')
    op.drop_table('host_pricing')
    op.drop_index('ix_host_availability_user_id', table_name='host_availability')
    op.drop_table('host_availability')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
