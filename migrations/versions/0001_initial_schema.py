"""Initial schema: users, tours, tour dates with seat counter, bookings, notifications

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('email', sa.String(128), nullable=False),
        sa.Column('password_hash', sa.String(128), nullable=False),
        sa.Column('role', sa.String(16), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    op.create_table(
        'tours',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price_adult', sa.Numeric(10, 2), nullable=False),
        sa.Column('price_child', sa.Numeric(10, 2), nullable=False),
        sa.Column('language', sa.String(32), nullable=False),
        sa.Column('itinerary', sa.Text(), nullable=False),
        sa.Column('duration_value', sa.Integer(), nullable=False),
        sa.Column('duration_unit', sa.String(16), nullable=False, comment='hours | days'),
        sa.Column('cover_image', sa.String(500), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('includes', sa.JSON(), nullable=False),
        sa.Column('excludes', sa.JSON(), nullable=False),
        sa.Column('terms', sa.Text(), nullable=False),
        sa.Column('created_by', sa.String(36), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug')
    )

    op.create_table(
        'tour_dates',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('tour_id', sa.String(36), nullable=False),
        sa.Column('date_start', sa.DateTime(), nullable=False),
        sa.Column('date_end', sa.DateTime(), nullable=True),
        sa.Column('capacity_min', sa.Integer(), nullable=False),
        sa.Column('capacity_max', sa.Integer(), nullable=False, comment='Seat ceiling'),
        sa.Column('seats_booked', sa.Integer(), server_default='0', nullable=False),
        sa.Column('timezone', sa.String(64), nullable=False),
        sa.Column('price_override', sa.Numeric(10, 2), nullable=True,
                  comment='Replaces Tour.price_adult when set'),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('seats_booked >= 0', name='ck_tour_dates_seats_booked_non_negative'),
        sa.CheckConstraint('seats_booked <= capacity_max', name='ck_tour_dates_seats_within_capacity'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tour_dates_tour_id', 'tour_dates', ['tour_id'], unique=False)
    op.create_index('ix_tour_dates_tour_start', 'tour_dates', ['tour_id', 'date_start'], unique=False)

    op.create_table(
        'bookings',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('tour_date_id', sa.String(36), nullable=False),
        sa.Column('adults', sa.Integer(), nullable=False),
        sa.Column('children', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_method', sa.String(16), nullable=False),
        sa.Column('payment_status', sa.String(16), nullable=False,
                  comment='PENDING | PAID | CANCELLED | REFUNDED'),
        sa.Column('qr_code', sa.String(64), nullable=False),
        sa.Column('checked_in', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('adults >= 1', name='ck_bookings_adults_positive'),
        sa.CheckConstraint('children >= 0', name='ck_bookings_children_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['tour_date_id'], ['tour_dates.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('qr_code')
    )
    op.create_index('ix_bookings_user_id', 'bookings', ['user_id'], unique=False)
    op.create_index('ix_bookings_tour_date_status', 'bookings', ['tour_date_id', 'payment_status'], unique=False)

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('type', sa.String(32), nullable=False, comment='NEW_BOOKING, BOOKING_UPDATED, ...'),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('seen', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_seen', 'notifications', ['seen'], unique=False)


def downgrade():
    op.drop_index('ix_notifications_seen', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_bookings_tour_date_status', table_name='bookings')
    op.drop_index('ix_bookings_user_id', table_name='bookings')
    op.drop_table('bookings')
    op.drop_index('ix_tour_dates_tour_start', table_name='tour_dates')
    op.drop_index('ix_tour_dates_tour_id', table_name='tour_dates')
    op.drop_table('tour_dates')
    op.drop_table('tours')
    op.drop_table('users')
