"""Events, schedule items and RSVPs with seat ledger

Revision ID: 3c1f9e2a7d40
Revises: 
Create Date: 2026-10-19 10:12:03.418220

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3c1f9e2a7d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    category_enum = postgresql.ENUM(
        'conference', 'workshop', 'seminar', 'concert', 'sports', 'festival',
        name='eventcategory',
        create_type=False,
    )
    category_enum.create(op.get_bind(), checkfirst=True)

    rsvp_status_enum = postgresql.ENUM(
        'going', 'interested', 'declined', 'cancelled',
        name='rsvpstatusenum',
        create_type=False,
    )
    rsvp_status_enum.create(op.get_bind(), checkfirst=True)

    # Create events table
    op.create_table(
        'events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('category', category_enum, nullable=False, server_default='conference'),
        sa.Column('venue', sa.String(255), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('capacity', sa.Integer, nullable=False, server_default='0'),
        sa.Column('available_seats', sa.Integer, nullable=False, server_default='0'),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('organizer', sa.String(255), nullable=False),
        sa.Column('image_url', sa.String(1024), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('capacity >= 0', name='ck_event_capacity_non_negative'),
        sa.CheckConstraint('available_seats >= 0', name='ck_event_available_non_negative'),
        sa.CheckConstraint('available_seats <= capacity', name='ck_event_available_lte_capacity'),
    )
    op.create_index('idx_event_date', 'events', ['date'])
    op.create_index('idx_event_category', 'events', ['category'])
    op.create_index('idx_event_created_at', 'events', ['created_at'])

    # Create schedule items table
    op.create_table(
        'schedule_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(120), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('speaker', sa.String(120), nullable=True),
        sa.Column('location', sa.String(160), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('end_time > start_time', name='ck_schedule_interval'),
    )
    op.create_index('idx_schedule_event_start', 'schedule_items', ['event_id', 'start_time'])

    # Create rsvps table
    op.create_table(
        'rsvps',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(32), nullable=False, server_default=''),
        sa.Column('status', rsvp_status_enum, nullable=False, server_default='going'),
        sa.Column('guests', sa.Integer, nullable=False, server_default='0'),
        sa.Column('notes', sa.Text, nullable=False, server_default=''),
        sa.Column('seats_held', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('guests >= 0', name='ck_rsvp_guests_non_negative'),
        sa.CheckConstraint('seats_held >= 0', name='ck_rsvp_seats_held_non_negative'),
    )
    op.create_index('idx_rsvp_user', 'rsvps', ['user_id'])
    op.create_index('idx_rsvp_event', 'rsvps', ['event_id'])
    op.create_unique_constraint('uq_event_user_rsvp', 'rsvps', ['event_id', 'user_id'])


def downgrade() -> None:
    # Drop tables
    op.drop_table('rsvps')
    op.drop_table('schedule_items')
    op.drop_table('events')

    # Drop enums
    sa.Enum(name='rsvpstatusenum').drop(op.get_bind())
    sa.Enum(name='eventcategory').drop(op.get_bind())
