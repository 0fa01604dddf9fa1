"""init_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Schema:
- event: catalog entry with capacity and the tickets_sold counter
- event_staff: staff assigned to scan at an event
- ticket: ledger row with embedded verification and cancellation records
- ticket_staff_note: notes staff attach to tickets at the door

uq_ticket_active_attendee is partial (status <> 'cancelled'): an attendee may
book again after cancelling, but never hold two live tickets for one event.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'event',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('host_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('tickets_sold', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_free', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('price', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='USD'),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.CheckConstraint('capacity >= 1', name='ck_event_capacity_positive'),
        sa.CheckConstraint(
            'tickets_sold >= 0 AND tickets_sold <= capacity', name='ck_event_tickets_sold_bounds'
        ),
        sa.CheckConstraint('start_at < end_at', name='ck_event_window_order'),
        sa.CheckConstraint('price >= 0', name='ck_event_price_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_event_host_id'), 'event', ['host_id'])
    op.create_index(op.f('ix_event_status'), 'event', ['status'])

    op.create_table(
        'event_staff',
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('staff_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['event.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('event_id', 'staff_id'),
    )
    op.create_index(op.f('ix_event_staff_staff_id'), 'event_staff', ['staff_id'])

    op.create_table(
        'ticket',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('attendee_id', sa.Integer(), nullable=False),
        sa.Column('ticket_number', sa.String(length=32), nullable=False),
        sa.Column('verification_token', sa.String(length=64), nullable=False),
        sa.Column('price_paid', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('payment_ref', sa.String(length=64), nullable=True),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('is_scanned', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('scanned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scanned_by', sa.Integer(), nullable=True),
        sa.Column('entry_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('exit_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scan_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancellation_reason', sa.String(length=500), nullable=True),
        sa.Column('refund_amount', sa.Integer(), nullable=True),
        sa.Column(
            'booked_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.CheckConstraint('price_paid >= 0', name='ck_ticket_price_paid_non_negative'),
        sa.CheckConstraint('scan_count >= 0', name='ck_ticket_scan_count_non_negative'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id']),
        sa.PrimaryKeyConstraint('id', name='ticket_pkey'),
    )
    op.create_index(
        'uq_ticket_active_attendee',
        'ticket',
        ['event_id', 'attendee_id'],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
    )
    op.create_index('uq_ticket_number', 'ticket', ['ticket_number'], unique=True)
    op.create_index('uq_ticket_verification_token', 'ticket', ['verification_token'], unique=True)
    op.create_index(
        'uq_ticket_payment_ref',
        'ticket',
        ['payment_ref'],
        unique=True,
        postgresql_where=sa.text('payment_ref IS NOT NULL'),
    )
    op.create_index('ix_ticket_event_status', 'ticket', ['event_id', 'status'])
    op.create_index(op.f('ix_ticket_attendee_id'), 'ticket', ['attendee_id'])

    op.create_table(
        'ticket_staff_note',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('ticket_id', UUID(as_uuid=True), nullable=False),
        sa.Column('staff_id', sa.Integer(), nullable=False),
        sa.Column('note', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['ticket_id'], ['ticket.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ticket_staff_note_ticket_id'), 'ticket_staff_note', ['ticket_id'])


def downgrade() -> None:
    op.drop_table('ticket_staff_note')
    op.drop_table('ticket')
    op.drop_table('event_staff')
    op.drop_table('event')
