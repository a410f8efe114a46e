"""Create exam_rounds, bookings and staff tables"""

from alembic import op
import sqlalchemy as sa


revision = '5a1d0c7e2b41'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'exam_rounds',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('exam_date', sa.Date(), nullable=False),
        sa.Column('exam_time', sa.String(length=20), nullable=False),
        sa.Column('max_seats', sa.Integer(), nullable=False),
        sa.Column('current_seats', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('max_seats > 0', name='ck_exam_rounds_max_seats_positive'),
        sa.CheckConstraint(
            'current_seats >= 0 AND current_seats <= max_seats',
            name='ck_exam_rounds_seats_in_range',
        ),
    )
    op.create_index('ix_exam_rounds_exam_date', 'exam_rounds', ['exam_date'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('booking_code', sa.String(length=20), nullable=True),
        sa.Column('exam_round_id', sa.Integer(), sa.ForeignKey('exam_rounds.id'), nullable=False),
        sa.Column('user_type', sa.String(length=20), nullable=False),
        sa.Column('full_name', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=150), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('payment_method', sa.String(length=20), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('id_card_url', sa.String(length=500), nullable=True),
        sa.Column('payment_slip_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('booking_code', name='uq_bookings_booking_code'),
    )
    op.create_index('ix_bookings_exam_round_id', 'bookings', ['exam_round_id'])
    op.create_index('ix_bookings_email', 'bookings', ['email'])
    op.create_index('ix_bookings_payment_status', 'bookings', ['payment_status'])

    op.create_table(
        'staff',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=150), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('email', name='uq_staff_email'),
    )


def downgrade():
    op.drop_table('staff')

    for name in ['ix_bookings_payment_status', 'ix_bookings_email', 'ix_bookings_exam_round_id']:
        op.drop_index(name, table_name='bookings')
    op.drop_table('bookings')

    op.drop_index('ix_exam_rounds_exam_date', table_name='exam_rounds')
    op.drop_table('exam_rounds')
