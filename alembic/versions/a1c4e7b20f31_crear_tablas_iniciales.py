"""crear tablas iniciales de canchas, cajas y reservas

ID de revision: a1c4e7b20f31
Revisa:
Fecha de creacion: 2026-10-18 10:12:44.512390

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# identificadores de revision, usados por Alembic.
revision: str = 'a1c4e7b20f31'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('player', 'staff', 'admin', name='userrole')
cash_register_status = sa.Enum('open', 'closed', name='cashregisterstatus')
cash_movement_type = sa.Enum('sale', 'expense', name='cashmovementtype')
payment_method_type = sa.Enum(
    'cash', 'card', 'transfer', 'credit_card', 'debit_card', 'mercadopago', 'other',
    name='paymentmethodtype',
)
booking_status = sa.Enum(
    'pending', 'confirmed', 'in_progress', 'completed', 'cancelled', 'no_show',
    name='bookingstatus',
)
payment_status = sa.Enum('pending', 'paid', 'failed', 'refunded', name='paymentstatus')
notification_type = sa.Enum(
    'booking_confirmed', 'booking_cancelled', 'payment_received', 'payment_failed',
    'cash_register_closed', 'system_announcement',
    name='notificationtype',
)


def _money(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Numeric(10, 2), nullable=nullable)


def upgrade() -> None:
    """Actualizar esquema."""
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('establishment_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=False), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)
    op.create_index(op.f('ix_user_establishment_id'), 'user', ['establishment_id'], unique=False)

    op.create_table(
        'establishment',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('slug', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('city', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('address', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('owner_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=False), nullable=True),
        sa.ForeignKeyConstraint(['owner_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_establishment_name'), 'establishment', ['name'], unique=False)
    op.create_index(op.f('ix_establishment_slug'), 'establishment', ['slug'], unique=True)
    op.create_index(op.f('ix_establishment_city'), 'establishment', ['city'], unique=False)

    op.create_table(
        'court',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('establishment_id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('sport', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        _money('price_per_hour', nullable=True),
        sa.Column('surface', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('covered', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['establishment_id'], ['establishment.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_court_establishment_id'), 'court', ['establishment_id'], unique=False)
    op.create_index(op.f('ix_court_sport'), 'court', ['sport'], unique=False)

    op.create_table(
        'booking',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('establishment_id', sa.Integer(), nullable=False),
        sa.Column('court_id', sa.Integer(), nullable=False),
        sa.Column('sport', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        _money('price', nullable=True),
        sa.Column('status', booking_status, nullable=False),
        sa.Column('payment_status', payment_status, nullable=False),
        sa.Column('payment_method', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('participants', sa.JSON(), nullable=True),
        sa.Column('max_participants', sa.Integer(), nullable=True),
        sa.Column('notes', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('check_in_code', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('client_name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('client_email', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('client_phone', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('is_recurring', sa.Boolean(), nullable=False),
        _money('deposit_amount', nullable=True),
        sa.Column('deposit_percent', sa.Integer(), nullable=False),
        sa.Column('deposit_method', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        _money('service_fee', nullable=True),
        sa.Column('mp_payment_id', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('cancellation_reason', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(timezone=False), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=False), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=False), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=False), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=False), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=False), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.ForeignKeyConstraint(['establishment_id'], ['establishment.id']),
        sa.ForeignKeyConstraint(['court_id'], ['court.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_booking_user_id'), 'booking', ['user_id'], unique=False)
    op.create_index(op.f('ix_booking_establishment_id'), 'booking', ['establishment_id'], unique=False)
    op.create_index(op.f('ix_booking_court_id'), 'booking', ['court_id'], unique=False)
    op.create_index(op.f('ix_booking_date'), 'booking', ['date'], unique=False)
    op.create_index(op.f('ix_booking_status'), 'booking', ['status'], unique=False)
    op.create_index(op.f('ix_booking_payment_status'), 'booking', ['payment_status'], unique=False)
    op.create_index(op.f('ix_booking_mp_payment_id'), 'booking', ['mp_payment_id'], unique=False)
    op.create_index('ix_booking_court_slot', 'booking', ['court_id', 'date', 'start_time'], unique=False)

    op.create_table(
        'cashregister',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('establishment_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('opened_at', sa.DateTime(timezone=False), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=False), nullable=True),
        sa.Column('status', cash_register_status, nullable=False),
        sa.Column('active_establishment_id', sa.Integer(), nullable=True),
        _money('initial_cash'),
        _money('expected_cash'),
        _money('actual_cash', nullable=True),
        _money('cash_difference', nullable=True),
        _money('total_cash'),
        _money('total_card'),
        _money('total_transfer'),
        _money('total_credit_card'),
        _money('total_debit_card'),
        _money('total_mercadopago'),
        _money('total_other'),
        _money('total_sales'),
        _money('total_expenses'),
        sa.Column('total_orders', sa.Integer(), nullable=False),
        sa.Column('total_movements', sa.Integer(), nullable=False),
        sa.Column('opening_notes', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('closing_notes', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.ForeignKeyConstraint(['establishment_id'], ['establishment.id']),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('active_establishment_id'),
    )
    op.create_index(op.f('ix_cashregister_establishment_id'), 'cashregister', ['establishment_id'], unique=False)
    op.create_index(op.f('ix_cashregister_opened_at'), 'cashregister', ['opened_at'], unique=False)
    op.create_index(op.f('ix_cashregister_status'), 'cashregister', ['status'], unique=False)

    op.create_table(
        'cashregistermovement',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cash_register_id', sa.Integer(), nullable=False),
        sa.Column('establishment_id', sa.Integer(), nullable=False),
        sa.Column('movement_type', cash_movement_type, nullable=False),
        sa.Column('payment_method', payment_method_type, nullable=False),
        _money('amount'),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('order_id', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('booking_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=False), nullable=True),
        sa.ForeignKeyConstraint(['cash_register_id'], ['cashregister.id']),
        sa.ForeignKeyConstraint(['establishment_id'], ['establishment.id']),
        sa.ForeignKeyConstraint(['booking_id'], ['booking.id']),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_cashregistermovement_cash_register_id'), 'cashregistermovement', ['cash_register_id'], unique=False)
    op.create_index(op.f('ix_cashregistermovement_establishment_id'), 'cashregistermovement', ['establishment_id'], unique=False)
    op.create_index(op.f('ix_cashregistermovement_movement_type'), 'cashregistermovement', ['movement_type'], unique=False)
    op.create_index(op.f('ix_cashregistermovement_payment_method'), 'cashregistermovement', ['payment_method'], unique=False)
    op.create_index(op.f('ix_cashregistermovement_created_at'), 'cashregistermovement', ['created_at'], unique=False)

    op.create_table(
        'notification',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', notification_type, nullable=False),
        sa.Column('title', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('message', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=False), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=False), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notification_user_id'), 'notification', ['user_id'], unique=False)
    op.create_index(op.f('ix_notification_is_read'), 'notification', ['is_read'], unique=False)
    op.create_index(op.f('ix_notification_created_at'), 'notification', ['created_at'], unique=False)


def downgrade() -> None:
    """Revertir esquema."""
    op.drop_table('notification')
    op.drop_table('cashregistermovement')
    op.drop_table('cashregister')
    op.drop_table('booking')
    op.drop_table('court')
    op.drop_table('establishment')
    op.drop_table('user')
