"""
Alembic migration: Initial DealerHub schema.

Creates the catalog tables (settings_*), vehicle stock, dealers, quotes,
orders, dealer contracts and defect reports. Several columns keep the
lower-case names of the existing database (``companyname``, ``fueltype``,
``baseprice``...) that the ORM models map onto snake_case attributes.

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CATALOG_TABLES = (
    'settings_trims',
    'settings_fuel_types',
    'settings_colors',
    'settings_transmissions',
)


def _id_column() -> sa.Column:
    return sa.Column(
        'id',
        sa.Uuid(as_uuid=False),
        primary_key=True,
        nullable=False,
        comment='Unique identifier for the record',
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()'),
            comment='Timestamp when record was created',
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()'),
            comment='Timestamp when record was last updated',
        ),
    ]


def _money(name: str, default: str = '0', nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.Numeric(12, 2),
        nullable=nullable,
        server_default=None if nullable else sa.text(default),
    )


def _jsonb_list(name: str, comment: Union[str, None] = None) -> sa.Column:
    return sa.Column(
        name,
        postgresql.JSONB(astext_type=sa.Text()),
        nullable=False,
        server_default=sa.text("'[]'::jsonb"),
        comment=comment,
    )


def upgrade() -> None:
    """
    Create every DealerHub table with its indexes and constraints.
    """
    # Catalog
    op.create_table(
        'settings_models',
        _id_column(),
        sa.Column('name', sa.String(100), nullable=False),
        _money('baseprice'),
        sa.Column('imageurl', sa.String(500), nullable=True),
        *_timestamp_columns(),
        sa.CheckConstraint('baseprice >= 0', name='ck_settings_models_price'),
        sa.UniqueConstraint('name', name='uq_settings_models_name'),
        comment='Vehicle models',
    )

    op.create_table(
        'settings_trims',
        _id_column(),
        sa.Column('name', sa.String(100), nullable=False),
        _money('baseprice'),
        _jsonb_list('compatible_models', 'Model ids this trim fits, empty for all'),
        *_timestamp_columns(),
    )

    for table, comment in (
        ('settings_fuel_types', 'Model ids this fuel type fits, empty for all'),
        ('settings_transmissions', 'Model ids this transmission fits, empty for all'),
    ):
        op.create_table(
            table,
            _id_column(),
            sa.Column('name', sa.String(100), nullable=False),
            _money('priceadjustment'),
            _jsonb_list('compatible_models', comment),
            *_timestamp_columns(),
        )

    op.create_table(
        'settings_colors',
        _id_column(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('type', sa.String(50), nullable=False, server_default=''),
        _money('priceadjustment'),
        _jsonb_list('compatible_models', 'Model ids this color fits, empty for all'),
        *_timestamp_columns(),
    )

    op.create_table(
        'settings_accessories',
        _id_column(),
        sa.Column('name', sa.String(150), nullable=False),
        _money('pricewithvat'),
        _money('pricewithoutvat'),
        _jsonb_list('compatible_models', 'Model ids this accessory fits, empty for all'),
        _jsonb_list('compatible_trims', 'Trim ids this accessory fits, empty for all'),
        *_timestamp_columns(),
    )

    # Vehicle stock
    op.create_table(
        'vehicles',
        _id_column(),
        sa.Column('model', sa.String(100), nullable=False),
        sa.Column('trim', sa.String(100), nullable=False, server_default=''),
        sa.Column('fueltype', sa.String(100), nullable=False, server_default=''),
        sa.Column('exteriorcolor', sa.String(150), nullable=False, server_default=''),
        sa.Column('transmission', sa.String(100), nullable=False, server_default=''),
        _jsonb_list('accessories'),
        _money('price'),
        sa.Column('location', sa.String(100), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='available'),
        sa.Column('telaio', sa.String(50), nullable=False, server_default=''),
        sa.Column('dateadded', sa.Date(), nullable=False),
        sa.Column('year', sa.String(4), nullable=True),
        sa.Column('imageurl', sa.String(500), nullable=True),
        sa.Column('custom_image_url', sa.String(500), nullable=True),
        sa.Column('previous_chassis', sa.String(50), nullable=True),
        sa.Column('original_stock', sa.String(20), nullable=True),
        sa.Column('reservedby', sa.String(255), nullable=True),
        _jsonb_list('reservedaccessories'),
        sa.Column('reservation_destination', sa.String(100), nullable=True),
        sa.Column('reservation_timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.Column('estimated_arrival_days', sa.Integer(), nullable=True),
        sa.Column('virtualconfig', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_timestamp_columns(),
        comment='Vehicle stock with configuration and list price',
    )
    op.create_index('ix_vehicles_model', 'vehicles', ['model'])
    op.create_index('ix_vehicles_location', 'vehicles', ['location'])
    op.create_index('ix_vehicles_status', 'vehicles', ['status'])
    op.create_index('ix_vehicles_model_status', 'vehicles', ['model', 'status'])

    # Dealers
    op.create_table(
        'dealers',
        _id_column(),
        sa.Column('companyname', sa.String(255), nullable=False),
        sa.Column('address', sa.String(255), nullable=False, server_default=''),
        sa.Column('city', sa.String(100), nullable=False, server_default=''),
        sa.Column('province', sa.String(10), nullable=False, server_default=''),
        sa.Column('zipcode', sa.String(10), nullable=False, server_default=''),
        sa.Column('isactive', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('contactname', sa.String(255), nullable=False, server_default=''),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('logo', sa.String(500), nullable=True),
        _money('credit_limit', nullable=True),
        *_timestamp_columns(),
        sa.UniqueConstraint('email', name='uq_dealers_email'),
    )

    # Quotes
    op.create_table(
        'quotes',
        _id_column(),
        sa.Column(
            'vehicle_id',
            sa.Uuid(as_uuid=False),
            sa.ForeignKey('vehicles.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'dealer_id',
            sa.Uuid(as_uuid=False),
            sa.ForeignKey('dealers.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('customer_email', sa.String(255), nullable=True),
        sa.Column('customer_phone', sa.String(50), nullable=True),
        _money('price'),
        _money('discount'),
        _money('final_price'),
        _money('accessory_price'),
        _jsonb_list('accessories'),
        _money('license_plate_bonus'),
        _money('trade_in_bonus'),
        _money('safety_kit'),
        _money('trade_in_handling_fee'),
        _money('road_preparation_fee', '350'),
        sa.Column('reduced_vat', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('vat_rate', sa.Numeric(5, 2), nullable=False, server_default=sa.text('22')),
        sa.Column('has_trade_in', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('trade_in_brand', sa.String(100), nullable=True),
        sa.Column('trade_in_model', sa.String(100), nullable=True),
        sa.Column('trade_in_year', sa.String(4), nullable=True),
        sa.Column('trade_in_km', sa.Integer(), nullable=True),
        _money('trade_in_value'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('manual_entry', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        *_timestamp_columns(),
    )
    op.create_index('ix_quotes_vehicle_id', 'quotes', ['vehicle_id'])
    op.create_index('ix_quotes_dealer_id', 'quotes', ['dealer_id'])
    op.create_index('ix_quotes_status', 'quotes', ['status'])

    # Orders
    op.create_table(
        'orders',
        _id_column(),
        sa.Column(
            'vehicle_id',
            sa.Uuid(as_uuid=False),
            sa.ForeignKey('vehicles.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column(
            'dealer_id',
            sa.Uuid(as_uuid=False),
            sa.ForeignKey('dealers.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column(
            'quote_id',
            sa.Uuid(as_uuid=False),
            sa.ForeignKey('quotes.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='processing'),
        sa.Column('order_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('delivery_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('progressive_number', sa.Integer(), nullable=False, server_default=sa.text('0')),
        _money('price'),
        sa.Column('dealer_name', sa.String(255), nullable=True),
        sa.Column('model_name', sa.String(100), nullable=True),
        _money('plafond_dealer', nullable=True),
        sa.Column('is_licensable', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('has_proforma', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_invoiced', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('invoice_number', sa.String(50), nullable=True),
        sa.Column('invoice_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('has_conformity', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('previous_chassis', sa.String(50), nullable=True),
        sa.Column('chassis', sa.String(50), nullable=True),
        sa.Column('funding_type', sa.String(30), nullable=True),
        _money('transport_costs'),
        _money('restoration_costs'),
        sa.Column('odl_generated', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamp_columns(),
        sa.UniqueConstraint('progressive_number', name='uq_orders_progressive_number'),
    )
    op.create_index('ix_orders_vehicle_id', 'orders', ['vehicle_id'])
    op.create_index('ix_orders_dealer_id', 'orders', ['dealer_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    # Dealer contracts
    op.create_table(
        'dealer_contracts',
        _id_column(),
        sa.Column(
            'dealer_id',
            sa.Uuid(as_uuid=False),
            sa.ForeignKey('dealers.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'car_id',
            sa.Uuid(as_uuid=False),
            sa.ForeignKey('vehicles.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('contract_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            'contract_details',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column('status', sa.String(20), nullable=False, server_default='attivo'),
        *_timestamp_columns(),
    )
    op.create_index('ix_dealer_contracts_dealer_id', 'dealer_contracts', ['dealer_id'])

    # Defect reports
    op.create_table(
        'defect_reports',
        _id_column(),
        sa.Column('case_number', sa.Integer(), nullable=False),
        sa.Column(
            'dealer_id',
            sa.Uuid(as_uuid=False),
            sa.ForeignKey('dealers.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('dealer_name', sa.String(255), nullable=False),
        sa.Column(
            'vehicle_id',
            sa.Uuid(as_uuid=False),
            sa.ForeignKey('vehicles.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('email', sa.String(255), nullable=False, server_default=''),
        sa.Column('status', sa.String(30), nullable=False, server_default='Aperta'),
        sa.Column('reason', sa.String(60), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('vehicle_receipt_date', sa.DateTime(timezone=True), nullable=False),
        _money('repair_cost'),
        _money('approved_repair_value'),
        sa.Column('spare_parts_request', sa.Text(), nullable=False, server_default=''),
        sa.Column('transport_document_url', sa.String(500), nullable=False, server_default=''),
        _jsonb_list('photo_report_urls'),
        sa.Column('repair_quote_url', sa.String(500), nullable=False, server_default=''),
        sa.Column('admin_notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=True),
        *_timestamp_columns(),
        sa.UniqueConstraint('case_number', name='uq_defect_reports_case_number'),
    )
    op.create_index('ix_defect_reports_dealer_id', 'defect_reports', ['dealer_id'])
    op.create_index('ix_defect_reports_status', 'defect_reports', ['status'])


def downgrade() -> None:
    """
    Drop every DealerHub table in reverse dependency order.
    """
    op.drop_table('defect_reports')
    op.drop_table('dealer_contracts')
    op.drop_table('orders')
    op.drop_table('quotes')
    op.drop_table('dealers')
    op.drop_table('vehicles')
    op.drop_table('settings_accessories')
    for table in reversed(CATALOG_TABLES):
        op.drop_table(table)
    op.drop_table('settings_models')
