"""initial_schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 09:12:41.508214

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def _money(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision=15, scale=2), nullable=nullable)


def _org_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], ondelete='CASCADE')


def upgrade() -> None:
    """
    Create the business schema.

    Creates:
    - users, organizations, organization_memberships
    - products
    - property_buildings, property_tenants, property_payments, property_receipts
    - customers, credit_accounts, credit_transactions,
      loyalty_accounts, loyalty_transactions
    """
    # 1. Identity and organizations
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('auth_user_id', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_auth_user_id', 'users', ['auth_user_id'], unique=True)

    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'organization_memberships',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=6), nullable=False),
        *_timestamps(),
        _org_fk(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('org_id', 'user_id', name='uq_org_user'),
    )
    op.create_index('ix_organization_memberships_org_id', 'organization_memberships', ['org_id'])
    op.create_index('ix_organization_memberships_user_id', 'organization_memberships', ['user_id'])

    # 2. Inventory
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sku', sa.String(length=100), nullable=True),
        sa.Column('barcode', sa.String(length=100), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        _money('price'),
        _money('cost_price'),
        sa.Column('stock_quantity', sa.Integer(), nullable=False),
        sa.Column('min_stock_level', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        _org_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('org_id', 'sku', name='uq_products_org_sku'),
    )
    op.create_index('ix_products_org_id', 'products', ['org_id'])
    op.create_index('ix_products_org_category', 'products', ['org_id', 'category'])

    # 3. Property management
    op.create_table(
        'property_buildings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('total_units', sa.Integer(), nullable=False),
        sa.Column('occupied_units', sa.Integer(), nullable=False),
        _money('total_rent'),
        _money('collected_rent'),
        *_timestamps(),
        _org_fk(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_property_buildings_org_id', 'property_buildings', ['org_id'])

    op.create_table(
        'property_tenants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('building_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('emergency_contact_name', sa.String(length=200), nullable=True),
        sa.Column('emergency_contact_phone', sa.String(length=50), nullable=True),
        sa.Column('lease_start_date', sa.Date(), nullable=False),
        sa.Column('lease_end_date', sa.Date(), nullable=True),
        _money('monthly_rent'),
        _money('security_deposit'),
        sa.Column('payment_status', sa.String(length=7), nullable=False),
        sa.Column('payment_due_date', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=7), nullable=False),
        *_timestamps(),
        _org_fk(),
        sa.ForeignKeyConstraint(['building_id'], ['property_buildings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_property_tenants_org_id', 'property_tenants', ['org_id'])
    op.create_index('ix_property_tenants_building_id', 'property_tenants', ['building_id'])
    op.create_index('ix_property_tenants_status', 'property_tenants', ['status'])
    op.create_index('ix_property_tenants_org_building', 'property_tenants', ['org_id', 'building_id'])

    op.create_table(
        'property_payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('building_id', sa.Integer(), nullable=False),
        _money('amount'),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('payment_method', sa.String(length=13), nullable=False),
        sa.Column('receipt_number', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=9), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        _org_fk(),
        sa.ForeignKeyConstraint(['tenant_id'], ['property_tenants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['building_id'], ['property_buildings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_property_payments_org_id', 'property_payments', ['org_id'])
    op.create_index('ix_property_payments_tenant_id', 'property_payments', ['tenant_id'])
    op.create_index('ix_property_payments_building_id', 'property_payments', ['building_id'])
    op.create_index('ix_property_payments_payment_date', 'property_payments', ['payment_date'])
    op.create_index('ix_property_payments_org_date', 'property_payments', ['org_id', 'payment_date'])

    op.create_table(
        'property_receipts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('receipt_number', sa.String(length=100), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('building_id', sa.Integer(), nullable=False),
        sa.Column('payment_id', sa.Integer(), nullable=True),
        sa.Column('items', sa.JSON(), nullable=False),
        _money('subtotal'),
        _money('tax_amount'),
        _money('total'),
        sa.Column('payment_method', sa.String(length=13), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        _org_fk(),
        sa.ForeignKeyConstraint(['tenant_id'], ['property_tenants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['building_id'], ['property_buildings.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['payment_id'], ['property_payments.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('org_id', 'receipt_number', name='uq_property_receipts_org_number'),
    )
    op.create_index('ix_property_receipts_org_id', 'property_receipts', ['org_id'])
    op.create_index('ix_property_receipts_date', 'property_receipts', ['date'])
    op.create_index('ix_property_receipts_tenant_id', 'property_receipts', ['tenant_id'])
    op.create_index('ix_property_receipts_building_id', 'property_receipts', ['building_id'])

    # 4. Customers, credit and loyalty
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('customer_number', sa.String(length=20), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address_street', sa.String(length=255), nullable=True),
        sa.Column('address_city', sa.String(length=100), nullable=True),
        sa.Column('address_state', sa.String(length=100), nullable=True),
        sa.Column('address_zip_code', sa.String(length=20), nullable=True),
        sa.Column('address_country', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=9), nullable=False),
        sa.Column('customer_type', sa.String(length=9), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('total_purchases', sa.Integer(), nullable=False),
        _money('total_spent'),
        sa.Column('last_purchase_date', sa.DateTime(), nullable=True),
        *_timestamps(),
        _org_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('org_id', 'customer_number', name='uq_customers_org_number'),
    )
    op.create_index('ix_customers_org_id', 'customers', ['org_id'])
    op.create_index('ix_customers_email', 'customers', ['email'])

    op.create_table(
        'credit_accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _money('credit_limit'),
        _money('current_balance'),
        sa.Column('payment_terms', sa.Integer(), nullable=False),
        sa.Column('last_payment_date', sa.DateTime(), nullable=True),
        _money('last_payment_amount', nullable=True),
        _money('overdue_amount'),
        sa.Column('credit_score', sa.String(length=9), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('customer_id'),
    )

    op.create_table(
        'credit_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('credit_account_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=10), nullable=False),
        _money('amount'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('reference', sa.String(length=100), nullable=True),
        _money('balance_after'),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['credit_account_id'], ['credit_accounts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_credit_transactions_customer_id', 'credit_transactions', ['customer_id'])
    op.create_index(
        'ix_credit_transactions_account_created',
        'credit_transactions',
        ['credit_account_id', 'created_at'],
    )

    op.create_table(
        'loyalty_accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('card_number', sa.String(length=50), nullable=True),
        sa.Column('current_points', sa.Integer(), nullable=False),
        sa.Column('lifetime_points', sa.Integer(), nullable=False),
        sa.Column('tier', sa.String(length=8), nullable=False),
        sa.Column('tier_points', sa.Integer(), nullable=False),
        sa.Column('next_tier_points', sa.Integer(), nullable=False),
        sa.Column('points_to_next_tier', sa.Integer(), nullable=False),
        sa.Column('last_earned_date', sa.DateTime(), nullable=True),
        sa.Column('last_redeemed_date', sa.DateTime(), nullable=True),
        *_timestamps(),
        _org_fk(),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('customer_id'),
        sa.UniqueConstraint('org_id', 'card_number', name='uq_loyalty_accounts_org_card'),
    )
    op.create_index('ix_loyalty_accounts_org_id', 'loyalty_accounts', ['org_id'])
    op.create_index('ix_loyalty_accounts_tier', 'loyalty_accounts', ['tier'])

    op.create_table(
        'loyalty_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('loyalty_account_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=8), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('order_id', sa.String(length=100), nullable=True),
        sa.Column('balance_after', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['loyalty_account_id'], ['loyalty_accounts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_loyalty_transactions_customer_id', 'loyalty_transactions', ['customer_id'])
    op.create_index(
        'ix_loyalty_transactions_loyalty_account_id', 'loyalty_transactions', ['loyalty_account_id']
    )


def downgrade() -> None:
    """
    Drop the business schema.

    WARNING: This deletes all business data.
    """
    # Children before parents
    op.drop_table('loyalty_transactions')
    op.drop_table('loyalty_accounts')
    op.drop_table('credit_transactions')
    op.drop_table('credit_accounts')
    op.drop_table('customers')
    op.drop_table('property_receipts')
    op.drop_table('property_payments')
    op.drop_table('property_tenants')
    op.drop_table('property_buildings')
    op.drop_table('products')
    op.drop_table('organization_memberships')
    op.drop_table('organizations')
    op.drop_table('users')
