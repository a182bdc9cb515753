"""Create lease, signature, payment and audit tables

Revision ID: 0001_create_lease_tables
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_create_lease_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


lease_status = sa.Enum('DRAFT', 'TENANT_SIGNED', 'OWNER_SIGNED', 'FINALIZED', name='leasestatus')
signer_role = sa.Enum('TENANT', 'LANDLORD', name='signerrole')
payment_type = sa.Enum('RENT', 'DEPOSIT', 'FEE', name='paymenttype')
payment_status = sa.Enum('PENDING', 'PAID', 'FAILED', name='paymentstatus')
audit_action = sa.Enum(
    'LEASE_CREATED', 'LEASE_TENANT_SIGNED', 'LEASE_OWNER_SIGNED', 'LEASE_FINALIZED', 'PAYMENT_SETTLED',
    name='auditaction',
)


def upgrade() -> None:
    # Leases table
    op.create_table(
        'leases',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.String(64), nullable=False),
        sa.Column('owner_email', sa.String(255), nullable=True),
        sa.Column('owner_name', sa.String(255), nullable=True),
        sa.Column('tenant_id', sa.String(64), nullable=False),
        sa.Column('tenant_email', sa.String(255), nullable=True),
        sa.Column('tenant_name', sa.String(255), nullable=True),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('terms', sa.Text(), nullable=True),
        sa.Column('status', lease_status, nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(12, 2), nullable=False),
        sa.Column('deposit', sa.Numeric(12, 2), nullable=False),
        sa.Column('finalized_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_leases_owner_id', 'leases', ['owner_id'])
    op.create_index('ix_leases_tenant_id', 'leases', ['tenant_id'])
    op.create_index('ix_leases_status', 'leases', ['status'])
    op.create_index('idx_leases_owner_status', 'leases', ['owner_id', 'status'])

    # Signatures table, one row per party
    op.create_table(
        'lease_signatures',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('lease_id', sa.Uuid(), nullable=False),
        sa.Column('signer_id', sa.String(64), nullable=False),
        sa.Column('signer_name', sa.String(255), nullable=True),
        sa.Column('signer_email', sa.String(255), nullable=True),
        sa.Column('signer_role', signer_role, nullable=False),
        sa.Column('initials', sa.String(10), nullable=True),
        sa.Column('consent_given', sa.Boolean(), nullable=False),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.Column('signed_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['lease_id'], ['leases.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('lease_id', 'signer_role', name='uq_lease_signatures_lease_role'),
    )
    op.create_index('ix_lease_signatures_lease_id', 'lease_signatures', ['lease_id'])

    # Payments table
    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('lease_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('type', payment_type, nullable=False),
        sa.Column('status', payment_status, nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('checkout_session_id', sa.String(255), nullable=True),
        sa.Column('gateway_reference', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['lease_id'], ['leases.id'], ondelete='RESTRICT'),
    )
    op.create_index('ix_payments_lease_id', 'payments', ['lease_id'])
    op.create_index('ix_payments_user_id', 'payments', ['user_id'])
    op.create_index('ix_payments_status', 'payments', ['status'])
    op.create_index('idx_payments_lease_type', 'payments', ['lease_id', 'type'])

    # Audit trail
    op.create_table(
        'lease_audit_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('action', audit_action, nullable=False),
        sa.Column('lease_id', sa.Uuid(), nullable=True),
        sa.Column('user_id', sa.String(64), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_lease_audit_logs_action', 'lease_audit_logs', ['action'])
    op.create_index('ix_lease_audit_logs_lease_id', 'lease_audit_logs', ['lease_id'])


def downgrade() -> None:
    op.drop_table('lease_audit_logs')
    op.drop_table('payments')
    op.drop_table('lease_signatures')
    op.drop_table('leases')

    bind = op.get_bind()
    for enum_type in (audit_action, payment_status, payment_type, signer_role, lease_status):
        enum_type.drop(bind, checkfirst=True)
