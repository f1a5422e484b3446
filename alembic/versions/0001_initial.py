"""Initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

Tables:
- roles, permissions, role_permissions
- users
- sheets
- audit_logs
- global_parameters
"""

from alembic import op
import sqlalchemy as sa

revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade():
    # =========================================================================
    # ROLES AND PERMISSIONS
    # =========================================================================

    op.create_table(
        'roles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'permissions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('module', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('module', 'action', name='uq_permissions_module_action'),
    )

    op.create_table(
        'role_permissions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('role_id', sa.Uuid(), nullable=False),
        sa.Column('permission_id', sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['permission_id'], ['permissions.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('role_id', 'permission_id', name='uq_role_permissions'),
    )

    # =========================================================================
    # USERS AND SHEETS
    # =========================================================================

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('password_hash', sa.String(), nullable=True),
        sa.Column('oauth_provider', sa.String(), nullable=True),
        sa.Column('oauth_provider_id', sa.String(), nullable=True),
        sa.Column('plan_tier', sa.String(), server_default='free', nullable=False),
        sa.Column('status', sa.String(), server_default='active', nullable=False),
        sa.Column('role_id', sa.Uuid(), nullable=True),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('oauth_provider', 'oauth_provider_id', name='uq_users_oauth_identity'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'sheets',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('base_data', sa.JSON(), nullable=False),
        sa.Column('custom_columns', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_sheets_owner_id', 'sheets', ['owner_id'])

    # =========================================================================
    # ADMINISTRATION
    # =========================================================================

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('admin_id', sa.Uuid(), nullable=True),
        sa.Column('target_id', sa.Uuid(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['admin_id'], ['users.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])

    op.create_table(
        'global_parameters',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('cost_per_kg_filament', sa.Numeric(12, 4), nullable=False),
        sa.Column('cost_per_kwh', sa.Numeric(12, 4), nullable=False),
        sa.Column('printer_wattage', sa.Numeric(12, 4), nullable=False),
        sa.Column('cost_per_hour', sa.Numeric(12, 4), nullable=False),
        sa.Column('profit_margin_percent', sa.Numeric(8, 4), nullable=False),
        sa.Column('marketplace_fee_percent', sa.Numeric(8, 4), nullable=False),
        sa.Column('currency', sa.String(3), server_default='BRL', nullable=False),
        sa.Column('backup_retention_days', sa.Integer(), server_default='30', nullable=False),
        sa.Column('support_email', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('global_parameters')
    op.drop_index('ix_audit_logs_action', table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_index('ix_sheets_owner_id', table_name='sheets')
    op.drop_table('sheets')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    op.drop_table('role_permissions')
    op.drop_table('permissions')
    op.drop_table('roles')
