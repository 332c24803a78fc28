"""Initial schema: organizations, users, memberships, transactions, summaries

1. organizations: tenant root with a default currency
2. users: globally unique email, bcrypt password hash
3. memberships: user <-> organization grants, unique per pair
4. transactions: append-only ledger, positive whole amounts, restrict on delete
5. summaries: one cached summary row per organization (upsert key org_id)

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-11-15
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('organizations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('default_currency', sa.String(length=4), nullable=False, server_default='CAD'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )

    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('memberships',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='owner'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_memberships_user_id', ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], name='fk_memberships_org_id', ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'org_id', name='uq_memberships_user_org'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_memberships_user_id', 'memberships', ['user_id'])
    op.create_index('ix_memberships_org_id', 'memberships', ['org_id'])

    op.create_table('transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=4), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], name='fk_transactions_org_id', ondelete='RESTRICT'),
        sa.CheckConstraint('amount > 0', name='ck_transactions_amount_positive'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_transactions_org_id', 'transactions', ['org_id'])
    op.create_index('ix_transactions_org_occurred', 'transactions', ['org_id', 'occurred_at'])

    op.create_table('summaries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('cash_on_hand', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('monthly_burn', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('runway_months', sa.Float(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], name='fk_summaries_org_id', ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_summaries_org_id', 'summaries', ['org_id'], unique=True)


def downgrade():
    op.drop_index('ix_summaries_org_id', table_name='summaries')
    op.drop_table('summaries')
    op.drop_index('ix_transactions_org_occurred', table_name='transactions')
    op.drop_index('ix_transactions_org_id', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('ix_memberships_org_id', table_name='memberships')
    op.drop_index('ix_memberships_user_id', table_name='memberships')
    op.drop_table('memberships')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    op.drop_table('organizations')
