"""Create the expense management schema

Revision ID: 20251005_initial_schema
Revises:
Create Date: 2025-10-05 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20251005_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

USER_ROLE = sa.Enum('ADMIN', 'MANAGER', 'EMPLOYEE', name='user_role')
EXPENSE_CATEGORY = sa.Enum('TRAVEL', 'FOOD', 'OFFICE', 'EQUIPMENT', 'SOFTWARE', 'OTHER', name='expense_category')
EXPENSE_STATUS = sa.Enum('DRAFT', 'PENDING', 'APPROVED', 'REJECTED', name='expense_status')
APPROVAL_STATUS = sa.Enum('PENDING', 'APPROVED', 'REJECTED', name='approval_status')
NOTIFICATION_TYPE = sa.Enum(
    'EXPENSE_SUBMITTED', 'APPROVAL_REQUIRED', 'EXPENSE_APPROVED', 'EXPENSE_REJECTED', name='notification_type'
)
ACTIVITY_ACTION = sa.Enum(
    'LOGIN',
    'EXPENSE_CREATED',
    'EXPENSE_UPDATED',
    'EXPENSE_DELETED',
    'EXPENSE_SUBMITTED',
    'EXPENSE_APPROVED',
    'EXPENSE_REJECTED',
    'USER_CREATED',
    'USER_UPDATED',
    name='activity_action',
)


def upgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = inspector.get_table_names()

    if 'companies' not in tables:
        op.create_table(
            'companies',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=255), nullable=False, unique=True),
            sa.Column('country', sa.String(length=120), nullable=False),
            sa.Column('currency_code', sa.String(length=10), nullable=False),
            sa.Column('settings', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )

    if 'users' not in tables:
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('first_name', sa.String(length=100), nullable=False),
            sa.Column('last_name', sa.String(length=100), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('password_hash', sa.String(length=255), nullable=False),
            sa.Column('role', USER_ROLE, nullable=False),
            sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
            sa.Column('manager_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('avatar_url', sa.String(length=255), nullable=True),
            sa.Column('preferences', sa.JSON(), nullable=False),
            sa.Column('last_login_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)
        op.create_index('ix_users_company_id', 'users', ['company_id'])
        op.create_index('ix_users_manager_id', 'users', ['manager_id'])

    if 'expenses' not in tables:
        op.create_table(
            'expenses',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
            sa.Column('employee_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('amount', sa.Numeric(12, 2), nullable=False),
            sa.Column('original_currency', sa.String(length=10), nullable=False),
            sa.Column('converted_amount', sa.Numeric(12, 2), nullable=True),
            sa.Column('exchange_rate', sa.Numeric(18, 8), nullable=True),
            sa.Column('category', EXPENSE_CATEGORY, nullable=False),
            sa.Column('subcategory', sa.String(length=120), nullable=True),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('expense_date', sa.Date(), nullable=False),
            sa.Column('receipt_url', sa.String(length=255), nullable=True),
            sa.Column('receipt_data', sa.JSON(), nullable=True),
            sa.Column('location', sa.JSON(), nullable=True),
            sa.Column('tags', sa.JSON(), nullable=False),
            sa.Column('status', EXPENSE_STATUS, nullable=False),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index('ix_expenses_company_id', 'expenses', ['company_id'])
        op.create_index('ix_expenses_employee_id', 'expenses', ['employee_id'])
        op.create_index('ix_expenses_status', 'expenses', ['status'])
        op.create_index('ix_expenses_created_at', 'expenses', ['created_at'])

    if 'approval_steps' not in tables:
        op.create_table(
            'approval_steps',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column(
                'expense_id', sa.Integer(), sa.ForeignKey('expenses.id', ondelete='CASCADE'), nullable=False
            ),
            sa.Column('approver_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('step_order', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('status', APPROVAL_STATUS, nullable=False),
            sa.Column('comments', sa.Text(), nullable=True),
            sa.Column('decided_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index('ix_approval_steps_expense_id', 'approval_steps', ['expense_id'])
        op.create_index('ix_approval_steps_approver_id', 'approval_steps', ['approver_id'])
        op.create_index('ix_approval_steps_status', 'approval_steps', ['status'])

    if 'approval_workflows' not in tables:
        op.create_table(
            'approval_workflows',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('rules', sa.JSON(), nullable=False),
            sa.Column('conditions', sa.JSON(), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
            sa.UniqueConstraint('company_id', 'name', name='uq_approval_workflows_company_name'),
        )
        op.create_index('ix_approval_workflows_company_id', 'approval_workflows', ['company_id'])

    if 'notifications' not in tables:
        op.create_table(
            'notifications',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
            sa.Column('type', NOTIFICATION_TYPE, nullable=False),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('message', sa.Text(), nullable=False),
            sa.Column('data', sa.JSON(), nullable=True),
            sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
        op.create_index('ix_notifications_company_id', 'notifications', ['company_id'])
        op.create_index('ix_notifications_read', 'notifications', ['read'])

    if 'activity_logs' not in tables:
        op.create_table(
            'activity_logs',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
            sa.Column(
                'expense_id', sa.Integer(), sa.ForeignKey('expenses.id', ondelete='SET NULL'), nullable=True
            ),
            sa.Column('action', ACTIVITY_ACTION, nullable=False),
            sa.Column('details', sa.JSON(), nullable=True),
            sa.Column('ip_address', sa.String(length=64), nullable=True),
            sa.Column('user_agent', sa.String(length=255), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        )
        op.create_index('ix_activity_logs_user_id', 'activity_logs', ['user_id'])
        op.create_index('ix_activity_logs_expense_id', 'activity_logs', ['expense_id'])
        op.create_index('ix_activity_logs_action', 'activity_logs', ['action'])
        op.create_index('ix_activity_logs_created_at', 'activity_logs', ['created_at'])


def downgrade():
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = inspector.get_table_names()

    for table in (
        'activity_logs',
        'notifications',
        'approval_workflows',
        'approval_steps',
        'expenses',
        'users',
        'companies',
    ):
        if table in tables:
            op.drop_table(table)

    if bind.dialect.name == 'postgresql':
        for enum_type in (
            ACTIVITY_ACTION,
            NOTIFICATION_TYPE,
            APPROVAL_STATUS,
            EXPENSE_STATUS,
            EXPENSE_CATEGORY,
            USER_ROLE,
        ):
            enum_type.drop(bind, checkfirst=True)
