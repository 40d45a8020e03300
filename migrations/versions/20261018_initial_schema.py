"""Initial TripFlow schema

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261018_initial'
down_revision = None
branch_labels = None
depends_on = None

plan_tier = sa.Enum('FREE', 'PRO', 'ENTERPRISE', name='plan_tier')
user_role = sa.Enum('GENERAL_USER', 'APPROVER', 'DEPARTMENT_ADMIN', 'ADMIN', name='user_role')
invitation_status = sa.Enum('PENDING', 'ACCEPTED', 'DECLINED', 'EXPIRED', 'CANCELLED', name='invitation_status')
application_type = sa.Enum(
    'BUSINESS_TRIP_REQUEST', 'EXPENSE_REQUEST', 'BUSINESS_REPORT', 'EXPENSE_REPORT', name='application_type'
)
application_status = sa.Enum(
    'DRAFT', 'PENDING', 'APPROVED', 'REJECTED', 'ON_HOLD', 'COMPLETED', name='application_status'
)
application_priority = sa.Enum('HIGH', 'MEDIUM', 'LOW', name='application_priority')
approval_action = sa.Enum(
    'SUBMITTED', 'APPROVED', 'REJECTED', 'ON_HOLD', 'RESUBMITTED', 'COMPLETED', name='approval_action'
)
document_type = sa.Enum(
    'BUSINESS_REPORT', 'EXPENSE_REPORT', 'ALLOWANCE_DETAIL', 'TRAVEL_DETAIL', 'GPS_LOG',
    'MONTHLY_REPORT', 'ANNUAL_REPORT', name='document_type'
)
document_status = sa.Enum('DRAFT', 'SUBMITTED', 'APPROVED', 'REJECTED', name='document_status')
notification_channel = sa.Enum('EMAIL', 'PUSH', name='notification_channel')
notification_category = sa.Enum('APPROVAL', 'REMINDER', 'SYSTEM', 'UPDATE', name='notification_category')


def upgrade():
    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False, unique=True),
        sa.Column('plan', plan_tier, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('position', sa.String(length=120), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_company_id', 'users', ['company_id'])
    op.create_index('ix_users_department_id', 'users', ['department_id'])

    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('manager_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('max_members', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('deactivated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_departments_company_id', 'departments', ['company_id'])

    with op.batch_alter_table('users') as batch_op:
        batch_op.create_foreign_key('fk_users_department_id', 'departments', ['department_id'], ['id'])

    op.create_table(
        'department_memberships',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.Column('left_at', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_department_memberships_user_id', 'department_memberships', ['user_id'])
    op.create_index('ix_department_memberships_department_id', 'department_memberships', ['department_id'])

    op.create_table(
        'invitations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('position', sa.String(length=120), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('invited_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False, unique=True),
        sa.Column('status', invitation_status, nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('declined_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_invitations_company_id', 'invitations', ['company_id'])
    op.create_index('ix_invitations_email', 'invitations', ['email'])

    op.create_table(
        'applications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('applicant_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('type', application_type, nullable=False),
        sa.Column('status', application_status, nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('current_approver_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('priority', application_priority, nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_applications_applicant_id', 'applications', ['applicant_id'])
    op.create_index('ix_applications_department_id', 'applications', ['department_id'])
    op.create_index('ix_applications_status', 'applications', ['status'])
    op.create_index('ix_applications_current_approver_id', 'applications', ['current_approver_id'])
    op.create_index('ix_applications_created_at', 'applications', ['created_at'])

    op.create_table(
        'approval_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('actor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('action', approval_action, nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('previous_status', application_status, nullable=False),
        sa.Column('new_status', application_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_approval_logs_application_id', 'approval_logs', ['application_id'])

    op.create_table(
        'documents',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.Integer(), sa.ForeignKey('applications.id'), nullable=True),
        sa.Column('type', document_type, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('created_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('status', document_status, nullable=False),
        sa.Column('content', sa.JSON(), nullable=True),
        sa.Column('attachment_urls', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_documents_application_id', 'documents', ['application_id'])
    op.create_index('ix_documents_created_by_id', 'documents', ['created_by_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('channel', notification_channel, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('category', notification_category, nullable=False),
        sa.Column('related_application_id', sa.Integer(), sa.ForeignKey('applications.id'), nullable=True),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_timestamp', 'notifications', ['timestamp'])

    op.create_table(
        'notification_settings',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), primary_key=True),
        sa.Column('email_notifications', sa.Boolean(), nullable=False),
        sa.Column('push_notifications', sa.Boolean(), nullable=False),
        sa.Column('reminder_time', sa.String(length=5), nullable=False),
        sa.Column('approval_only', sa.Boolean(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )


def downgrade():
    op.drop_table('notification_settings')
    op.drop_index('ix_notifications_timestamp', table_name='notifications')
    op.drop_index('ix_notifications_user_id', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_documents_created_by_id', table_name='documents')
    op.drop_index('ix_documents_application_id', table_name='documents')
    op.drop_table('documents')
    op.drop_index('ix_approval_logs_application_id', table_name='approval_logs')
    op.drop_table('approval_logs')
    for index in ('created_at', 'current_approver_id', 'status', 'department_id', 'applicant_id'):
        op.drop_index(f'ix_applications_{index}', table_name='applications')
    op.drop_table('applications')
    op.drop_index('ix_invitations_email', table_name='invitations')
    op.drop_index('ix_invitations_company_id', table_name='invitations')
    op.drop_table('invitations')
    op.drop_index('ix_department_memberships_department_id', table_name='department_memberships')
    op.drop_index('ix_department_memberships_user_id', table_name='department_memberships')
    op.drop_table('department_memberships')
    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_constraint('fk_users_department_id', type_='foreignkey')
    op.drop_index('ix_departments_company_id', table_name='departments')
    op.drop_table('departments')
    op.drop_index('ix_users_department_id', table_name='users')
    op.drop_index('ix_users_company_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    op.drop_table('companies')
