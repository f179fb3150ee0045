"""Vendor registrations, documents and approval log

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def _flag(name):
    return sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.text('false'))


def upgrade():
    op.create_table(
        'vendor_registrations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('business_name', sa.String(length=255), nullable=True),
        sa.Column('brand_name', sa.String(length=255), nullable=True),
        sa.Column('entity_type', sa.String(length=50), nullable=True),
        sa.Column('year_established', sa.Integer(), nullable=True),
        sa.Column('employee_count', sa.String(length=20), nullable=True),
        sa.Column('annual_turnover', sa.String(length=20), nullable=True),
        sa.Column('pan_number', sa.String(length=10), nullable=True),
        sa.Column('gst_number', sa.String(length=15), nullable=True),
        sa.Column('msme_number', sa.String(length=50), nullable=True),
        sa.Column('fssai_number', sa.String(length=50), nullable=True),
        sa.Column('cin_number', sa.String(length=50), nullable=True),
        sa.Column('contact_person_name', sa.String(length=255), nullable=True),
        sa.Column('contact_person_designation', sa.String(length=100), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=20), nullable=True),
        sa.Column('contact_whatsapp', sa.String(length=20), nullable=True),
        sa.Column('secondary_contact_name', sa.String(length=255), nullable=True),
        sa.Column('secondary_contact_email', sa.String(length=255), nullable=True),
        sa.Column('secondary_contact_phone', sa.String(length=20), nullable=True),
        sa.Column('registered_address', sa.Text(), nullable=True),
        sa.Column('registered_city', sa.String(length=100), nullable=True),
        sa.Column('registered_state', sa.String(length=100), nullable=True),
        sa.Column('registered_pincode', sa.String(length=6), nullable=True),
        sa.Column('operational_address', sa.Text(), nullable=True),
        sa.Column('operational_city', sa.String(length=100), nullable=True),
        sa.Column('operational_state', sa.String(length=100), nullable=True),
        sa.Column('operational_pincode', sa.String(length=6), nullable=True),
        sa.Column('categories', sa.JSON(), nullable=False),
        sa.Column('primary_category', sa.String(length=50), nullable=True),
        sa.Column('service_description', sa.Text(), nullable=True),
        sa.Column('service_cities', sa.JSON(), nullable=False),
        sa.Column('service_states', sa.JSON(), nullable=False),
        _flag('pan_india_service'),
        sa.Column('pricing_tier', sa.String(length=20), nullable=True),
        sa.Column('minimum_budget', sa.Integer(), nullable=True),
        sa.Column('average_event_value', sa.Integer(), nullable=True),
        sa.Column('bank_name', sa.String(length=255), nullable=True),
        sa.Column('bank_branch', sa.String(length=255), nullable=True),
        sa.Column('account_number', sa.String(length=30), nullable=True),
        sa.Column('ifsc_code', sa.String(length=11), nullable=True),
        sa.Column('account_holder_name', sa.String(length=255), nullable=True),
        sa.Column('upi_id', sa.String(length=100), nullable=True),
        sa.Column('website_url', sa.String(length=500), nullable=True),
        sa.Column('instagram_url', sa.String(length=500), nullable=True),
        sa.Column('facebook_url', sa.String(length=500), nullable=True),
        sa.Column('youtube_url', sa.String(length=500), nullable=True),
        _flag('has_no_pending_litigation'),
        _flag('has_never_blacklisted'),
        _flag('has_liability_insurance'),
        _flag('has_fire_safety_certificate'),
        _flag('has_pollution_certificate'),
        _flag('agrees_to_terms'),
        _flag('agrees_to_nda'),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='draft'),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_by', sa.String(length=64), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by', sa.String(length=64), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('rejection_notes', sa.Text(), nullable=True),
        sa.Column('standing_reason', sa.Text(), nullable=True),
        sa.Column('internal_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_vendor_registrations')),
    )
    op.create_index(op.f('ix_vendor_reg_status'), 'vendor_registrations', ['status'], unique=False)
    op.create_index(op.f('ix_vendor_reg_created'), 'vendor_registrations', ['created_at'], unique=False)
    op.create_index(op.f('ix_vendor_registrations_business_name'), 'vendor_registrations', ['business_name'], unique=False)
    op.create_index(op.f('ix_vendor_registrations_contact_email'), 'vendor_registrations', ['contact_email'], unique=False)

    op.create_table(
        'vendor_documents',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('vendor_registration_id', sa.Uuid(), nullable=False),
        sa.Column('document_type', sa.String(length=50), nullable=False),
        sa.Column('document_name', sa.String(length=255), nullable=False),
        sa.Column('document_url', sa.String(length=1000), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('issue_date', sa.Date(), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('verification_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('verified_by', sa.String(length=64), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('verification_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['vendor_registration_id'], ['vendor_registrations.id'], name=op.f('fk_vendor_documents_vendor_registration_id_vendor_registrations'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_vendor_documents')),
    )
    op.create_index(op.f('ix_vendor_doc_registration'), 'vendor_documents', ['vendor_registration_id'], unique=False)
    op.create_index(op.f('ix_vendor_doc_status'), 'vendor_documents', ['verification_status'], unique=False)

    op.create_table(
        'vendor_approval_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('vendor_registration_id', sa.Uuid(), nullable=False),
        sa.Column('document_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('performed_by', sa.String(length=64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('previous_status', sa.String(length=30), nullable=True),
        sa.Column('new_status', sa.String(length=30), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['vendor_registration_id'], ['vendor_registrations.id'], name=op.f('fk_vendor_approval_logs_vendor_registration_id_vendor_registrations'), ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['document_id'], ['vendor_documents.id'], name=op.f('fk_vendor_approval_logs_document_id_vendor_documents'), ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_vendor_approval_logs')),
    )
    op.create_index(op.f('ix_vendor_log_registration_created'), 'vendor_approval_logs', ['vendor_registration_id', 'created_at'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_vendor_log_registration_created'), table_name='vendor_approval_logs')
    op.drop_table('vendor_approval_logs')
    op.drop_index(op.f('ix_vendor_doc_status'), table_name='vendor_documents')
    op.drop_index(op.f('ix_vendor_doc_registration'), table_name='vendor_documents')
    op.drop_table('vendor_documents')
    op.drop_index(op.f('ix_vendor_registrations_contact_email'), table_name='vendor_registrations')
    op.drop_index(op.f('ix_vendor_registrations_business_name'), table_name='vendor_registrations')
    op.drop_index(op.f('ix_vendor_reg_created'), table_name='vendor_registrations')
    op.drop_index(op.f('ix_vendor_reg_status'), table_name='vendor_registrations')
    op.drop_table('vendor_registrations')
