"""
Alembic migration to create the email_verifications and reservations tables
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261017'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'email_verifications',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('email', sa.String, nullable=False),
        sa.Column('code', sa.String(6), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_verified', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_email_verifications_email_code', 'email_verifications', ['email', 'code'])

    op.create_table(
        'reservations',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String, nullable=True),
        sa.Column('phone', sa.String, nullable=True),
        sa.Column('email', sa.String, nullable=True),
        sa.Column('program_type', sa.String, nullable=True),
        sa.Column('reservation_date', sa.String, nullable=True),
        sa.Column('reservation_time', sa.String, nullable=True),
        sa.Column('guests', sa.Integer, nullable=True),
        sa.Column('total_amount', sa.Integer, nullable=True),
        sa.Column('prepaid_amount', sa.Integer, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_reservations_reservation_date', 'reservations', ['reservation_date'])


def downgrade():
    op.drop_index('ix_reservations_reservation_date', table_name='reservations')
    op.drop_table('reservations')
    op.drop_index('idx_email_verifications_email_code', table_name='email_verifications')
    op.drop_table('email_verifications')
