"""Add email preference flags to profiles

Revision ID: 0001_profile_email_preferences
Revises: 0000_initial
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_profile_email_preferences'
down_revision = '0000_initial'
branch_labels = None
depends_on = None


def upgrade():
    op.add_column('profiles', sa.Column('email_notifications', sa.Boolean(), nullable=False,
                                        server_default=sa.true()))
    op.add_column('profiles', sa.Column('marketing_emails', sa.Boolean(), nullable=False,
                                        server_default=sa.false()))


def downgrade():
    op.drop_column('profiles', 'marketing_emails')
    op.drop_column('profiles', 'email_notifications')
