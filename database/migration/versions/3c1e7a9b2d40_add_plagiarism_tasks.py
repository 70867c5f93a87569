"""Add plagiarism tasks table

Revision ID: 3c1e7a9b2d40
Revises: 
Create Date: 2026-10-12 18:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3c1e7a9b2d40'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "plagiarism_tasks",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("analysis_started_at", sa.DateTime(timezone=True), nullable=False),
    )

def downgrade():
    op.drop_table("plagiarism_tasks")
