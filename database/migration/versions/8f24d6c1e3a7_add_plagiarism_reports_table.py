"""Add plagiarism_reports table

Revision ID: 8f24d6c1e3a7
Revises: 3c1e7a9b2d40
Create Date: 2026-10-12 18:30:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '8f24d6c1e3a7'
down_revision = '3c1e7a9b2d40'
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "plagiarism_reports",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("task_id", sa.String(50), sa.ForeignKey("plagiarism_tasks.id"), nullable=False),
        sa.Column("student_a", sa.String(), nullable=False),
        sa.Column("student_b", sa.String(), nullable=False),
        sa.Column("similarity", sa.Float(), nullable=False),
        sa.Column("file_a_handed_over_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("file_b_handed_over_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_plagiarism_reports_task_id", "plagiarism_reports", ["task_id"])
    op.create_index("idx_reports_student_a", "plagiarism_reports", ["student_a"])
    op.create_index("idx_reports_student_b", "plagiarism_reports", ["student_b"])
    # One report per student pair within a task
    op.create_index(
        "idx_reports_unique_pair",
        "plagiarism_reports",
        ["task_id", "student_a", "student_b"],
        unique=True
    )

def downgrade():
    op.drop_index("idx_reports_unique_pair", table_name="plagiarism_reports")
    op.drop_index("idx_reports_student_b", table_name="plagiarism_reports")
    op.drop_index("idx_reports_student_a", table_name="plagiarism_reports")
    op.drop_index("ix_plagiarism_reports_task_id", table_name="plagiarism_reports")
    op.drop_table("plagiarism_reports")
