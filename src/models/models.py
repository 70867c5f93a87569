from sqlalchemy import Column, String, DateTime, Float, ForeignKey, Index, Uuid
from sqlalchemy.sql import func
import uuid

from database import Base


class PlagiarismTask(Base):
    __tablename__ = "plagiarism_tasks"

    id = Column(String(50), primary_key=True)
    analysis_started_at = Column(DateTime(timezone=True), nullable=False)  # Cache epoch of the last committed analysis


class StudentPairReport(Base):
    __tablename__ = "plagiarism_reports"
    __table_args__ = (
        Index("idx_reports_unique_pair", "task_id", "student_a", "student_b", unique=True),
        Index("idx_reports_student_a", "student_a"),
        Index("idx_reports_student_b", "student_b"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    task_id = Column(String(50), ForeignKey("plagiarism_tasks.id"), nullable=False, index=True)
    student_a = Column(String, nullable=False)
    student_b = Column(String, nullable=False)
    similarity = Column(Float, nullable=False)
    file_a_handed_over_at = Column(DateTime(timezone=True), nullable=False)
    file_b_handed_over_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
