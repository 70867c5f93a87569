"""
PostgreSQL report store built on the SQLAlchemy async ORM.
"""

import contextvars
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, List, Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from exceptions.exceptions import NotFoundError, PersistenceError
from models.models import PlagiarismTask, StudentPairReport
from plagiarism.interfaces import ReportStore
from plagiarism.schemas import PlagiarismReport, Task

log = logging.getLogger(__name__)

_current_session: contextvars.ContextVar[Optional[AsyncSession]] = contextvars.ContextVar(
    "report_store_session", default=None
)


def _to_report(row: StudentPairReport) -> PlagiarismReport:
    return PlagiarismReport(
        id=row.id,
        task_id=row.task_id,
        student_a=row.student_a,
        student_b=row.student_b,
        similarity=row.similarity,
        file_a_handed_over_at=row.file_a_handed_over_at,
        file_b_handed_over_at=row.file_b_handed_over_at,
    )


class SqlAlchemyReportStore(ReportStore):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator["SqlAlchemyReportStore"]:
        if _current_session.get() is not None:
            yield self
            return

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    token = _current_session.set(session)
                    try:
                        yield self
                    finally:
                        _current_session.reset(token)
        except SQLAlchemyError as e:
            raise PersistenceError(f"transaction failed: {e}") from e

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Session of the enclosing atomic() block, or a short-lived one committed on exit."""
        session = _current_session.get()
        if session is not None:
            yield session
            return

        async with self.session_factory() as session:
            async with session.begin():
                yield session

    async def save_report(self, report: PlagiarismReport) -> None:
        try:
            async with self._session() as session:
                session.add(StudentPairReport(
                    id=report.id,
                    task_id=report.task_id,
                    student_a=report.student_a,
                    student_b=report.student_b,
                    similarity=report.similarity,
                    file_a_handed_over_at=report.file_a_handed_over_at,
                    file_b_handed_over_at=report.file_b_handed_over_at,
                ))
                await session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to save report: {e}") from e

    async def delete_reports_by_task(self, task_id: str) -> None:
        try:
            async with self._session() as session:
                await session.execute(
                    delete(StudentPairReport).where(StudentPairReport.task_id == task_id)
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to delete reports of task {task_id}: {e}") from e

    async def get_reports_by_student(self, student_id: str) -> List[PlagiarismReport]:
        try:
            async with self._session() as session:
                result = await session.execute(
                    select(StudentPairReport).where(
                        or_(
                            StudentPairReport.student_a == student_id,
                            StudentPairReport.student_b == student_id,
                        )
                    )
                )
                return [_to_report(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to load reports of student {student_id}: {e}") from e

    async def save_task(self, task: Task) -> None:
        try:
            async with self._session() as session:
                session.add(PlagiarismTask(
                    id=task.id,
                    analysis_started_at=task.analysis_started_at,
                ))
                await session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to save task {task.id}: {e}") from e

    async def get_task_by_id(self, task_id: str) -> Task:
        try:
            async with self._session() as session:
                row = await session.get(PlagiarismTask, task_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to load task {task_id}: {e}") from e

        if row is None:
            raise NotFoundError(f"task {task_id} not found")
        return Task(id=row.id, analysis_started_at=row.analysis_started_at)

    async def update_task_analysis_time(self, task_id: str, analysis_started_at: datetime) -> None:
        try:
            async with self._session() as session:
                result = await session.execute(
                    update(PlagiarismTask)
                    .where(PlagiarismTask.id == task_id)
                    .values(analysis_started_at=analysis_started_at)
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to update task {task_id}: {e}") from e

        if result.rowcount == 0:
            raise NotFoundError(f"task {task_id} not found")
