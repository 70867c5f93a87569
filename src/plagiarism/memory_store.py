"""
In-memory report store.
Used for local runs without a database (STORE_BACKEND=memory) and in tests.
"""

import contextvars
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Dict, List, Optional

from exceptions.exceptions import NotFoundError
from plagiarism.interfaces import ReportStore
from plagiarism.schemas import PlagiarismReport, Task, as_utc


class InMemoryReportStore(ReportStore):
    """
    Keeps tasks and reports in process memory.

    Writes inside atomic() are journaled and replayed in one synchronous step
    on a clean exit, so other coroutines never see half of a block.
    """

    def __init__(self):
        self._tasks: Dict[str, Task] = {}
        # insertion order is the "store order" readers observe
        self._reports: List[PlagiarismReport] = []
        self._journal: contextvars.ContextVar[Optional[List[Callable[[], None]]]] = contextvars.ContextVar(
            f"memory_store_journal_{id(self)}", default=None
        )

    @asynccontextmanager
    async def atomic(self):
        if self._journal.get() is not None:
            # nested block joins the outer one
            yield self
            return

        journal: List[Callable[[], None]] = []
        token = self._journal.set(journal)
        try:
            yield self
        finally:
            self._journal.reset(token)
        for operation in journal:
            operation()

    def _apply(self, operation: Callable[[], None]) -> None:
        journal = self._journal.get()
        if journal is None:
            operation()
        else:
            journal.append(operation)

    def _task_will_exist(self, task_id: str) -> bool:
        if task_id in self._tasks:
            return True
        journal = self._journal.get() or []
        return any(getattr(op, "saves_task", None) == task_id for op in journal)

    async def save_report(self, report: PlagiarismReport) -> None:
        stored = report.model_copy()
        self._apply(lambda: self._reports.append(stored))

    async def delete_reports_by_task(self, task_id: str) -> None:
        def delete():
            self._reports = [r for r in self._reports if r.task_id != task_id]
        self._apply(delete)

    async def get_reports_by_student(self, student_id: str) -> List[PlagiarismReport]:
        return [
            r.model_copy()
            for r in self._reports
            if r.student_a == student_id or r.student_b == student_id
        ]

    async def save_task(self, task: Task) -> None:
        stored = task.model_copy()

        def save():
            self._tasks[stored.id] = stored
        save.saves_task = stored.id
        self._apply(save)

    async def get_task_by_id(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError(f"task {task_id} not found")
        return task.model_copy()

    async def update_task_analysis_time(self, task_id: str, analysis_started_at: datetime) -> None:
        if not self._task_will_exist(task_id):
            raise NotFoundError(f"task {task_id} not found")
        started_at = as_utc(analysis_started_at)

        def update():
            self._tasks[task_id] = Task(id=task_id, analysis_started_at=started_at)
        self._apply(update)

    def list_reports(self, task_id: str) -> List[PlagiarismReport]:
        """Reports of one task in store order."""
        return [r.model_copy() for r in self._reports if r.task_id == task_id]
