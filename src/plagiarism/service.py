"""
Plagiarism analysis of a task: cache freshness, pairwise recompute and
aggregation into one best match per student.
"""

import asyncio
import logging
from datetime import datetime
from itertools import combinations
from typing import Callable, Dict, List, Optional, Tuple

from exceptions.exceptions import AnalysisFailedError, NotFoundError, PlagiarismServiceError
from plagiarism.aggregation import build_max_reports
from plagiarism.analyzer import TextAnalyzer
from plagiarism.interfaces import FileCatalogProvider, ReportStore, TextExtractor
from plagiarism.locks import TaskLocks
from plagiarism.normalizer import normalize_text
from plagiarism.schemas import FileDescriptor, PlagiarismReport, Task, TaskReport, utcnow

log = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 8


class PlagiarismChecker:
    """Extracts, normalizes and compares the files behind two content locators."""

    def __init__(self, extractor: TextExtractor, analyzer: TextAnalyzer):
        self.extractor = extractor
        self.analyzer = analyzer

    async def load_text(self, locator: str) -> str:
        raw_text = await self.extractor.extract_text(locator)
        return normalize_text(raw_text)

    async def compare_files(self, locator_a: str, locator_b: str) -> float:
        text_a = await self.load_text(locator_a)
        text_b = await self.load_text(locator_b)
        return self.analyzer.compare(text_a, text_b)

    def is_plagiarized(self, similarity: float) -> bool:
        return self.analyzer.is_match(similarity)


class _CycleTexts:
    """Normalized texts of one analysis cycle, each locator fetched at most once."""

    def __init__(self, checker: PlagiarismChecker, semaphore: asyncio.Semaphore):
        self.checker = checker
        self.semaphore = semaphore
        self._tasks: Dict[str, asyncio.Task] = {}

    async def _load(self, locator: str) -> str:
        async with self.semaphore:
            return await self.checker.load_text(locator)

    def get(self, locator: str) -> "asyncio.Task[str]":
        task = self._tasks.get(locator)
        if task is None:
            task = asyncio.ensure_future(self._load(locator))
            self._tasks[locator] = task
        return task

    async def cancel_all(self) -> None:
        for task in self._tasks.values():
            task.cancel()
        await asyncio.gather(*self._tasks.values(), return_exceptions=True)


class PlagiarismService:
    """
    Serves plagiarism reports for tasks, recomputing them when the roster changed.

    Args:
        store: Persistence of tasks and pairwise reports
        catalog: Source of the task's current file roster
        extractor: Reads the text behind a file's content locator
        analyzer: Similarity engine
        locks: Per-task lock registry; a process-local one by default
        concurrency: Maximum number of files fetched at the same time
        clock: Source of "now", timezone-aware
    """

    def __init__(
        self,
        store: ReportStore,
        catalog: FileCatalogProvider,
        extractor: TextExtractor,
        analyzer: Optional[TextAnalyzer] = None,
        locks: Optional[TaskLocks] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.catalog = catalog
        self.checker = PlagiarismChecker(extractor, analyzer or TextAnalyzer())
        self.locks = locks or TaskLocks()
        self.concurrency = concurrency
        self.clock = clock

    def is_match(self, similarity: float) -> bool:
        return self.checker.is_plagiarized(similarity)

    async def get_or_compute_report(self, task_id: str) -> TaskReport:
        async with self.locks.hold(task_id):
            return await self._get_or_compute_report(task_id)

    async def _get_or_compute_report(self, task_id: str) -> TaskReport:
        task: Optional[Task]
        try:
            task = await self.store.get_task_by_id(task_id)
        except NotFoundError:
            log.info(f"[Task {task_id}] Task not found, running first analysis")
            task = None

        started_at = self.clock()
        roster = await self.catalog.list_task_files(task_id)

        if task is not None and not self._is_stale(task, roster):
            log.info(f"[Task {task_id}] Cached analysis is fresh, {len(roster)} files in roster")
            reports = await build_max_reports(self.store, task_id, roster)
            return TaskReport(task_id=task_id, started_at=task.analysis_started_at, reports=reports)

        if task is not None:
            log.info(f"[Task {task_id}] Roster changed since {task.analysis_started_at.isoformat()}, recomputing")

        pair_reports = await self._run_analysis(task_id, roster)
        await self._commit(task_id, task, started_at, pair_reports)

        reports = await build_max_reports(self.store, task_id, roster)
        log.info(f"[Task {task_id}] Analysis committed: {len(pair_reports)} pairs, {len(reports)} students matched")
        return TaskReport(task_id=task_id, started_at=started_at, reports=reports)

    @staticmethod
    def _is_stale(task: Task, roster: List[FileDescriptor]) -> bool:
        return any(f.updated_at > task.analysis_started_at for f in roster)

    async def _run_analysis(self, task_id: str, roster: List[FileDescriptor]) -> List[PlagiarismReport]:
        """Compare every unordered pair of the roster. Nothing is written here."""
        files = []
        seen = set()
        for file in roster:
            if file.student_id in seen:
                log.warning(f"[Task {task_id}] Duplicate roster entry for {file.student_id}, using the first one")
                continue
            seen.add(file.student_id)
            files.append(file)

        pairs: List[Tuple[FileDescriptor, FileDescriptor]] = list(combinations(files, 2))
        if not pairs:
            log.info(f"[Task {task_id}] Fewer than 2 files in roster, nothing to compare")
            return []

        log.info(f"[Task {task_id}] Comparing {len(pairs)} pairs of {len(files)} files")
        texts = _CycleTexts(self.checker, asyncio.Semaphore(self.concurrency))
        comparisons = [
            asyncio.ensure_future(self._compare_pair(task_id, texts, file_a, file_b))
            for file_a, file_b in pairs
        ]
        try:
            return list(await asyncio.gather(*comparisons))
        finally:
            for comparison in comparisons:
                comparison.cancel()
            await asyncio.gather(*comparisons, return_exceptions=True)
            await texts.cancel_all()

    async def _compare_pair(
        self,
        task_id: str,
        texts: _CycleTexts,
        file_a: FileDescriptor,
        file_b: FileDescriptor,
    ) -> PlagiarismReport:
        try:
            text_a = await texts.get(file_a.content_locator)
            text_b = await texts.get(file_b.content_locator)
        except PlagiarismServiceError as e:
            log.error(
                f"[Task {task_id}] Failed to compare files of {file_a.student_id} and {file_b.student_id}: {e}"
            )
            raise AnalysisFailedError(
                student_a=file_a.student_id,
                student_b=file_b.student_id,
                reason="file comparison failed",
                cause=e,
            ) from e

        similarity = self.checker.analyzer.compare(text_a, text_b)
        log.debug(f"[Task {task_id}]   {file_a.student_id} vs {file_b.student_id}: {similarity:.4f}")

        return PlagiarismReport(
            task_id=task_id,
            student_a=file_a.student_id,
            student_b=file_b.student_id,
            similarity=similarity,
            file_a_handed_over_at=file_a.updated_at,
            file_b_handed_over_at=file_b.updated_at,
        )

    async def _commit(
        self,
        task_id: str,
        task: Optional[Task],
        started_at: datetime,
        reports: List[PlagiarismReport],
    ) -> None:
        """Replace the task's report set and advance its cache epoch in one transaction."""
        async with self.store.atomic():
            if task is None:
                await self.store.save_task(Task(id=task_id, analysis_started_at=started_at))
            await self.store.delete_reports_by_task(task_id)
            for report in reports:
                await self.store.save_report(report)
            if task is not None:
                await self.store.update_task_analysis_time(task_id, started_at)
