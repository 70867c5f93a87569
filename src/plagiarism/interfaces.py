"""
Contracts of the collaborators the analysis service depends on.
Implementations are passed to PlagiarismService through its constructor.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import List

from plagiarism.schemas import FileDescriptor, PlagiarismReport, Task


class FileCatalogProvider(ABC):

    @abstractmethod
    async def list_task_files(self, task_id: str) -> List[FileDescriptor]:
        """
        Current roster of submitted files for a task.

        Raises:
            UpstreamUnavailableError: the catalog could not be reached
        """


class TextExtractor(ABC):

    @abstractmethod
    async def extract_text(self, locator: str) -> str:
        """
        Raw text of the file behind a content locator.

        Raises:
            DownloadFailedError: the content could not be fetched
            ExtractionFailedError: the content is corrupt or unsupported
        """


class ReportStore(ABC):
    """
    Durable storage of tasks and pairwise reports.

    Writes issued inside ``async with store.atomic():`` are committed together
    when the block exits cleanly and discarded otherwise. Readers never observe
    a partially applied block.
    """

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager:
        ...

    @abstractmethod
    async def save_report(self, report: PlagiarismReport) -> None:
        ...

    @abstractmethod
    async def delete_reports_by_task(self, task_id: str) -> None:
        ...

    @abstractmethod
    async def get_reports_by_student(self, student_id: str) -> List[PlagiarismReport]:
        """Reports in which the student is on either side, across all tasks."""

    @abstractmethod
    async def save_task(self, task: Task) -> None:
        ...

    @abstractmethod
    async def get_task_by_id(self, task_id: str) -> Task:
        """Raises NotFoundError when the task does not exist."""

    @abstractmethod
    async def update_task_analysis_time(self, task_id: str, analysis_started_at: datetime) -> None:
        """Raises NotFoundError when the task does not exist."""
