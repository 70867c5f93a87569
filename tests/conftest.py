"""Shared fixtures: in-memory collaborators and a controllable clock."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Union

import pytest

from exceptions.exceptions import UpstreamUnavailableError
from plagiarism.analyzer import TextAnalyzer
from plagiarism.interfaces import FileCatalogProvider, TextExtractor
from plagiarism.memory_store import InMemoryReportStore
from plagiarism.schemas import FileDescriptor
from plagiarism.service import PlagiarismService

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 60) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class FakeCatalog(FileCatalogProvider):
    def __init__(self):
        self.rosters: Dict[str, List[FileDescriptor]] = {}
        self.calls = 0
        self.fail = False

    def set_roster(self, task_id: str, files: List[FileDescriptor]) -> None:
        self.rosters[task_id] = files

    async def list_task_files(self, task_id: str) -> List[FileDescriptor]:
        self.calls += 1
        if self.fail:
            raise UpstreamUnavailableError("failed to connect to storage service")
        return list(self.rosters.get(task_id, []))


class FakeExtractor(TextExtractor):
    """Serves texts by locator; an exception instance as value is raised instead."""

    def __init__(self, texts: Optional[Dict[str, Union[str, Exception]]] = None):
        self.texts: Dict[str, Union[str, Exception]] = dict(texts or {})
        self.calls: List[str] = []

    async def extract_text(self, locator: str) -> str:
        self.calls.append(locator)
        value = self.texts[locator]
        if isinstance(value, Exception):
            raise value
        return value


def make_file(student_id: str, updated_at: datetime = T0 - timedelta(hours=1), locator: Optional[str] = None) -> FileDescriptor:
    return FileDescriptor(
        student_id=student_id,
        updated_at=updated_at,
        content_locator=locator or f"http://storage/{student_id}.txt",
    )


ESSAY_ONE = (
    "Исследование показывает что нейронные сети эффективно решают задачи "
    "классификации изображений при достаточном объеме обучающих данных"
)
ESSAY_ONE_COPY = (
    "Исследование показывает, что нейронные сети эффективно решают задачи "
    "классификации изображений при достаточном объеме обучающих данных!"
)
ESSAY_OTHER = (
    "Квантовая механика описывает поведение элементарных частиц через "
    "волновую функцию вероятностной природы"
)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryReportStore()


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def extractor():
    return FakeExtractor({
        "http://storage/s1.txt": ESSAY_ONE,
        "http://storage/s2.txt": ESSAY_ONE_COPY,
        "http://storage/s3.txt": ESSAY_OTHER,
    })


@pytest.fixture
def service(store, catalog, extractor, clock):
    return PlagiarismService(
        store=store,
        catalog=catalog,
        extractor=extractor,
        analyzer=TextAnalyzer(3, 0.7),
        clock=clock,
    )
