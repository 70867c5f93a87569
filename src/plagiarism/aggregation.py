import logging
from typing import List, Optional, Sequence

from plagiarism.interfaces import ReportStore
from plagiarism.schemas import AggregatedMatch, FileDescriptor, PlagiarismReport

log = logging.getLogger(__name__)


def to_aggregated_match(report: PlagiarismReport, student_id: str) -> AggregatedMatch:
    """Mirror a stored pair so that student_id is on the "student" side."""
    if report.student_a == student_id:
        return AggregatedMatch(
            student=report.student_a,
            matched_student=report.student_b,
            max_similarity=report.similarity,
            matched_file_handed_over_at=report.file_b_handed_over_at,
        )
    return AggregatedMatch(
        student=report.student_b,
        matched_student=report.student_a,
        max_similarity=report.similarity,
        matched_file_handed_over_at=report.file_a_handed_over_at,
    )


def select_max_report(reports: Sequence[PlagiarismReport], task_id: str) -> Optional[PlagiarismReport]:
    """Report of the task with the highest similarity; the first one wins a tie."""
    best = None
    for report in reports:
        if report.task_id != task_id:
            continue
        if best is None or report.similarity > best.similarity:
            best = report
    return best


async def build_max_reports(
    store: ReportStore,
    task_id: str,
    roster: Sequence[FileDescriptor],
) -> List[AggregatedMatch]:
    """
    One best match per student of the roster, in roster order.

    Students without any report in the task are left out.
    """
    result = []
    seen = set()

    for file in roster:
        student_id = file.student_id
        if student_id in seen:
            continue
        seen.add(student_id)

        stored_reports = await store.get_reports_by_student(student_id)
        best = select_max_report(stored_reports, task_id)
        if best is not None:
            result.append(to_aggregated_match(best, student_id))

    log.debug(f"[Task {task_id}] Aggregated {len(result)} best matches for {len(seen)} students")
    return result
