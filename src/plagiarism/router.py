from fastapi import APIRouter, Depends, Request

from plagiarism.schemas import TaskReport
from plagiarism.service import PlagiarismService
from plagiarism.validation import validate_task_id

router = APIRouter(prefix="/plagiarism", tags=["Plagiarism"])


def get_plagiarism_service(request: Request) -> PlagiarismService:
    return request.app.state.plagiarism_service


@router.get("/{task_id}/report", response_model=TaskReport)
async def get_plagiarism_report(
    task_id: str,
    service: PlagiarismService = Depends(get_plagiarism_service),
):
    """Best match per student for a task, recomputed when a submission changed since the last analysis."""
    validate_task_id(task_id)
    return await service.get_or_compute_report(task_id)


@router.get("/report", response_model=TaskReport)
async def get_plagiarism_report_by_query(
    task_id: str = "",
    service: PlagiarismService = Depends(get_plagiarism_service),
):
    validate_task_id(task_id)
    return await service.get_or_compute_report(task_id)
