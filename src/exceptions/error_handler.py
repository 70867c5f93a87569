import logging

from fastapi import FastAPI
from starlette.responses import JSONResponse

from exceptions.exceptions import AnalysisFailedError, PlagiarismServiceError

log = logging.getLogger(__name__)


def add_exception_handler(app: FastAPI) -> None:
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request, err):
        log.error(f"Unhandled error on {request.url.path}: {type(err).__name__}: {err}")
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "kind": "internal_error",
                "error_details": "internal error",
            },
        )

    @app.exception_handler(PlagiarismServiceError)
    async def service_exception_handler(request, err):
        if err.status_code >= 500:
            log.error(f"{err.kind.value} on {request.url.path}: {err}")
        else:
            log.warning(f"{err.kind.value} on {request.url.path}: {err}")

        content = {
            "status": "error",
            "kind": err.kind.value,
            "error_details": str(err),
        }
        if isinstance(err, AnalysisFailedError):
            content["students"] = [err.student_a, err.student_b]
        return JSONResponse(status_code=err.status_code, content=content)
