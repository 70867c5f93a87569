import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from plagiarism.router import router as router_plagiarism
from plagiarism.analyzer import TextAnalyzer
from plagiarism.catalog import HttpFileCatalog
from plagiarism.extractor import HttpTextExtractor
from plagiarism.locks import TaskLocks
from plagiarism.memory_store import InMemoryReportStore
from plagiarism.service import PlagiarismService
from plagiarism.store import SqlAlchemyReportStore
from database import dispose_engine, get_session_factory
from exceptions.error_handler import add_exception_handler
from redis_client import close_redis, get_redis
from config import settings

DEFAULT_LOG_FORMAT = "%(module)s:%(lineno)d %(levelname)-6s - %(message)s"

log = logging.getLogger(__name__)


def configure_logging(
    level: int | str = logging.INFO,
    third_party_log_level: int = logging.WARNING,
) -> None:
    logging.basicConfig(
        level=level,
        datefmt="%Y-%m-%d %H:%M:%S",
        format=DEFAULT_LOG_FORMAT,
    )
    for name in ("httpx", "httpcore", "sqlalchemy.engine", "redis"):
        logging.getLogger(name).setLevel(third_party_log_level)


def build_report_store():
    if settings.store_backend == "memory":
        log.warning("Using in-memory report store, results are lost on restart")
        return InMemoryReportStore()

    return SqlAlchemyReportStore(get_session_factory())


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "plagiarism_service", None) is not None:
        yield
        return

    catalog = HttpFileCatalog(settings.storage_service_url, timeout=settings.catalog_timeout)
    extractor = HttpTextExtractor(timeout=settings.text_fetch_timeout)
    app.state.plagiarism_service = PlagiarismService(
        store=build_report_store(),
        catalog=catalog,
        extractor=extractor,
        analyzer=TextAnalyzer(settings.ngram_size, settings.plagiarism_threshold),
        locks=TaskLocks(get_redis(), lock_timeout=settings.task_lock_timeout),
        concurrency=settings.analysis_concurrency,
    )
    log.info(f"Plagiarism service ready, storage service at {settings.storage_service_url}")
    try:
        yield
    finally:
        await catalog.close()
        await extractor.close()
        await close_redis()
        await dispose_engine()


def create_app(service: Optional[PlagiarismService] = None) -> FastAPI:
    app = FastAPI(title="Plagiarism Report Service", lifespan=lifespan)
    app.state.plagiarism_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router_plagiarism)
    add_exception_handler(app)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


configure_logging(level=settings.log_level)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host=settings.api_host, port=settings.api_port)
