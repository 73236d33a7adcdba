import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from auth import router as auth_router
from core import config, db, log, server
from core.middleware import ContentTypeMiddleware, DeadlineMiddleware, RequestLoggingMiddleware
from students import router as students_router
from students.errors import StudentError
from students.memory import InMemoryStudentStore
from students.repository import PostgresStudentStore
from students.schemas import MessageResponse
from students.service import StudentService
from students.store import StudentStore

logger = logging.getLogger(__name__)


async def _validation_error_response(_: Request, exc: RequestValidationError) -> JSONResponse:
    # Keep only the serializable parts; pydantic's ctx may hold exception objects.
    errors = [
        {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", "")), "type": err.get("type")}
        for err in exc.errors()
    ]
    logger.info("request_rejected errors=%s", errors)
    return JSONResponse({"detail": errors}, status_code=status.HTTP_400_BAD_REQUEST)


def create_app(
    store: StudentStore | None = None,
    *,
    request_timeout_s: float | None = None,
) -> FastAPI:
    """
    Build the API.

    With an explicit `store` no database is opened (tests, embedding). Otherwise
    `STUDENT_STORE` picks the backend and the asyncpg pool lives for the
    lifespan of the app.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is not None:
            yield
            return

        if config.student_store_backend() == "memory":
            logger.info("student_store backend=memory")
            app.state.student_service = StudentService(InMemoryStudentStore())
            yield
            return

        # Initialize the DB pool once per process.
        await db.init_pool()
        app.state.student_service = StudentService(PostgresStudentStore())
        try:
            yield
        finally:
            await db.close_pool()

    app = FastAPI(title="student-service", lifespan=lifespan)
    if store is not None:
        app.state.student_service = StudentService(store)

    app.add_exception_handler(RequestValidationError, _validation_error_response)

    # Starlette wraps in reverse order: the last one added runs first.
    app.add_middleware(
        DeadlineMiddleware,
        timeout_s=request_timeout_s if request_timeout_s is not None else config.request_timeout_s(),
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ContentTypeMiddleware)

    app.include_router(auth_router.router, tags=["auth"])
    app.include_router(students_router.router, tags=["students"])

    @app.get("/alive")
    async def alive() -> MessageResponse:
        return MessageResponse(message="I am Alive!")

    @app.get("/ready")
    async def ready(
        service: StudentService = Depends(students_router.get_student_service),
    ) -> MessageResponse:
        try:
            await service.ready_check()
        except StudentError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Storage is not reachable.",
            ) from exc
        return MessageResponse(message="I am Ready!")

    return app


app = create_app()


def run() -> None:
    config.load_env_file()
    log.configure_logging()
    logger.info("Setting Up Our APP")
    try:
        asyncio.run(server.serve(create_app()))
    except KeyboardInterrupt:
        logger.info("interrupted")


if __name__ == "__main__":
    run()
