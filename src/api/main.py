import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api import state
from api.routers import ops, planner, tasks
from storage import db
from storage.task_repository import RepositoryError

# Logging configuration
logging.basicConfig(
    level=os.getenv("PLANNER_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Produtivo Planner API", version="0.1.0")

app.include_router(ops.router)
app.include_router(tasks.router)
app.include_router(planner.router)


@app.on_event("startup")
async def startup() -> None:
    logger.info(f"Starting planner API (repository: {state.TASK_REPOSITORY})")
    if state.TASK_REPOSITORY == "postgres":
        await db.open_task_store()


@app.on_event("shutdown")
async def shutdown() -> None:
    if state.TASK_REPOSITORY == "postgres":
        await db.close_db_pool()


@app.exception_handler(RepositoryError)
async def _repository_error_handler(request: Request, exc: RepositoryError):
    logger.error(f"Task repository unavailable during {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Task repository unavailable"})


@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal error"})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
