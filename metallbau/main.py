from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from metallbau import database
from metallbau.core.logging import configure_logging
from metallbau.models import Project, ProjectCostEntry  # noqa: F401
from metallbau.routers.auth import router as auth_router
from metallbau.routers.costing import router as costing_router
from metallbau.routers.master_data import router as master_data_router
from metallbau.routers.projects import router as projects_router
from metallbau.services.ledger_immutability import install_cost_ledger_immutability

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    database.configure_database()
    if install_cost_ledger_immutability(database.engine):
        logger.info("cost ledger immutability triggers installed")

    yield


app = FastAPI(
    title="Metallbau Controlling",
    lifespan=lifespan,
)


@app.middleware("http")
async def catch_unhandled_exceptions(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled exception", extra={"path": request.url.path})
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


app.include_router(auth_router)
app.include_router(projects_router)
app.include_router(master_data_router)
app.include_router(costing_router)


@app.get("/")
def root():
    return {"status": "Metallbau Controlling running"}


@app.get("/health")
def health():
    return {
        "status": "ok",
        "version": "1.0.0",
    }
