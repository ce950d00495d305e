import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from biostate.config import get_settings
from biostate.db.database import engine, Base
from biostate.api import state, pathways, calibration
import biostate.models  # noqa: F401  registers tables on Base.metadata

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title="Biological State API",
    description="Pharmacokinetic state, timing conflicts and synergy scoring for supplement stacks",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(state.router, prefix="/state", tags=["state"])
app.include_router(pathways.router, prefix="/pathways", tags=["pathways"])
app.include_router(calibration.router, prefix="/calibration", tags=["calibration"])


@app.get("/")
async def root():
    return {"message": "Biological State API", "docs": "/docs"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
