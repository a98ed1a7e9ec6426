"""
main.py - Pavement Maintenance Planning API

Endpoints:
  GET  /parameters/defaults
  POST /calculations
  GET  /calculations/latest
  GET  /segments/regions
  POST /segments/query
  POST /segments/predicates
  POST /reports/summary
  POST /reports/csv

Run: uvicorn main:app --host 0.0.0.0 --port 8001 --reload
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import (
    API_PORT,
    FEATURE_LAYER_URL,
    LENGTH_MODE,
    REMOTE_SOURCE,
    SEGMENTS_JSON_PATH,
)
from models.base import async_session_factory, dispose_engine, init_db
from maintenance.errors import RemoteQueryError
from maintenance.ingestion import load_segments
from maintenance.orchestrator import CalculationOrchestrator
from maintenance.predicates import MATCH_ALL
from maintenance.sources import ArcGISFeatureSource, SQLFeatureSource
from api.calculation_routes import router as calculation_router
from api.segment_routes import router as segment_router
from api.report_routes import router as report_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
)
logger = logging.getLogger("pavement.api")


async def build_remote_source():
    """Feature source selected by REMOTE_SOURCE, or None to run on local data only."""
    if REMOTE_SOURCE == "arcgis":
        if not FEATURE_LAYER_URL:
            logger.warning("REMOTE_SOURCE=arcgis but FEATURE_LAYER_URL is not set; remote path disabled")
            return None
        return ArcGISFeatureSource(FEATURE_LAYER_URL)

    if REMOTE_SOURCE == "sql":
        await init_db()
        source = SQLFeatureSource(async_session_factory)
        try:
            rows = await source.query_count(MATCH_ALL)
        except RemoteQueryError as exc:
            logger.warning("Segment table unavailable (%s); remote path disabled", exc)
            return None
        if rows == 0:
            logger.warning("Segment table is empty; run scripts/seed_segments.py. Remote path disabled")
            return None
        logger.info("Segment table ready with %d rows", rows)
        return source

    return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Pavement Maintenance API starting")
    segments = None
    if SEGMENTS_JSON_PATH.exists():
        segments = load_segments(SEGMENTS_JSON_PATH)
    else:
        logger.info("No local dataset at %s", SEGMENTS_JSON_PATH)

    remote = await build_remote_source()
    app.state.orchestrator = CalculationOrchestrator(
        remote=remote,
        segments=segments,
        length_mode=LENGTH_MODE,
    )
    logger.info(
        "Calculation engine ready | remote=%s | local segments=%s | length mode=%s",
        type(remote).__name__ if remote else "none",
        len(segments) if segments is not None else "none",
        LENGTH_MODE,
    )
    yield
    await dispose_engine()
    logger.info("Shutting down")


app = FastAPI(
    title="Pavement Maintenance Planning API",
    description="Classify road survey segments into maintenance categories and aggregate length and cost.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1",
        "http://127.0.0.1:3000",
    ],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(calculation_router)
app.include_router(segment_router)
app.include_router(report_router)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An internal error occurred. Please check server logs."},
    )


@app.get("/health")
async def health():
    return {"status": "ok", "service": "pavement-maintenance"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=API_PORT,
        reload=True,
    )
