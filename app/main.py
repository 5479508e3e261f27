from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.exception_handlers import register_exception_handlers
from app.financials.router import router as financials_router
from app.fundamentals.router import router as fundamentals_router
from app.logging_config import setup_logging
from app.news.router import router as news_router
from app.ownership.router import router as ownership_router
from app.prediction.router import router as prediction_router
from app.report.router import router as report_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    yield


app = FastAPI(
    title="Stock Insight",
    description="Technical indicators, fundamentals scoring and model-assisted price outlook",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(prediction_router, prefix="/api/v1", tags=["prediction"])
app.include_router(fundamentals_router, prefix="/api/v1", tags=["fundamentals"])
app.include_router(financials_router, prefix="/api/v1", tags=["financials"])
app.include_router(news_router, prefix="/api/v1", tags=["news"])
app.include_router(ownership_router, prefix="/api/v1", tags=["ownership"])
app.include_router(report_router, prefix="/api/v1", tags=["report"])


@app.get("/api/v1/health")
async def health():
    return {"status": "healthy"}
