"""
ClaimCheck Verification Service
HTTP surface over the claim-verification scoring engine
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Dict, Any, Deque
from collections import Counter, deque
import logging
import time
import os
from datetime import datetime, timezone
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from claimcheck.config import get_settings
from claimcheck.engine import build_evaluator
from claimcheck.errors import ClaimCheckError
from claimcheck.models import Analysis, TranslationContext
from claimcheck.reference import ReferenceData


# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler('logs/claimcheck.log') if os.path.exists('logs') else logging.NullHandler()
    ]
)

logger = logging.getLogger(__name__)

# Load environment variables early so Settings picks them up
load_dotenv()


# Service configuration
class Config:
    """Service configuration from environment variables"""

    VERSION = "1.0.0"
    TITLE = "ClaimCheck Verification Service"
    DESCRIPTION = "Claim verification API: verdict, confidence and explanation trail"

    MAX_TEXT_LENGTH = int(os.getenv("MAX_TEXT_LENGTH", "10000"))
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

    @classmethod
    def validate(cls):
        """Log current configuration"""
        settings = get_settings()
        logger.info("Configuration loaded:")
        logger.info(f"  Data dir: {settings.data_dir}")
        logger.info(f"  SerpAPI configured: {bool(settings.serpapi_api_key)}")
        logger.info(f"  Fact Check API configured: {bool(settings.google_factcheck_api_key)}")
        logger.info(f"  Gemini configured: {bool(settings.gemini_api_key)}")
        logger.info(f"  Strict invariants: {settings.strict_invariants}")


config = Config()


# Metrics tracker
class Metrics:
    """Evaluation counters plus a rolling latency window"""

    def __init__(self, window: int = 500):
        self.started_at = time.time()
        self.errors = 0
        self.verdicts: Counter = Counter()
        self.latencies: Deque[float] = deque(maxlen=window)

    def record(self, seconds: float, verdict: Optional[str] = None):
        """Count one evaluation; a missing verdict means it raised"""
        self.latencies.append(seconds)
        if verdict is None:
            self.errors += 1
        else:
            self.verdicts[verdict] += 1

    def get_stats(self) -> Dict[str, Any]:
        evaluated = sum(self.verdicts.values())
        ordered = sorted(self.latencies)
        p50 = ordered[len(ordered) // 2] if ordered else 0.0
        p95 = ordered[min(len(ordered) - 1, int(len(ordered) * 0.95))] if ordered else 0.0
        return {
            "evaluations": evaluated,
            "errors": self.errors,
            "verdicts": {v: self.verdicts.get(v, 0) for v in ("fake", "real", "uncertain", "unanalyzable")},
            "unanalyzable_share": round(self.verdicts["unanalyzable"] / evaluated, 3) if evaluated else None,
            "latency_p50": round(p50, 3),
            "latency_p95": round(p95, 3),
            "uptime_seconds": int(time.time() - self.started_at),
        }


metrics = Metrics()


# Application lifespan
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("=" * 60)
    logger.info(f"Starting {config.TITLE} v{config.VERSION}")
    logger.info("=" * 60)

    config.validate()
    settings = get_settings()
    reference = ReferenceData.load(settings.data_dir)
    app.state.reference = reference
    app.state.evaluator = build_evaluator(reference, settings)
    logger.info(f"Reference data versions: {reference.versions}")

    logger.info("=" * 60)
    logger.info("Service ready")
    logger.info("=" * 60)

    yield

    logger.info("Shutdown complete")


# FastAPI application
app = FastAPI(
    title=config.TITLE,
    version=config.VERSION,
    description=config.DESCRIPTION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ClaimCheckError)
async def engine_exception_handler(request: Request, exc: ClaimCheckError):
    """Engine invariant or adapter failure that escaped the guards"""
    logger.error(f"Engine error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": type(exc).__name__, "detail": str(exc)}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": str(exc) if os.getenv("DEBUG") else "An error occurred"
        }
    )


# Request/Response models
class EvaluateRequest(BaseModel):
    """Evaluation request model"""

    text: str = Field(..., min_length=1, max_length=config.MAX_TEXT_LENGTH, description="Claim to evaluate")
    url: Optional[str] = Field(None, description="Source URL of the content if available")
    title: Optional[str] = Field(None, description="Source page title if available")
    language: Optional[str] = Field(None, description="Explanation language: en, si or ta")
    translated_text: Optional[str] = Field(None, description="English translation supplied by the caller")
    original_language: Optional[str] = Field(None, description="Language of the original text when translated")
    previous_analysis: Optional[Analysis] = Field(None, description="Prior analysis for follow-up questions")

    @field_validator('language')
    @classmethod
    def validate_language(cls, v):
        if v is not None and v not in ['en', 'si', 'ta']:
            raise ValueError('Language must be en, si or ta')
        return v

    @model_validator(mode='after')
    def validate_translation(self):
        if self.translated_text and self.original_language not in ['si', 'ta', 'mixed']:
            raise ValueError('original_language must be si, ta or mixed when translated_text is given')
        return self

    def translation(self) -> Optional[TranslationContext]:
        if not self.translated_text:
            return None
        return TranslationContext(original_language=self.original_language, english_text=self.translated_text)


class EvaluateResponse(BaseModel):
    """Evaluation response model"""

    message: str
    analysis: Analysis
    processing_time: float
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


# API endpoints
@app.get("/")
async def root():
    """Root endpoint with service information"""
    return {
        "service": config.TITLE,
        "version": config.VERSION,
        "status": "operational",
        "endpoints": {
            "evaluate": "POST /evaluate",
            "sources": "GET /sources/status",
            "catalog": "GET /catalog/stats",
            "health": "GET /health",
            "metrics": "GET /metrics"
        }
    }


@app.get("/health")
async def health_check(request: Request):
    """Detailed health check"""
    reference: ReferenceData = request.app.state.reference
    search = request.app.state.evaluator.search_client.configured
    search_ready = search["serpapi"] or search["duckduckgo"]

    return {
        "status": "healthy" if search_ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {
            "api": "healthy",
            "search": "configured" if search_ready else "unconfigured",
            "reference_data": {
                "trusted_sources": len(reference.trusted_sources),
                "catalog_entries": len(reference.catalog),
            },
        },
        "metrics": metrics.get_stats()
    }


@app.get("/metrics")
async def get_metrics():
    """Get service metrics"""
    return {
        "service": config.TITLE,
        "version": config.VERSION,
        "metrics": metrics.get_stats()
    }


@app.post("/evaluate", response_model=EvaluateResponse)
async def evaluate_claim(request_body: EvaluateRequest, http_request: Request):
    """Evaluate a claim and return the verdict with its explanation"""
    evaluator = http_request.app.state.evaluator
    start_time = time.time()
    try:
        result = await evaluator.evaluate_and_explain(
            request_body.text.strip(),
            request_body.previous_analysis,
            source_url=request_body.url,
            source_title=request_body.title,
            translation=request_body.translation(),
            language=request_body.language,
        )
    except Exception:
        metrics.record(time.time() - start_time)
        raise

    processing_time = time.time() - start_time
    metrics.record(processing_time, result.analysis.verdict)
    logger.info(f"Evaluation finished: {result.analysis.verdict} in {processing_time:.2f}s")
    return EvaluateResponse(
        message=result.message,
        analysis=result.analysis,
        processing_time=round(processing_time, 3),
    )


@app.get("/sources/status")
async def sources_status(request: Request):
    """Configuration status of every external source"""
    evaluator = request.app.state.evaluator
    analyzers = {analyzer.name: analyzer for analyzer in evaluator.analyzers}
    experts = analyzers.get("experts")
    realtime = analyzers.get("realtime")
    return {
        "search": evaluator.search_client.configured,
        "fact_checkers": experts.status() if experts else {},
        "realtime": realtime.status() if realtime else {},
        "phrasing": {"gemini": bool(evaluator.phraser and evaluator.phraser.configured)},
    }


@app.get("/catalog/stats")
async def catalog_stats(request: Request):
    """Debunked-claims catalog statistics"""
    evaluator = request.app.state.evaluator
    historical = next((a for a in evaluator.analyzers if a.name == "historical"), None)
    if historical is None:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Historical matcher disabled"})
    return historical.catalog_stats()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8001,
        reload=True,
        log_level="info"
    )
