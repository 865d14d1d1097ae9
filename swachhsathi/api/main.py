"""
SwachhSathi - REST API

FastAPI application exposing image analysis, before/after comparison, waste
scanning, and the document-event endpoints that drive assignment and
notifications.

Run with: uvicorn swachhsathi.api.main:app --reload
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from swachhsathi.context import AppContext, get_context
from swachhsathi.core.exceptions import ClassificationError, ValidationError
from swachhsathi.core.logging import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# FastAPI app
app = FastAPI(
    title="SwachhSathi",
    description="Waste report triage: garbage classification, worker dispatch and notifications",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Pydantic Models
# ============================================================================

class AnalyzeImageRequest(BaseModel):
    """Image to classify."""
    imageUri: Optional[str] = Field(default=None, description="Image URL, data URI or base64 payload")


class ClassificationResponse(BaseModel):
    """Garbage classification result."""
    isGarbage: bool
    category: Optional[str]
    severity: Optional[str]
    confidence: float
    description: str
    detectedLabels: List[str]
    objectCount: int
    analyzedBy: str


class CompareImagesRequest(BaseModel):
    """Before/after photo pair."""
    beforeImageUrl: Optional[str] = None
    afterImageUrl: Optional[str] = None


class ComparisonResponse(BaseModel):
    """Cleanliness comparison result."""
    isClean: bool
    message: str
    cleanlinessScore: int = Field(ge=0, le=100)
    beforeLabels: List[str]
    afterLabels: List[str]
    garbageReduction: int
    beforeGarbageCount: int
    afterGarbageCount: int


class WasteScanRequest(BaseModel):
    """Waste photo to scan."""
    imageUri: Optional[str] = None
    userId: Optional[str] = None


class WasteScanResponse(BaseModel):
    """Waste type with recycling guidance."""
    type: str
    category: str
    confidence: int
    recyclingInfo: str
    disposalMethod: str


class WasteScanStatsResponse(BaseModel):
    """Per-user scan statistics."""
    totalScans: int
    byCategory: Dict[str, int]
    recentScans: List[Dict[str, Any]]


class ReportCreatedEvent(BaseModel):
    """Report document created."""
    reportId: str
    report: Optional[Dict[str, Any]] = None


class ReportUpdatedEvent(BaseModel):
    """Report document updated."""
    reportId: str
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None


class UserCreatedEvent(BaseModel):
    """User document created."""
    userId: str
    user: Optional[Dict[str, Any]] = None


class EventAck(BaseModel):
    """Acknowledgement for a delivered event."""
    status: str = "accepted"


class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str


# ============================================================================
# System Routes
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check API health status."""
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=datetime.utcnow().isoformat(),
    )


# ============================================================================
# Image Routes
# ============================================================================

@app.post("/api/v1/images/analyze", response_model=ClassificationResponse, tags=["Images"])
def analyze_garbage_image(
    request: AnalyzeImageRequest,
    context: AppContext = Depends(get_context),
):
    """
    Classify a photo as garbage or not.

    Cloud Vision is used first; Gemini is consulted only if Vision fails.
    """
    try:
        result = context.classifier.classify(request.imageUri)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ClassificationError as e:
        logger.error(f"Image analysis error: {e!r}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to analyze image: {e}")
    except Exception as e:
        logger.error(f"Image analysis error: {e!r}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to analyze image")

    return ClassificationResponse(**result.to_dict())


@app.post("/api/v1/images/compare", response_model=ComparisonResponse, tags=["Images"])
def compare_before_after(
    request: CompareImagesRequest,
    context: AppContext = Depends(get_context),
):
    """Score how well an area was cleaned between two photos."""
    try:
        result = context.comparator.compare(request.beforeImageUrl, request.afterImageUrl)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error comparing images: {e!r}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to compare images")

    return ComparisonResponse(**result.to_dict())


# ============================================================================
# Waste Scan Routes
# ============================================================================

@app.post("/api/v1/waste-scans", response_model=WasteScanResponse, tags=["Waste Scans"])
def analyze_waste_image(
    request: WasteScanRequest,
    context: AppContext = Depends(get_context),
):
    """Identify the waste type in a photo and return recycling guidance."""
    try:
        analysis = context.waste_scanner.analyze(request.imageUri, request.userId)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error analyzing waste image: {e!r}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to analyze image")

    return WasteScanResponse(**analysis.to_dict())


@app.get("/api/v1/waste-scans/stats", response_model=WasteScanStatsResponse, tags=["Waste Scans"])
def get_user_waste_scan_stats(
    userId: Optional[str] = Query(default=None),
    context: AppContext = Depends(get_context),
):
    """Scan statistics for one user."""
    try:
        stats = context.waste_scanner.stats(userId)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching waste scan stats: {e!r}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch statistics")

    return WasteScanStatsResponse(**stats)


# ============================================================================
# Document Event Routes
# ============================================================================

@app.post("/api/v1/events/report-created", response_model=EventAck, status_code=202, tags=["Events"])
def report_created(
    event: ReportCreatedEvent,
    context: AppContext = Depends(get_context),
):
    """Assign a newly created report to the nearest worker."""
    context.triggers.on_report_created(event.reportId, event.report)
    return EventAck()


@app.post("/api/v1/events/report-updated", response_model=EventAck, status_code=202, tags=["Events"])
def report_updated(
    event: ReportUpdatedEvent,
    context: AppContext = Depends(get_context),
):
    """Notify the worker or reporter about a report change."""
    context.triggers.on_report_updated(event.reportId, event.before, event.after)
    return EventAck()


@app.post("/api/v1/events/user-created", response_model=EventAck, status_code=202, tags=["Events"])
def user_created(
    event: UserCreatedEvent,
    context: AppContext = Depends(get_context),
):
    """Welcome a newly created worker."""
    context.triggers.on_worker_created(event.userId, event.user)
    return EventAck()


# ============================================================================
# Main
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    from swachhsathi.core.config import settings

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
