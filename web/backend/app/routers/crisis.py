"""Crisis router -- message analysis, alert records, and support lines.

Prefix: ``/api/crisis``
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, status

from desahogo.crisis.analyzer import analyze_crisis_content, create_crisis_alert
from desahogo.crisis.resources import get_crisis_resources
from web.backend.app.models.api import (
    CrisisAlertRequest,
    CrisisAlertResponse,
    CrisisAnalysisResponse,
    CrisisAnalyzeRequest,
    CrisisResourceResponse,
    CrisisResourcesResponse,
)

router = APIRouter(prefix="/api/crisis", tags=["crisis"])


@router.post("/analyze", response_model=CrisisAnalysisResponse, summary="Analyze a chat message")
async def analyze(body: CrisisAnalyzeRequest):
    return CrisisAnalysisResponse(**analyze_crisis_content(body.message).to_dict())


@router.post(
    "/alerts",
    response_model=CrisisAlertResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Build a crisis alert for a message",
)
async def create_alert(body: CrisisAlertRequest):
    """Analyze the message and return a pending alert when one is warranted."""
    analysis = analyze_crisis_content(body.message)
    if not analysis.requires_alert:
        raise HTTPException(
            status_code=422,
            detail=f"Message severity '{analysis.severity.value}' does not require an alert",
        )
    alert = create_crisis_alert(body.user_id, body.username, body.message, analysis)
    return CrisisAlertResponse(**alert.to_dict())


@router.get("/resources", response_model=CrisisResourcesResponse, summary="Emergency and support lines")
async def resources():
    groups = get_crisis_resources()
    return CrisisResourcesResponse(
        emergency=[CrisisResourceResponse(**asdict(r)) for r in groups["emergency"]],
        support=[CrisisResourceResponse(**asdict(r)) for r in groups["support"]],
    )
