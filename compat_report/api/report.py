from typing import Dict

from fastapi import APIRouter, Depends

from compat_report.core.dependencies import get_report_service
from compat_report.models.report import (
    TOPIC_FALLBACK_TITLE,
    TOPIC_TITLES,
    ErrorResponse,
    NormalizedReport,
    ReportRequest,
)
from compat_report.services.report_service import ReportService

router = APIRouter()


@router.post(
    "",
    response_model=NormalizedReport,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_report(data: ReportRequest, service: ReportService = Depends(get_report_service)):
    """Generate a normalized compatibility report for two people"""
    return service.generate_report(data)


@router.get("")
def ping():
    return {"ok": True}


@router.get("/topics")
def list_topics() -> Dict[str, str]:
    """Topic keys and their display titles; unknown keys render as `default`"""
    return {**TOPIC_TITLES, "default": TOPIC_FALLBACK_TITLE}
