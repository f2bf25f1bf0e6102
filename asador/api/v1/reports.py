"""
Report routes
Period summary and CSV export
"""

import io
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from ...core.error_handler import create_success_response
from ...core.security import require_session
from ...services.export_service import ExportService
from ...services.report_service import ReportService
from ..deps import get_export_service, get_report_service

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("/summary")
def get_summary(period: str = Query("month", description="today, week, biweekly, month, quarter, semester, year or all"),
                service: ReportService = Depends(get_report_service)):
    summary = service.build_summary(period)
    return create_success_response(data=summary.model_dump(mode="json"))


@router.get("/export")
def export_report(year: int = Query(..., description="Report year"),
                  month: Optional[int] = Query(None, description="Month 1-12; omit for the whole year"),
                  service: ExportService = Depends(get_export_service)):
    """Download the report as CSV"""
    filename, content = service.export_csv(year, month)
    return StreamingResponse(
        io.BytesIO(content.encode("utf-8-sig")),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
