from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from core.deps import get_current_employee, get_report_aggregator
from services.report_service import DailyReportAggregator

router = APIRouter()


@router.get("/daily-summary")
def get_daily_summary(
    aggregator: Annotated[DailyReportAggregator, Depends(get_report_aggregator)],
    user: Annotated[dict, Depends(get_current_employee)],
    day: Annotated[Optional[str], Query(alias="date")] = None,
    employee_id: Optional[int] = None,
):
    """
    Daily summary report for the caller's team.

    Query params:
      - date (required): YYYY-MM-DD format
      - employee_id (optional): Filter by specific employee
    """
    summary = aggregator.daily_summary(user["id"], day, employee_id=employee_id)
    return {"success": True, "data": summary}
