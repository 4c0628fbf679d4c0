from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from core.config import REPORT_TIMEZONE
from core.deps import get_checkin_state_machine, get_current_employee, get_ledger
from models.checkin import CheckinRequest
from services.checkin_service import CheckinStateMachine
from services.ledger import SqlCheckinLedger
from utils.datetime_helpers import day_window_utc, parse_report_date, utc_now

# Defines API Endpoints
router = APIRouter()


# Check In Endpoint
@router.post("/check-in")
def check_in(
    data: CheckinRequest,
    machine: Annotated[CheckinStateMachine, Depends(get_checkin_state_machine)],
    user: Annotated[dict, Depends(get_current_employee)],
):
    result = machine.check_in(
        employee_id=user["id"],
        client_id=data.client_id,
        latitude=data.latitude,
        longitude=data.longitude,
        notes=data.notes,
    )
    response = {"success": True, "data": result}
    if result.warning:
        response["message"] = (
            f"You are {result.distance_km} km from the client location."
        )
    return response


# Check Out Endpoint
@router.post("/check-out")
def check_out(
    machine: Annotated[CheckinStateMachine, Depends(get_checkin_state_machine)],
    user: Annotated[dict, Depends(get_current_employee)],
):
    return {"success": True, "data": machine.check_out(user["id"])}


# Get Current Active Check-in
@router.get("/active")
def get_active_checkin(
    machine: Annotated[CheckinStateMachine, Depends(get_checkin_state_machine)],
    user: Annotated[dict, Depends(get_current_employee)],
):
    return {"success": True, "data": machine.active_checkin(user["id"])}


# Get The Caller's Check-ins For One Day (defaults to today)
@router.get("/history")
def get_checkin_history(
    ledger: Annotated[SqlCheckinLedger, Depends(get_ledger)],
    user: Annotated[dict, Depends(get_current_employee)],
    day: Annotated[Optional[str], Query(alias="date")] = None,
):
    target_date: date = parse_report_date(day) if day else utc_now().date()
    window_start, window_end = day_window_utc(target_date, REPORT_TIMEZONE)
    checkins = ledger.list_checkins_for_employee(user["id"], window_start, window_end)
    return {"success": True, "data": checkins}
