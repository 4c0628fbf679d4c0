import logging
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_serializer

from core.config import DISTANCE_WARNING_KM
from core.errors import AlreadyCheckedIn, NoActiveCheckin, NotAuthorizedForClient
from models.checkin import Checkin, CheckinStatus
from services.authorization import Authorization
from services.ledger import LedgerOutcome, SqlCheckinLedger
from utils.datetime_helpers import format_utc_datetime, hours_between, utc_now
from utils.geo import haversine_km, round_km

logger = logging.getLogger(__name__)


class CheckinResult(BaseModel):
    checkin_id: int
    client_id: int
    distance_km: float
    warning: bool
    checkin_time: datetime
    notes: Optional[str] = None

    @field_serializer("checkin_time")
    def serialize_checkin_time(self, dt: datetime) -> str:
        """Ensure checkin_time is formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)


class CheckoutResult(BaseModel):
    checkin_id: int
    checkout_time: datetime
    hours_worked: float

    @field_serializer("checkout_time")
    def serialize_checkout_time(self, dt: datetime) -> str:
        """Ensure checkout_time is formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)


class CheckinStateMachine:
    """
    Drives one employee between NONE (no open check-in) and ACTIVE.

    No locks are held in-process; several service instances may share the
    same ledger, so every transition is a single conditional write there.
    """

    def __init__(
        self,
        ledger: SqlCheckinLedger,
        authorization: Authorization,
        warning_threshold_km: float = DISTANCE_WARNING_KM,
    ):
        self.ledger = ledger
        self.authorization = authorization
        self.warning_threshold_km = warning_threshold_km

    def check_in(
        self,
        employee_id: int,
        client_id: int,
        latitude: float,
        longitude: float,
        notes: Optional[str] = None,
    ) -> CheckinResult:
        # 1) Assignment check; an unknown client looks exactly like an unassigned one
        if not self.authorization.is_assigned(employee_id, client_id):
            raise NotAuthorizedForClient()
        client = self.ledger.get_client(client_id)
        if client is None:
            raise NotAuthorizedForClient()

        # 2) Distance from the registered location, raw value for the threshold
        raw_distance = haversine_km(latitude, longitude, client.latitude, client.longitude)
        warning = raw_distance > self.warning_threshold_km

        # Fast, friendly rejection only; the insert below is what actually decides
        if self.ledger.get_active_checkin(employee_id) is not None:
            logger.info("Employee %s check-in rejected: already checked in", employee_id)
            raise AlreadyCheckedIn()

        if notes is not None:
            notes = notes.strip() or None

        # 3) Atomic check-and-insert
        result = self.ledger.try_open_checkin(
            Checkin(
                employee_id=employee_id,
                client_id=client_id,
                checkin_time=utc_now(),
                distance_from_client=round_km(raw_distance),
                status=CheckinStatus.CHECKED_IN,
                notes=notes,
            )
        )
        if result.outcome == LedgerOutcome.ALREADY_ACTIVE:
            logger.info("Employee %s check-in rejected by active-checkin index", employee_id)
            raise AlreadyCheckedIn()

        checkin = result.checkin
        logger.info(
            "Employee %s checked in at client %s (checkin %s, %.2f km%s)",
            employee_id,
            client_id,
            checkin.id,
            checkin.distance_from_client,
            ", distance warning" if warning else "",
        )
        return CheckinResult(
            checkin_id=checkin.id,
            client_id=checkin.client_id,
            distance_km=checkin.distance_from_client,
            warning=warning,
            checkin_time=checkin.checkin_time,
            notes=checkin.notes,
        )

    def check_out(self, employee_id: int) -> CheckoutResult:
        result = self.ledger.try_close_checkin(employee_id, utc_now())
        if result.outcome == LedgerOutcome.NONE_ACTIVE:
            logger.info("Employee %s checkout rejected: no active check-in", employee_id)
            raise NoActiveCheckin()

        checkin = result.checkin
        hours_worked = hours_between(checkin.checkin_time, checkin.checkout_time)
        logger.info(
            "Employee %s checked out of checkin %s after %.2f hours",
            employee_id,
            checkin.id,
            hours_worked,
        )
        return CheckoutResult(
            checkin_id=checkin.id,
            checkout_time=checkin.checkout_time,
            hours_worked=round(hours_worked, 2),
        )

    def active_checkin(self, employee_id: int) -> Optional[Checkin]:
        return self.ledger.get_active_checkin(employee_id)
