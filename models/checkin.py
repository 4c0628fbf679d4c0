from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field as PydanticField, field_serializer
from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, Index, SQLModel

from utils.datetime_helpers import format_utc_datetime


# Defines the Structure of Data for a Check-in Call
class CheckinRequest(BaseModel):
    client_id: int
    latitude: float
    longitude: float
    notes: Optional[str] = PydanticField(default=None, max_length=1000)


# Only two states; checked_in -> checked_out happens exactly once
class CheckinStatus(str, Enum):
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class Checkin(SQLModel, table=True):
    __tablename__ = "checkins"

    __table_args__ = (
        # Daily report reads an employee's rows for a time window
        Index("ix_checkins_employee_id_checkin_time", "employee_id", "checkin_time"),
        Index("ix_checkins_client_id", "client_id"),
        CheckConstraint("distance_from_client >= 0", name="ck_checkins_distance_non_negative"),
        CheckConstraint(
            "checkout_time IS NULL OR checkout_time > checkin_time",
            name="ck_checkins_checkout_after_checkin",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="users.id")
    client_id: int = Field(foreign_key="clients.id")
    checkin_time: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
    )
    checkout_time: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    # Kilometers, fixed at creation and never recalculated
    distance_from_client: float
    status: CheckinStatus = Field(default=CheckinStatus.CHECKED_IN)
    notes: Optional[str] = Field(default=None)

    @field_serializer("checkin_time", "checkout_time")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        """Ensure timestamps are formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)


# At most one active check-in per employee. This index is the authority for
# that rule; application-level reads only produce friendlier errors.
Index(
    "uq_checkins_one_active_per_employee",
    Checkin.employee_id,
    unique=True,
    postgresql_where=Checkin.status == CheckinStatus.CHECKED_IN,
    sqlite_where=Checkin.status == CheckinStatus.CHECKED_IN,
)
