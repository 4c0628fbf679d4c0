"""
Durable check-in ledger.

The ledger is the only place the single-active-check-in rule is enforced:
opening relies on the ``uq_checkins_one_active_per_employee`` partial unique
index, closing is a conditional UPDATE that only matches a row still in
``checked_in``. Reads made before either write are hints, never guarantees.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from sqlalchemy import and_, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlmodel import Session, select

from core.errors import CheckinError, Indeterminate, LedgerTimeout, LedgerUnavailable, StoreRejected
from models.checkin import Checkin, CheckinStatus
from models.client import Client
from models.employee import Employee, EmployeeRole
from utils.datetime_helpers import ensure_utc

logger = logging.getLogger(__name__)

# Driver messages that mean "gave up waiting" rather than "store is broken"
_TIMEOUT_MARKERS = (
    "timeout",
    "timed out",
    "database is locked",
    "canceling statement",
    "lock_not_available",
)


class LedgerOutcome(str, Enum):
    SUCCESS = "success"
    ALREADY_ACTIVE = "already_active"
    NONE_ACTIVE = "none_active"


@dataclass
class LedgerResult:
    outcome: LedgerOutcome
    checkin: Optional[Checkin] = None


@dataclass
class TeamCheckinRow:
    """One team member joined with one of their check-ins (or none)."""

    employee_id: int
    employee_name: str
    employee_email: str
    checkin_id: Optional[int] = None
    client_id: Optional[int] = None
    checkin_time: Optional[datetime] = None
    checkout_time: Optional[datetime] = None


def _is_timeout(exc: Exception) -> bool:
    message = str(getattr(exc, "orig", exc)).lower()
    return any(marker in message for marker in _TIMEOUT_MARKERS)


def _is_unique_violation(exc: IntegrityError) -> bool:
    if getattr(exc.orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(exc.orig).lower()


@contextmanager
def store_errors(operation: str):
    """Translate driver failures into CheckinError subclasses."""
    try:
        yield
    except CheckinError:
        raise
    except IntegrityError as exc:
        logger.warning("Ledger %s rejected by a constraint: %s", operation, exc.orig)
        raise StoreRejected() from exc
    except PoolTimeoutError as exc:
        logger.warning("Ledger %s timed out waiting for a connection: %s", operation, exc)
        raise LedgerTimeout() from exc
    except DBAPIError as exc:
        if _is_timeout(exc):
            logger.warning("Ledger %s timed out: %s", operation, exc.orig)
            raise LedgerTimeout() from exc
        logger.warning("Ledger %s failed: %s", operation, exc.orig)
        raise LedgerUnavailable() from exc


def _commit(session: Session, operation: str) -> None:
    # Past this point the write may already be durable; never report it as retryable
    try:
        session.commit()
    except (DBAPIError, PoolTimeoutError) as exc:
        logger.error("Ledger %s commit outcome unknown: %s", operation, exc)
        raise Indeterminate() from exc


class SqlCheckinLedger:
    def __init__(self, engine: Engine):
        self.engine = engine

    def _session(self) -> Session:
        return Session(self.engine, expire_on_commit=False)

    def get_client(self, client_id: int) -> Optional[Client]:
        with store_errors("get client"), self._session() as session:
            return session.get(Client, client_id)

    def get_active_checkin(self, employee_id: int) -> Optional[Checkin]:
        with store_errors("get active checkin"), self._session() as session:
            return session.exec(
                select(Checkin)
                .where(Checkin.employee_id == employee_id)
                .where(Checkin.status == CheckinStatus.CHECKED_IN)
            ).first()

    def try_open_checkin(self, row: Checkin) -> LedgerResult:
        with store_errors("open checkin"), self._session() as session:
            session.add(row)
            try:
                # The partial unique index fires here, before anything is committed
                session.flush()
            except IntegrityError as exc:
                session.rollback()
                if _is_unique_violation(exc):
                    return LedgerResult(LedgerOutcome.ALREADY_ACTIVE)
                raise
            _commit(session, "open checkin")
            return LedgerResult(LedgerOutcome.SUCCESS, row)

    def try_close_checkin(self, employee_id: int, checkout_time: datetime) -> LedgerResult:
        with store_errors("close checkin"), self._session() as session:
            active = session.exec(
                select(Checkin)
                .where(Checkin.employee_id == employee_id)
                .where(Checkin.status == CheckinStatus.CHECKED_IN)
            ).first()
            if active is None:
                return LedgerResult(LedgerOutcome.NONE_ACTIVE)

            checkin_time = ensure_utc(active.checkin_time)
            checkout_time = ensure_utc(checkout_time)
            if checkout_time <= checkin_time:
                checkout_time = checkin_time + timedelta(microseconds=1)

            result = session.connection().execute(
                update(Checkin)
                .where(Checkin.id == active.id)
                .where(Checkin.status == CheckinStatus.CHECKED_IN)
                .values(checkout_time=checkout_time, status=CheckinStatus.CHECKED_OUT)
            )
            if result.rowcount != 1:
                # Another request closed it between our read and our write
                session.rollback()
                return LedgerResult(LedgerOutcome.NONE_ACTIVE)

            _commit(session, "close checkin")

            session.expunge(active)
            active.checkin_time = checkin_time
            active.checkout_time = checkout_time
            active.status = CheckinStatus.CHECKED_OUT
            return LedgerResult(LedgerOutcome.SUCCESS, active)

    def query_checkins_for_team_on_date(
        self,
        manager_id: int,
        window_start: datetime,
        window_end: datetime,
        employee_id: Optional[int] = None,
    ) -> List[TeamCheckinRow]:
        """
        Every team member with each of their check-ins inside [start, end).

        A single LEFT OUTER JOIN: members with no check-ins come back once with
        the check-in columns set to None.
        """
        statement = (
            select(
                Employee.id,
                Employee.name,
                Employee.email,
                Checkin.id,
                Checkin.client_id,
                Checkin.checkin_time,
                Checkin.checkout_time,
            )
            .select_from(Employee)
            .outerjoin(
                Checkin,
                and_(
                    Checkin.employee_id == Employee.id,
                    Checkin.checkin_time >= window_start,
                    Checkin.checkin_time < window_end,
                ),
            )
            .where(Employee.manager_id == manager_id)
            .where(Employee.role == EmployeeRole.EMPLOYEE)
        )
        if employee_id is not None:
            statement = statement.where(Employee.id == employee_id)
        statement = statement.order_by(Employee.name, Employee.id, Checkin.checkin_time)

        with store_errors("team daily query"), self._session() as session:
            rows = session.exec(statement).all()

        return [
            TeamCheckinRow(
                employee_id=emp_id,
                employee_name=name,
                employee_email=email,
                checkin_id=checkin_id,
                client_id=client_id,
                checkin_time=ensure_utc(checkin_time),
                checkout_time=ensure_utc(checkout_time),
            )
            for emp_id, name, email, checkin_id, client_id, checkin_time, checkout_time in rows
        ]

    def list_checkins_for_employee(
        self, employee_id: int, window_start: datetime, window_end: datetime
    ) -> List[Checkin]:
        with store_errors("employee checkins"), self._session() as session:
            return list(
                session.exec(
                    select(Checkin)
                    .where(Checkin.employee_id == employee_id)
                    .where(Checkin.checkin_time >= window_start)
                    .where(Checkin.checkin_time < window_end)
                    .order_by(Checkin.checkin_time)
                ).all()
            )
