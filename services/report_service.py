import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Set, Union

from pydantic import BaseModel

from core.config import REPORT_TIMEZONE
from core.errors import Forbidden
from services.authorization import Authorization
from services.ledger import SqlCheckinLedger
from utils.datetime_helpers import day_window_utc, hours_between, parse_report_date, resolve_timezone

logger = logging.getLogger(__name__)


# --- Pydantic Models for Responses ---


class TeamSummary(BaseModel):
    total_employees: int = 0
    employees_checked_in: int = 0
    total_checkins: int = 0
    total_hours_worked: float = 0.0
    unique_clients_visited: int = 0


class EmployeeBreakdown(BaseModel):
    employee_id: int
    employee_name: str
    employee_email: str
    total_checkins: int = 0
    clients_visited: int = 0
    hours_worked: float = 0.0


class DailySummary(BaseModel):
    date: str
    team_summary: TeamSummary
    employee_breakdown: List[EmployeeBreakdown] = []


@dataclass
class _EmployeeTally:
    name: str
    email: str
    checkins: int = 0
    client_ids: Set[int] = field(default_factory=set)
    hours: float = 0.0


class DailyReportAggregator:
    def __init__(
        self,
        ledger: SqlCheckinLedger,
        authorization: Authorization,
        report_timezone: str = REPORT_TIMEZONE,
    ):
        self.ledger = ledger
        self.authorization = authorization
        resolve_timezone(report_timezone)
        self.report_timezone = report_timezone

    def daily_summary(
        self,
        manager_id: int,
        target_date: Union[str, date],
        employee_id: Optional[int] = None,
    ) -> DailySummary:
        """
        Roll one day of the manager's team check-ins up into a summary.

        The ledger is read once; every team member shows up in the breakdown,
        including those with no check-ins. Hours are summed at full precision
        and rounded to one decimal only in the output.
        """
        if not self.authorization.is_manager(manager_id):
            raise Forbidden()

        report_date = parse_report_date(target_date)
        window_start, window_end = day_window_utc(report_date, self.report_timezone)

        rows = self.ledger.query_checkins_for_team_on_date(
            manager_id, window_start, window_end, employee_id=employee_id
        )

        # Rows arrive ordered by employee name, so insertion order is output order
        tallies: "OrderedDict[int, _EmployeeTally]" = OrderedDict()
        # Counted apart from the per-employee sets so shared clients count once
        team_client_ids: Set[int] = set()

        for row in rows:
            tally = tallies.get(row.employee_id)
            if tally is None:
                tally = _EmployeeTally(name=row.employee_name, email=row.employee_email)
                tallies[row.employee_id] = tally

            if row.checkin_id is None:
                continue

            tally.checkins += 1
            tally.client_ids.add(row.client_id)
            tally.hours += hours_between(row.checkin_time, row.checkout_time)
            team_client_ids.add(row.client_id)

        employee_breakdown = [
            EmployeeBreakdown(
                employee_id=emp_id,
                employee_name=tally.name,
                employee_email=tally.email,
                total_checkins=tally.checkins,
                clients_visited=len(tally.client_ids),
                hours_worked=round(tally.hours, 1),
            )
            for emp_id, tally in tallies.items()
        ]

        team_summary = TeamSummary(
            total_employees=len(tallies),
            employees_checked_in=sum(1 for tally in tallies.values() if tally.checkins > 0),
            total_checkins=sum(tally.checkins for tally in tallies.values()),
            total_hours_worked=round(sum(tally.hours for tally in tallies.values()), 1),
            unique_clients_visited=len(team_client_ids),
        )

        logger.info(
            "Daily summary for manager %s on %s: %d employees, %d check-ins",
            manager_id,
            report_date.isoformat(),
            team_summary.total_employees,
            team_summary.total_checkins,
        )
        return DailySummary(
            date=report_date.isoformat(),
            team_summary=team_summary,
            employee_breakdown=employee_breakdown,
        )
