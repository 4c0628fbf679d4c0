from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.engine import Engine
from sqlmodel import Session

from db.session import get_engine
from models.employee import Employee
from services.authorization import SqlAuthorization
from services.checkin_service import CheckinStateMachine
from services.ledger import SqlCheckinLedger, store_errors
from services.report_service import DailyReportAggregator

# Standard credentials exception
CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
)


# Token verification happens upstream (gateway); by the time a request gets
# here the caller's id has been resolved into the X-Employee-Id header.
def get_current_employee(
    engine: Annotated[Engine, Depends(get_engine)],
    x_employee_id: Annotated[str | None, Header(alias="X-Employee-Id")] = None,
) -> dict:
    if not x_employee_id or not x_employee_id.isdigit():
        raise CREDENTIALS_EXCEPTION

    with store_errors("load caller"), Session(engine) as session:
        employee = session.get(Employee, int(x_employee_id))
    if employee is None:
        raise CREDENTIALS_EXCEPTION

    return {
        "id": employee.id,
        "name": employee.name,
        "email": employee.email,
        "role": employee.role,
    }


def get_ledger(engine: Annotated[Engine, Depends(get_engine)]) -> SqlCheckinLedger:
    return SqlCheckinLedger(engine)


def get_authorization(engine: Annotated[Engine, Depends(get_engine)]) -> SqlAuthorization:
    return SqlAuthorization(engine)


def get_checkin_state_machine(
    ledger: Annotated[SqlCheckinLedger, Depends(get_ledger)],
    authorization: Annotated[SqlAuthorization, Depends(get_authorization)],
) -> CheckinStateMachine:
    return CheckinStateMachine(ledger, authorization)


def get_report_aggregator(
    ledger: Annotated[SqlCheckinLedger, Depends(get_ledger)],
    authorization: Annotated[SqlAuthorization, Depends(get_authorization)],
) -> DailyReportAggregator:
    return DailyReportAggregator(ledger, authorization)
