import os
import tempfile

# db.session builds its engine at import time; point it somewhere harmless
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite:///" + os.path.join(tempfile.gettempdir(), "fieldcheck_default.db"),
)

import pytest
from sqlmodel import Session

from db.bootstrap import create_db_and_tables
from db.session import make_engine
from models.client import Client, EmployeeClient
from models.employee import Employee, EmployeeRole
from services.authorization import SqlAuthorization
from services.checkin_service import CheckinStateMachine
from services.ledger import SqlCheckinLedger
from services.report_service import DailyReportAggregator

BANGALORE = (12.9716, 77.5946)
CHENNAI = (13.0827, 80.2707)


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'checkins.db'}", timeout_seconds=10)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def team(engine):
    """A manager with three reports, two clients and a few assignments."""
    with Session(engine, expire_on_commit=False) as session:
        manager = Employee(name="Meera Iyer", email="meera@example.com", role=EmployeeRole.MANAGER)
        other_manager = Employee(name="Ravi Das", email="ravi@example.com", role=EmployeeRole.MANAGER)
        session.add_all([manager, other_manager])
        session.flush()

        arjun = Employee(name="Arjun Mehta", email="arjun@example.com", manager_id=manager.id)
        priya = Employee(name="Priya Raman", email="priya@example.com", manager_id=manager.id)
        kiran = Employee(name="Kiran Rao", email="kiran@example.com", manager_id=manager.id)
        outsider = Employee(name="Zoya Khan", email="zoya@example.com", manager_id=other_manager.id)
        bangalore = Client(name="MG Road Office", latitude=BANGALORE[0], longitude=BANGALORE[1])
        chennai = Client(name="Chennai Hub", latitude=CHENNAI[0], longitude=CHENNAI[1])
        unassigned = Client(name="Pune Depot", latitude=18.5204, longitude=73.8567)
        session.add_all([arjun, priya, kiran, outsider, bangalore, chennai, unassigned])
        session.flush()

        for employee in (arjun, priya, kiran, outsider):
            session.add(EmployeeClient(employee_id=employee.id, client_id=bangalore.id))
            session.add(EmployeeClient(employee_id=employee.id, client_id=chennai.id))
        session.commit()

        return {
            "manager": manager,
            "other_manager": other_manager,
            "arjun": arjun,
            "priya": priya,
            "kiran": kiran,
            "outsider": outsider,
            "bangalore": bangalore,
            "chennai": chennai,
            "unassigned": unassigned,
        }


@pytest.fixture
def ledger(engine):
    return SqlCheckinLedger(engine)


@pytest.fixture
def authorization(engine):
    return SqlAuthorization(engine)


@pytest.fixture
def machine(ledger, authorization):
    return CheckinStateMachine(ledger, authorization, warning_threshold_km=0.5)


@pytest.fixture
def aggregator(ledger, authorization):
    return DailyReportAggregator(ledger, authorization, report_timezone="UTC")
