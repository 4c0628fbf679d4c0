from typing import Protocol

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from models.client import EmployeeClient
from models.employee import Employee, EmployeeRole
from services.ledger import store_errors


class Authorization(Protocol):
    """Capability checks the core delegates to; it only needs booleans back."""

    def is_assigned(self, employee_id: int, client_id: int) -> bool: ...

    def is_manager(self, user_id: int) -> bool: ...


class SqlAuthorization:
    """Reads assignments and roles from the same database as the ledger."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def is_assigned(self, employee_id: int, client_id: int) -> bool:
        with store_errors("assignment check"), Session(self.engine) as session:
            assignment = session.get(EmployeeClient, (employee_id, client_id))
            return assignment is not None

    def is_manager(self, user_id: int) -> bool:
        with store_errors("role check"), Session(self.engine) as session:
            role = session.exec(select(Employee.role).where(Employee.id == user_id)).first()
            return role == EmployeeRole.MANAGER
