from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


# Closed set of roles; checked once at the authorization boundary
class EmployeeRole(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"


class Employee(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    email: str = Field(unique=True, index=True)
    role: EmployeeRole = Field(default=EmployeeRole.EMPLOYEE)
    # Back-reference to the manager; an employee never owns its manager
    manager_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
