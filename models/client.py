from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

# Defines the registered location each field check-in is measured against


class Client(SQLModel, table=True):
    __tablename__ = "clients"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(..., description="Client display name")
    latitude: float = Field(..., description="Registered latitude of the client site")
    longitude: float = Field(..., description="Registered longitude of the client site")
    address: Optional[str] = Field(default=None)


# Which employees may check in at which clients. Rows are managed elsewhere;
# this core only reads them.
class EmployeeClient(SQLModel, table=True):
    __tablename__ = "employee_clients"

    employee_id: int = Field(foreign_key="users.id", primary_key=True)
    client_id: int = Field(foreign_key="clients.id", primary_key=True)
    assigned_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
    )
