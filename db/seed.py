# Insert Sample Team, Clients And Assignments
from sqlmodel import Session, select

from db.bootstrap import create_db_and_tables
from db.session import engine
from models.client import Client, EmployeeClient
from models.employee import Employee, EmployeeRole

SAMPLE_CLIENTS = [
    {"name": "MG Road Office", "latitude": 12.9716, "longitude": 77.5946, "address": "MG Road, Bengaluru"},
    {"name": "Chennai Central Hub", "latitude": 13.0827, "longitude": 80.2707, "address": "Park Town, Chennai"},
]

SAMPLE_EMPLOYEES = [
    {"name": "Priya Raman", "email": "priya@example.com"},
    {"name": "Arjun Mehta", "email": "arjun@example.com"},
]


def seed_sample_data():
    create_db_and_tables(engine)

    with Session(engine) as session:
        # Check if the manager already exists to avoid duplicates
        manager = session.exec(
            select(Employee).where(Employee.email == "manager@example.com")
        ).first()
        if manager:
            print("Sample data already exists")
            return

        manager = Employee(name="Meera Iyer", email="manager@example.com", role=EmployeeRole.MANAGER)
        session.add(manager)
        session.flush()
        print(f"Added manager {manager.name} (id={manager.id})")

        clients = [Client(**data) for data in SAMPLE_CLIENTS]
        session.add_all(clients)

        employees = [
            Employee(**data, role=EmployeeRole.EMPLOYEE, manager_id=manager.id)
            for data in SAMPLE_EMPLOYEES
        ]
        session.add_all(employees)
        session.flush()

        # Everyone on the team may visit every sample client
        for employee in employees:
            for client in clients:
                session.add(EmployeeClient(employee_id=employee.id, client_id=client.id))
            print(f"Added employee {employee.name} (id={employee.id})")

        session.commit()
        print(f"Added {len(clients)} clients")


if __name__ == "__main__":
    seed_sample_data()
