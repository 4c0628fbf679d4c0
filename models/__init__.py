from .checkin import Checkin, CheckinRequest, CheckinStatus
from .client import Client, EmployeeClient
from .employee import Employee, EmployeeRole
