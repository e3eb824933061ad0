"""
Employee service
Back-office login and account bootstrap
"""
from typing import Optional
import logging
from sqlalchemy.orm import Session
from app.models.ontology import Employee, EmployeeRole
from app.security.auth import get_password_hash, verify_password, create_access_token

logger = logging.getLogger(__name__)


class EmployeeService:
    """Employee service"""

    def __init__(self, db: Session):
        self.db = db

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        return self.db.query(Employee).filter(Employee.id == employee_id).first()

    def get_by_username(self, username: str) -> Optional[Employee]:
        return self.db.query(Employee).filter(Employee.username == username).first()

    def authenticate(self, username: str, password: str) -> Optional[dict]:
        """
        Check credentials and issue a token
        Returns None on bad credentials, raises ValueError for a disabled account
        """
        employee = self.get_by_username(username)
        if not employee or not verify_password(password, employee.password_hash):
            logger.info(f"Failed login for {username!r}")
            return None

        if not employee.is_active:
            raise ValueError("Account disabled")

        token = create_access_token(employee.id, employee.role)
        logger.info(f"Employee {employee.id} logged in")
        return {
            "access_token": token,
            "token_type": "bearer",
            "employee": employee
        }

    def create_employee(self, username: str, password: str, name: str,
                        role: EmployeeRole = EmployeeRole.VIEWER) -> Employee:
        if self.get_by_username(username):
            raise ValueError(f"Username {username} already exists")

        employee = Employee(
            username=username,
            password_hash=get_password_hash(password),
            name=name,
            role=role,
            is_active=True
        )
        self.db.add(employee)
        self.db.commit()
        self.db.refresh(employee)
        logger.info(f"Employee {employee.id} ({role.value}) created")
        return employee

    def create_admin(self, username: str, password: str, name: str = "Administrator") -> Employee:
        return self.create_employee(username, password, name, EmployeeRole.ADMIN)
