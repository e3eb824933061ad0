"""
Auth API
"""
from fastapi.testclient import TestClient

from app.models.ontology import Employee, EmployeeRole
from app.security.auth import get_password_hash


def _employee(db_session, active=True):
    employee = Employee(
        username="ksiegowa",
        password_hash=get_password_hash("tajne123"),
        name="Księgowa",
        role=EmployeeRole.ACCOUNTANT,
        is_active=active
    )
    db_session.add(employee)
    db_session.commit()
    return employee


class TestAuthLogin:
    """Login endpoint"""

    def test_login_success(self, client: TestClient, db_session):
        _employee(db_session)
        response = client.post("/auth/login", json={"username": "ksiegowa", "password": "tajne123"})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["employee"]["role"] == "accountant"

    def test_login_wrong_password(self, client: TestClient, db_session):
        _employee(db_session)
        response = client.post("/auth/login", json={"username": "ksiegowa", "password": "zle"})
        assert response.status_code == 401

    def test_login_unknown_user(self, client: TestClient):
        response = client.post("/auth/login", json={"username": "nikt", "password": "x"})
        assert response.status_code == 401

    def test_login_disabled_account(self, client: TestClient, db_session):
        _employee(db_session, active=False)
        response = client.post("/auth/login", json={"username": "ksiegowa", "password": "tajne123"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Account disabled"


class TestAuthMe:

    def test_me(self, client: TestClient, db_session):
        _employee(db_session)
        token = client.post("/auth/login", json={"username": "ksiegowa", "password": "tajne123"}).json()["access_token"]
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["username"] == "ksiegowa"

    def test_no_token(self, client: TestClient):
        assert client.get("/auth/me").status_code in (401, 403)

    def test_bad_token(self, client: TestClient):
        response = client.get("/auth/me", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401


class TestHealth:

    def test_health(self, client: TestClient):
        assert client.get("/health").json() == {"status": "healthy"}
