"""
Back-office CLI
"""
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker
from typer.testing import CliRunner

from app import cli
from app.models.ontology import Employee, EmployeeRole, ManualPayment

runner = CliRunner()


@pytest.fixture
def cli_db(db_engine, monkeypatch):
    """Point the CLI at the test database"""
    monkeypatch.setattr(cli, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=db_engine))
    monkeypatch.setattr(cli, "init_db", lambda: None)
    return db_engine


class TestSummary:

    def test_summary_table(self, cli_db, db_session, sample_reservation):
        result = runner.invoke(cli.app, ["summary"])
        assert result.exit_code == 0
        assert "Reservation payments" in result.output

    def test_empty(self, cli_db):
        result = runner.invoke(cli.app, ["summary", "--camp-id", "999"])
        assert result.exit_code == 0


class TestShow:

    def test_show(self, cli_db, db_session, sample_reservation):
        db_session.add(ManualPayment(
            reservation_id=sample_reservation.id, amount=Decimal("600.00"), payment_date=date(2026, 3, 1)
        ))
        db_session.commit()

        result = runner.invoke(cli.app, ["show", str(sample_reservation.id)])
        assert result.exit_code == 0
        assert "Remaining 1950.00" in result.output

    def test_unknown_reservation(self, cli_db):
        result = runner.invoke(cli.app, ["show", "404"])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestCreateAdmin:

    def test_create_admin(self, cli_db, db_session):
        result = runner.invoke(cli.app, ["create-admin", "szef", "--password", "haslo123"])
        assert result.exit_code == 0
        employee = db_session.query(Employee).filter(Employee.username == "szef").first()
        assert employee.role == EmployeeRole.ADMIN

    def test_duplicate_username(self, cli_db):
        runner.invoke(cli.app, ["create-admin", "szef", "--password", "haslo123"])
        result = runner.invoke(cli.app, ["create-admin", "szef", "--password", "haslo123"])
        assert result.exit_code == 1
