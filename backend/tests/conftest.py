"""
Pytest configuration and shared fixtures
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app.database import Base, get_db
from app.models.ontology import (
    CampReservation, CatalogItem, CatalogKind, Employee, EmployeeRole, TurnusCatalogPrice
)
from app.security.auth import get_password_hash, create_access_token
from app.main import app
from core.payments import (
    CatalogEntry, ComponentId, ComponentKind, GatewayTransaction, ManualEntry,
    ReservationSnapshot, StaticCatalogSource,
)


@pytest.fixture(scope="function")
def db_engine():
    """In-memory database engine"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Database session"""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Test client"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== Auth fixtures ==============

def _employee_token(db_session, username: str, name: str, role: EmployeeRole) -> str:
    employee = Employee(
        username=username,
        password_hash=get_password_hash("123456"),
        name=name,
        role=role,
        is_active=True
    )
    db_session.add(employee)
    db_session.commit()
    db_session.refresh(employee)
    return create_access_token(employee.id, employee.role)


@pytest.fixture
def admin_token(db_session):
    return _employee_token(db_session, "admin", "Admin", EmployeeRole.ADMIN)


@pytest.fixture
def accountant_token(db_session):
    return _employee_token(db_session, "ksiegowa", "Księgowa", EmployeeRole.ACCOUNTANT)


@pytest.fixture
def viewer_token(db_session):
    return _employee_token(db_session, "viewer", "Podgląd", EmployeeRole.VIEWER)


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def accountant_headers(accountant_token):
    return {"Authorization": f"Bearer {accountant_token}"}


@pytest.fixture
def viewer_headers(viewer_token):
    return {"Authorization": f"Bearer {viewer_token}"}


# ============== Engine fixtures ==============

@pytest.fixture
def catalog_source():
    """
    General catalog: protection 1 = 200, protection 2 = 150, addon 7 = 100,
    diet 5 = 80, diet 6 = 0. Turnus (10, 20) overrides protection 1 to 250.
    """
    return StaticCatalogSource(
        general={
            ComponentKind.PROTECTION: {
                1: CatalogEntry(1, "Rezygnacja", Decimal("200.00")),
                2: CatalogEntry(2, "NNW", Decimal("150.00")),
            },
            ComponentKind.ADDON: {
                7: CatalogEntry(7, "Spływ kajakowy", Decimal("100.00")),
            },
            ComponentKind.DIET: {
                5: CatalogEntry(5, "Dieta wegetariańska", Decimal("80.00")),
                6: CatalogEntry(6, "Dieta standardowa", Decimal("0.00")),
            },
        },
        overrides={
            (10, 20): {
                ComponentKind.PROTECTION: {
                    1: CatalogEntry(1, "Rezygnacja (turnus)", Decimal("250.00")),
                },
            },
        },
    )


@pytest.fixture
def make_snapshot():
    """Reservation snapshot factory"""
    def _make(total="2500.00", protections=(), addons=(), diet=None, plan=None,
              deposit=False, camp_id=None, property_id=None, reservation_id=42):
        return ReservationSnapshot(
            id=reservation_id,
            total_price=Decimal(total),
            created_at=datetime(2026, 3, 1, 10, 0),
            selected_protections=tuple(ComponentId.protection(p) for p in protections),
            selected_addons=tuple(ComponentId.addon(a) for a in addons),
            selected_diet=ComponentId.diet(diet) if diet is not None else None,
            payment_plan=plan,
            camp_id=camp_id,
            property_id=property_id,
            camp_name="Mazury 2026",
            deposit_selected=deposit,
        )
    return _make


@pytest.fixture
def manual():
    """Manual entry factory"""
    def _make(amount, day=1, description=None, reservation_id=42, entry_id=None):
        return ManualEntry(
            id=entry_id,
            reservation_id=reservation_id,
            amount=Decimal(str(amount)),
            payment_date=date(2026, 3, day),
            payment_method="Przelew",
            description=description,
        )
    return _make


@pytest.fixture
def gateway():
    """Gateway transaction factory"""
    def _make(amount, status="success", paid_amount=None, order_id="RES-42", channel_id=64,
              description=None, day=1, transaction_id="tx-1"):
        return GatewayTransaction(
            transaction_id=transaction_id,
            order_id=order_id,
            amount=amount,
            status=status,
            paid_amount=paid_amount,
            channel_id=channel_id,
            description=description,
            created_at=datetime(2026, 3, day, 12, 0),
        )
    return _make


# ============== Database fixtures ==============

@pytest.fixture
def sample_catalog(db_session):
    """Protection 'Rezygnacja' (200), addon 'Kajaki' (100), diet 'Wege' (80)"""
    protection = CatalogItem(kind=CatalogKind.PROTECTION, name="Rezygnacja", price=Decimal("200.00"))
    addon = CatalogItem(kind=CatalogKind.ADDON, name="Kajaki", price=Decimal("100.00"))
    diet = CatalogItem(kind=CatalogKind.DIET, name="Wege", price=Decimal("80.00"))
    db_session.add_all([protection, addon, diet])
    db_session.commit()
    return {"protection": protection, "addon": addon, "diet": diet}


@pytest.fixture
def turnus_override(db_session, sample_catalog):
    """Turnus (10, 20) charges 250 for the protection"""
    row = TurnusCatalogPrice(
        camp_id=10, property_id=20,
        item_id=sample_catalog["protection"].id,
        name="Rezygnacja (lato)", price=Decimal("250.00")
    )
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture
def sample_reservation(db_session, sample_catalog):
    """Total 2550 = camp 2350 + protection 200, no deposit, no plan"""
    reservation = CampReservation(
        camp_id=1,
        property_id=2,
        camp_name="Mazury 2026",
        participant_first_name="Jan",
        participant_last_name="Kowalski",
        total_price=Decimal("2550.00"),
        selected_protection=f'["protection-{sample_catalog["protection"].id}"]',
        selected_addons="[]",
        created_at=datetime(2026, 3, 1, 10, 0),
    )
    db_session.add(reservation)
    db_session.commit()
    db_session.refresh(reservation)
    return reservation
