"""
Persistent objects
Reservations, raw payment records, catalog and item actions. Derived payment
state (items, installments, summary) is never stored; it is recomputed by
core.payments from these rows.
"""
import json
from datetime import datetime
from enum import Enum
from typing import List
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, ForeignKey, Text,
    Enum as SQLEnum, Boolean, Numeric, UniqueConstraint
)
from sqlalchemy.orm import relationship
from app.database import Base


# ============== Enums ==============

class EmployeeRole(str, Enum):
    """Back-office role"""
    ADMIN = "admin"            # full access
    ACCOUNTANT = "accountant"  # payments and refunds
    VIEWER = "viewer"          # read only


class ReservationStatus(str, Enum):
    """Reservation status"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class GatewayPaymentStatus(str, Enum):
    """Gateway transaction status as reported by the webhook"""
    SUCCESS = "success"
    PENDING = "pending"
    CANCELED = "canceled"


class CatalogKind(str, Enum):
    """Catalog item kind"""
    PROTECTION = "protection"
    ADDON = "addon"
    DIET = "diet"


class ItemActionState(str, Enum):
    """Persisted payment item lifecycle state"""
    CANCELED = "canceled"
    PENDING_REFUND = "pending_refund"
    RETURNED = "returned"
    ACTIVE = "active"           # refund withdrawn, back to the derived status


def _json_list(raw) -> List:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return [raw]
    return value if isinstance(value, list) else [value]


# ============== Objects ==============

class Employee(Base):
    """Back-office user"""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    role = Column(SQLEnum(EmployeeRole), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CampReservation(Base):
    """
    Camp reservation
    total_price is the source of truth for the amount due
    """
    __tablename__ = "camp_reservations"

    id = Column(Integer, primary_key=True, index=True)
    camp_id = Column(Integer, index=True)
    property_id = Column(Integer, index=True)          # turnus
    camp_name = Column(String(200))
    property_name = Column(String(200))
    participant_first_name = Column(String(100))
    participant_last_name = Column(String(100))
    status = Column(SQLEnum(ReservationStatus), default=ReservationStatus.PENDING)
    total_price = Column(Numeric(10, 2), nullable=False, default=0)
    deposit_amount = Column(Numeric(10, 2))            # set when the client chose a deposit
    payment_plan = Column(String(10))                  # "full", "2", "3"
    selected_protection = Column(Text)                 # JSON list, e.g. ["protection-1"]
    selected_addons = Column(Text)                     # JSON list, e.g. ["3", "7"]
    selected_diet = Column(String(40))
    wants_invoice = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    manual_payments = relationship("ManualPayment", back_populates="reservation", cascade="all, delete-orphan")
    item_actions = relationship(
        "PaymentItemAction", back_populates="reservation",
        cascade="all, delete-orphan", order_by="PaymentItemAction.id"
    )

    @property
    def protection_selection(self) -> List:
        return _json_list(self.selected_protection)

    @property
    def addon_selection(self) -> List:
        return _json_list(self.selected_addons)

    @property
    def participant_name(self) -> str:
        return f"{self.participant_first_name or ''} {self.participant_last_name or ''}".strip()


class GatewayPayment(Base):
    """
    Online gateway transaction
    Linked to a reservation through order_id ("42", "RES-42", "RES-42-<ts>")
    """
    __tablename__ = "gateway_payments"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String(100), unique=True, nullable=False)
    order_id = Column(String(100), index=True)
    amount = Column(Numeric(10, 2), nullable=False)    # requested amount
    paid_amount = Column(Numeric(10, 2))               # confirmed by the webhook
    status = Column(SQLEnum(GatewayPaymentStatus), default=GatewayPaymentStatus.PENDING)
    channel_id = Column(Integer)
    description = Column(Text)                         # may carry "Rata i/n"
    created_at = Column(DateTime, default=datetime.utcnow)
    paid_at = Column(DateTime)


class ManualPayment(Base):
    """Manually logged payment (bank transfer, cash)"""
    __tablename__ = "manual_payments"

    id = Column(Integer, primary_key=True, index=True)
    reservation_id = Column(Integer, ForeignKey("camp_reservations.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    description = Column(Text)
    payment_method = Column(String(50))
    payment_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    created_by = Column(Integer, ForeignKey("employees.id"))

    reservation = relationship("CampReservation", back_populates="manual_payments")
    operator = relationship("Employee")


class CatalogItem(Base):
    """General catalog entry (protection, addon, diet)"""
    __tablename__ = "catalog_items"

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(SQLEnum(CatalogKind), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    turnus_prices = relationship("TurnusCatalogPrice", back_populates="item", cascade="all, delete-orphan")


class TurnusCatalogPrice(Base):
    """Turnus-specific override of a general catalog entry"""
    __tablename__ = "turnus_catalog_prices"
    __table_args__ = (UniqueConstraint("camp_id", "property_id", "item_id", name="uq_turnus_catalog_item"),)

    id = Column(Integer, primary_key=True, index=True)
    camp_id = Column(Integer, nullable=False, index=True)
    property_id = Column(Integer, nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("catalog_items.id"), nullable=False)
    name = Column(String(200))                         # falls back to the general name
    price = Column(Numeric(10, 2), nullable=False)

    item = relationship("CatalogItem", back_populates="turnus_prices")


class PaymentItemAction(Base):
    """
    Manual lifecycle action on a derived payment item
    The latest action of a component is its persisted state; older rows are history
    """
    __tablename__ = "payment_item_actions"

    id = Column(Integer, primary_key=True, index=True)
    reservation_id = Column(Integer, ForeignKey("camp_reservations.id"), nullable=False, index=True)
    component_id = Column(String(40), nullable=False)  # "protection:3", "camp"...
    state = Column(SQLEnum(ItemActionState), nullable=False)
    amount = Column(Numeric(10, 2))                    # item amount at the time of the action
    note = Column(Text)
    created_by = Column(Integer, ForeignKey("employees.id"))
    created_at = Column(DateTime, default=datetime.utcnow)

    reservation = relationship("CampReservation", back_populates="item_actions")
    operator = relationship("Employee")
