"""
Pydantic schemas
API request/response validation
"""
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Union
from pydantic import BaseModel, Field, field_validator, ConfigDict
from app.models.ontology import (
    EmployeeRole, ReservationStatus, GatewayPaymentStatus, CatalogKind
)


# ============== Auth Schemas ==============

class LoginRequest(BaseModel):
    username: str
    password: str


class EmployeeResponse(BaseModel):
    id: int
    username: str
    name: str
    role: EmployeeRole
    is_active: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    employee: EmployeeResponse


# ============== Reservation Schemas ==============

class ReservationCreate(BaseModel):
    camp_id: Optional[int] = None
    property_id: Optional[int] = None
    camp_name: Optional[str] = Field(None, max_length=200)
    property_name: Optional[str] = Field(None, max_length=200)
    participant_first_name: Optional[str] = Field(None, max_length=100)
    participant_last_name: Optional[str] = Field(None, max_length=100)
    total_price: Decimal = Field(..., ge=0)
    deposit_amount: Optional[Decimal] = Field(None, ge=0)
    payment_plan: Optional[str] = None
    selected_protection: List[Union[str, int]] = []
    selected_addons: List[Union[str, int]] = []
    selected_diet: Optional[Union[str, int]] = None
    wants_invoice: bool = False

    @field_validator("payment_plan")
    @classmethod
    def check_plan(cls, v):
        if v is not None and v not in ("full", "2", "3"):
            raise ValueError("payment_plan must be one of: full, 2, 3")
        return v


class ReservationResponse(BaseModel):
    id: int
    camp_id: Optional[int]
    property_id: Optional[int]
    camp_name: Optional[str]
    property_name: Optional[str]
    participant_name: str
    status: ReservationStatus
    total_price: Decimal
    deposit_amount: Optional[Decimal]
    payment_plan: Optional[str]
    selected_protection: List[Union[str, int]]
    selected_addons: List[Union[str, int]]
    selected_diet: Optional[str]
    wants_invoice: bool
    created_at: datetime


# ============== Catalog Schemas ==============

class CatalogItemCreate(BaseModel):
    kind: CatalogKind
    name: str = Field(..., max_length=200)
    price: Decimal = Field(..., ge=0)


class TurnusPriceCreate(BaseModel):
    item_id: int
    price: Decimal = Field(..., ge=0)
    name: Optional[str] = Field(None, max_length=200)


class CatalogEntryResponse(BaseModel):
    id: int
    general_id: int
    kind: CatalogKind
    name: str
    price: Decimal
    turnus_specific: bool = False


# ============== Payment record Schemas ==============

class GatewayPaymentUpsert(BaseModel):
    """Gateway transaction as delivered by the webhook; upserted by transaction_id"""
    transaction_id: str = Field(..., max_length=100)
    order_id: str = Field(..., max_length=100)
    amount: Decimal = Field(..., ge=0)
    paid_amount: Optional[Decimal] = Field(None, ge=0)
    status: GatewayPaymentStatus = GatewayPaymentStatus.PENDING
    channel_id: Optional[int] = None
    description: Optional[str] = None
    paid_at: Optional[datetime] = None


class GatewayPaymentResponse(BaseModel):
    id: int
    transaction_id: str
    order_id: Optional[str]
    amount: Decimal
    paid_amount: Optional[Decimal]
    status: GatewayPaymentStatus
    channel_id: Optional[int]
    description: Optional[str]
    created_at: datetime
    paid_at: Optional[datetime]
    model_config = ConfigDict(from_attributes=True)


class ManualPaymentCreate(BaseModel):
    reservation_id: int
    amount: Decimal = Field(..., gt=0)
    payment_date: date
    payment_method: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None


class ManualPaymentResponse(BaseModel):
    id: int
    reservation_id: int
    amount: Decimal
    payment_date: date
    payment_method: Optional[str]
    description: Optional[str]
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ============== Derived payment Schemas ==============

class InstallmentResponse(BaseModel):
    index: int
    total: int
    amount: Decimal
    paid: bool
    paid_date: Optional[date] = None
    method: Optional[str] = None


class PaymentItemResponse(BaseModel):
    id: str
    component_type: str
    label: str
    amount: Decimal
    allocated: Decimal
    status: str
    paid_date: Optional[date] = None
    method: Optional[str] = None
    canceled_date: Optional[date] = None
    installments: List[InstallmentResponse] = []
    allowed_actions: List[str] = []


class PaymentSummaryResponse(BaseModel):
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    overall_status: str
    invoice_paid_eligible: bool


class PaymentRecordResponse(BaseModel):
    source: str
    amount: Decimal
    paid_date: Optional[date] = None
    method: Optional[str] = None
    installment: Optional[str] = None
    reference: Optional[str] = None


class PaymentDetailsResponse(BaseModel):
    reservation_id: int
    reservation_name: Optional[str]
    invoice_number: Optional[str]
    order_date: Optional[date]
    summary: PaymentSummaryResponse
    items: List[PaymentItemResponse]
    actual_paid: Decimal
    deposit_amount: Decimal
    in_deposit_phase: bool
    payment_history: List[PaymentRecordResponse]
    warnings: List[str] = []


class ReservationPaymentRow(BaseModel):
    """Batch listing row"""
    reservation_id: int
    reservation_name: Optional[str]
    participant_name: str
    camp_name: Optional[str]
    summary: PaymentSummaryResponse
    payments: List[PaymentRecordResponse] = []


class ItemActionRequest(BaseModel):
    note: Optional[str] = None


class ItemActionResponse(BaseModel):
    reservation_id: int
    component_id: str
    previous_status: str
    status: str
