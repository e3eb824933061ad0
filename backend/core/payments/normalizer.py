"""
core/payments/normalizer.py

PaymentRecordNormalizer - gateway transactions and manual entries merged into
one list of effective payments.

Effective means counted toward the paid total:
- gateway ``success``: paid_amount when the gateway confirmed one, else amount
- gateway ``pending`` with amount > 0: counted optimistically, the webhook
  confirmation may lag behind the redirect
- every manual entry
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple, Union
import logging

from core.payments.identifiers import InstallmentTag
from core.payments.models import (
    DEFAULT_CONFIG, ZERO, EngineConfig, GatewayStatus, GatewayTransaction,
    ManualEntry, PaymentRecord, PaymentSource, money,
)

logger = logging.getLogger(__name__)


def _as_datetime(value: Optional[Union[date, datetime, str]]) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable payment timestamp {value!r}")
        return None
    return parsed.replace(tzinfo=None) if parsed.tzinfo else parsed


def order_matches(order_id: Optional[str], reservation_id: int, prefix: str = "RES") -> bool:
    """
    Check whether a gateway order id belongs to a reservation

    Accepted forms: ``"42"``, ``"RES-42"`` and ``"RES-42-<timestamp>"``.
    """
    if not order_id:
        return False
    text = str(order_id).strip()
    if text == str(reservation_id):
        return True
    match = re.match(rf"^{re.escape(prefix)}-(\d+)(?:-|$)", text)
    return bool(match) and int(match.group(1)) == reservation_id


@dataclass(frozen=True)
class NormalizedPayments:
    """
    Effective payments of one reservation

    Attributes:
        records: effective records, input order (gateway first, then manual)
        actual_paid: sum of effective amounts
    """

    records: Tuple[PaymentRecord, ...]
    actual_paid: Decimal

    @property
    def has_effective_payment(self) -> bool:
        return len(self.records) > 0

    def latest(self) -> Optional[PaymentRecord]:
        """Latest effective payment, used as the paid date/method fallback"""
        dated = [r for r in self.records if r.timestamp is not None]
        if not dated:
            return self.records[-1] if self.records else None
        return max(dated, key=lambda r: r.timestamp)

    def chronological(self) -> Tuple[PaymentRecord, ...]:
        """Oldest first, undated records last"""
        dated = sorted((r for r in self.records if r.timestamp is not None), key=lambda r: r.timestamp)
        undated = [r for r in self.records if r.timestamp is None]
        return tuple(dated + undated)

    def tagged(self, total: int) -> List[PaymentRecord]:
        """Records carrying an installment tag of the given plan size"""
        return [r for r in self.records if r.installment is not None and r.installment.total == total]


class PaymentRecordNormalizer:
    """Filter and normalize raw payment records of one reservation"""

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        self._config = config

    def gateway_record(self, tx: GatewayTransaction) -> Optional[PaymentRecord]:
        """Effective record for a gateway transaction, None when it does not count"""
        status = GatewayStatus.coerce(tx.status)
        amount = money(tx.amount)
        paid_amount = money(tx.paid_amount)

        if status == GatewayStatus.SUCCESS:
            value = paid_amount if paid_amount > ZERO else amount
        elif status == GatewayStatus.PENDING and amount > ZERO:
            value = amount
        else:
            logger.debug(f"Gateway transaction {tx.transaction_id} ({tx.status}) not effective")
            return None

        return PaymentRecord(
            source=PaymentSource.GATEWAY,
            amount=value,
            status=status,
            timestamp=_as_datetime(tx.paid_at) or _as_datetime(tx.created_at),
            method=self._config.method_for_channel(tx.channel_id),
            installment=InstallmentTag.parse(tx.description),
            reference=tx.transaction_id,
            description=tx.description,
        )

    def manual_record(self, entry: ManualEntry) -> PaymentRecord:
        return PaymentRecord(
            source=PaymentSource.MANUAL,
            amount=money(entry.amount),
            timestamp=_as_datetime(entry.payment_date) or _as_datetime(entry.created_at),
            method=entry.payment_method or self._config.default_manual_method,
            installment=InstallmentTag.parse(entry.description),
            reference=str(entry.id) if entry.id is not None else None,
            description=entry.description,
        )

    def normalize(self, reservation_id: int,
                  gateway: Iterable[GatewayTransaction] = (),
                  manual: Iterable[ManualEntry] = ()) -> NormalizedPayments:
        records: List[PaymentRecord] = []

        for tx in gateway:
            if not order_matches(tx.order_id, reservation_id, self._config.order_id_prefix):
                continue
            record = self.gateway_record(tx)
            if record is not None:
                records.append(record)

        for entry in manual:
            if entry.reservation_id != reservation_id:
                continue
            records.append(self.manual_record(entry))

        actual_paid = sum((r.amount for r in records), ZERO)
        return NormalizedPayments(records=tuple(records), actual_paid=actual_paid)


__all__ = ["order_matches", "NormalizedPayments", "PaymentRecordNormalizer"]
