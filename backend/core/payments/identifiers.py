"""
core/payments/identifiers.py

Typed identifiers for billable components and installment tags.

Selections are stored as strings such as ``"protection-3"``, ``"addon-7"`` or
plain ``"7"``. They are parsed once into ``ComponentId`` so the rest of the
engine never pattern-matches strings.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from core.payments.errors import InvalidComponentId


class ComponentKind(str, Enum):
    """Billable component kind"""
    CAMP = "camp"
    DEPOSIT = "deposit"
    PROTECTION = "protection"
    ADDON = "addon"
    DIET = "diet"


# kinds that always appear at most once per reservation
SINGLETON_KINDS = (ComponentKind.CAMP, ComponentKind.DEPOSIT)

_PREFIXED_RE = re.compile(r"^(?P<kind>[a-z]+)[-:](?P<num>\d+)$")
_INSTALLMENT_RE = re.compile(r"rata\s+(\d+)\s*/\s*(\d+)", re.IGNORECASE)


@dataclass(frozen=True, order=True)
class ComponentId:
    """
    Component identifier

    Attributes:
        kind: component kind
        ref: catalog id (None for camp and deposit)
    """

    kind: ComponentKind
    ref: Optional[int] = None

    def __post_init__(self):
        if self.kind in SINGLETON_KINDS and self.ref is not None:
            raise InvalidComponentId(f"{self.kind.value} does not take a catalog id")
        if self.kind not in SINGLETON_KINDS and self.ref is None:
            raise InvalidComponentId(f"{self.kind.value} requires a catalog id")

    @classmethod
    def camp(cls) -> "ComponentId":
        return cls(ComponentKind.CAMP)

    @classmethod
    def deposit(cls) -> "ComponentId":
        return cls(ComponentKind.DEPOSIT)

    @classmethod
    def protection(cls, ref: int) -> "ComponentId":
        return cls(ComponentKind.PROTECTION, int(ref))

    @classmethod
    def addon(cls, ref: int) -> "ComponentId":
        return cls(ComponentKind.ADDON, int(ref))

    @classmethod
    def diet(cls, ref: int) -> "ComponentId":
        return cls(ComponentKind.DIET, int(ref))

    @classmethod
    def parse(cls, raw: Union[str, int, "ComponentId"],
              default_kind: Optional[ComponentKind] = None) -> "ComponentId":
        """
        Parse a stored selection into a ComponentId

        Accepts the canonical ``kind:ref`` form, the legacy ``kind-ref`` form,
        the bare singletons ``camp`` / ``deposit`` and, when ``default_kind``
        is given, a bare number.

        Raises:
            InvalidComponentId: the value cannot be interpreted
        """
        if isinstance(raw, ComponentId):
            return raw
        if isinstance(raw, bool):
            raise InvalidComponentId(f"Invalid component id: {raw!r}")
        if isinstance(raw, int):
            if default_kind is None:
                raise InvalidComponentId(f"Bare id {raw} needs a component kind")
            return cls(default_kind, raw)

        text = str(raw).strip().lower()
        for kind in SINGLETON_KINDS:
            if text == kind.value:
                return cls(kind)

        if text.isdigit():
            if default_kind is None:
                raise InvalidComponentId(f"Bare id {raw!r} needs a component kind")
            return cls(default_kind, int(text))

        match = _PREFIXED_RE.match(text)
        if not match:
            raise InvalidComponentId(f"Invalid component id: {raw!r}")
        try:
            kind = ComponentKind(match.group("kind"))
        except ValueError:
            raise InvalidComponentId(f"Unknown component kind in {raw!r}")
        if default_kind is not None and kind != default_kind:
            raise InvalidComponentId(f"Expected a {default_kind.value} id, got {raw!r}")
        return cls(kind, int(match.group("num")))

    def __str__(self) -> str:
        if self.ref is None:
            return self.kind.value
        return f"{self.kind.value}:{self.ref}"


@dataclass(frozen=True)
class InstallmentTag:
    """Installment marker carried by a payment description, e.g. ``Rata 2/3``"""

    index: int
    total: int

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["InstallmentTag"]:
        if not text:
            return None
        match = _INSTALLMENT_RE.search(text)
        if not match:
            return None
        index, total = int(match.group(1)), int(match.group(2))
        if total <= 0 or index <= 0 or index > total:
            return None
        return cls(index=index, total=total)

    def __str__(self) -> str:
        return f"Rata {self.index}/{self.total}"


__all__ = ["ComponentKind", "ComponentId", "InstallmentTag", "SINGLETON_KINDS"]
