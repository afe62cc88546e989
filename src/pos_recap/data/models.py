"""Canonical records consumed by the report engine.

Every sale reference (customer, product, channel, payment, admin) is held as
an ``EntityRef`` regardless of whether the source sent a bare id or an
embedded copy of the entity. Normalization into these shapes happens once, in
``pos_recap.data.normalize``; nothing downstream inspects raw rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any, ClassVar, Mapping

# Display sentinel for a reference that could not be resolved
UNRESOLVED = "N/A"


@dataclass(frozen=True)
class EntityRef:
    """A sale's reference to a reference entity, resolved or not.

    Attributes:
        id: Identifier of the referenced entity, if the sale carried one.
        name: Display name; None when the reference could not be resolved.
        attrs: Type-specific extras used for search (username, type, ...).
    """

    id: str | None = None
    name: str | None = None
    attrs: Mapping[str, str] = field(default_factory=dict)

    @property
    def resolved(self) -> bool:
        return bool(self.name)

    def display_name(self, default: str = UNRESOLVED) -> str:
        return self.name or default

    def attr(self, key: str) -> str:
        return self.attrs.get(key, "")


class _ReferenceEntity:
    """Shared behaviour for the reference entity dataclasses."""

    kind: ClassVar[str]
    collection: ClassVar[str]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Any:
        values = {}
        for f in fields(cls):  # type: ignore[arg-type]
            value = raw.get(f.name)
            values[f.name] = "" if value is None else str(value)
        return cls(**values)

    def to_ref(self) -> EntityRef:
        attrs = {
            f.name: getattr(self, f.name)
            for f in fields(self)  # type: ignore[arg-type]
            if f.name not in ("id", "name")
        }
        return EntityRef(id=getattr(self, "id"), name=getattr(self, "name") or None, attrs=attrs)


@dataclass(frozen=True)
class Customer(_ReferenceEntity):
    kind: ClassVar[str] = "customer"
    collection: ClassVar[str] = "customers"

    id: str
    name: str = ""
    username: str = ""
    note: str = ""


@dataclass(frozen=True)
class Product(_ReferenceEntity):
    kind: ClassVar[str] = "product"
    collection: ClassVar[str] = "products"

    id: str
    name: str = ""
    type: str = ""
    sku: str = ""


@dataclass(frozen=True)
class Channel(_ReferenceEntity):
    kind: ClassVar[str] = "channel"
    collection: ClassVar[str] = "channels"

    id: str
    name: str = ""
    desc: str = ""
    url: str = ""


@dataclass(frozen=True)
class Payment(_ReferenceEntity):
    kind: ClassVar[str] = "payment"
    collection: ClassVar[str] = "payments"

    id: str
    name: str = ""
    desc: str = ""
    code: str = ""


@dataclass(frozen=True)
class Admin(_ReferenceEntity):
    kind: ClassVar[str] = "admin"
    collection: ClassVar[str] = "admins"

    id: str
    name: str = ""
    username: str = ""
    note: str = ""


# Reference kinds in the order sales reference them
ENTITY_TYPES: dict[str, type] = {
    cls.kind: cls for cls in (Customer, Product, Channel, Payment, Admin)
}


@dataclass(frozen=True)
class SaleRecord:
    """One sale transaction with its references normalized.

    Attributes:
        id: Sale identifier.
        customer, product, channel, payment, admin: Normalized references.
        price: Sale price, always finite and >= 0.
        link: Order or marketplace link.
        purchase_date: Purchase date, None if the source value was unusable.
        ship_date: Ship date; display and search only, never filtered on.
        note: Free-text note.
    """

    id: str
    customer: EntityRef = field(default_factory=EntityRef)
    product: EntityRef = field(default_factory=EntityRef)
    channel: EntityRef = field(default_factory=EntityRef)
    payment: EntityRef = field(default_factory=EntityRef)
    admin: EntityRef = field(default_factory=EntityRef)
    price: float = 0.0
    link: str = ""
    purchase_date: date | None = None
    ship_date: date | None = None
    note: str = ""

    def ref(self, kind: str) -> EntityRef:
        """Return the reference of the given kind ('customer', 'channel', ...)."""
        if kind not in ENTITY_TYPES:
            raise ValueError(f"Unknown reference kind '{kind}'")
        return getattr(self, kind)


@dataclass(frozen=True)
class Snapshot:
    """One consistent read of every collection the report engine needs."""

    sales: tuple[SaleRecord, ...] = ()
    customers: tuple[Customer, ...] = ()
    products: tuple[Product, ...] = ()
    channels: tuple[Channel, ...] = ()
    payments: tuple[Payment, ...] = ()
    admins: tuple[Admin, ...] = ()

    def entities(self, collection: str) -> tuple[Any, ...]:
        """Return a reference collection by name ('customers', 'channels', ...)."""
        if collection not in {cls.collection for cls in ENTITY_TYPES.values()}:
            raise ValueError(f"Unknown reference collection '{collection}'")
        return getattr(self, collection)
