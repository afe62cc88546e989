"""Ingestion boundary: raw collections -> canonical records.

Sources disagree on how a sale points at its customer, product, channel,
payment method and admin. Depending on the backend a reference is:

- a bare identifier: ``"customer": "c1"`` (local snapshot)
- an embedded copy: ``"customer": {"id": "c1", "name": "Budi", ...}`` (REST API)
- a foreign key field: ``"customer_id": "c1"`` (write payloads echoed back)

``normalize_snapshot`` turns all of them into ``EntityRef`` values, preferring
the current reference collection over an embedded copy. Malformed rows are
skipped or defaulted with a warning; nothing here raises for row content.

Examples:
    >>> snapshot = normalize_snapshot({
    ...     "channels": [{"id": "ch1", "name": "Shopee"}],
    ...     "sales": [{"id": "s1", "channel": "ch1", "price": "100000", "date": "2024-03-05"}],
    ... })
    >>> snapshot.sales[0].channel.name
    'Shopee'

"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from pos_recap.data.models import ENTITY_TYPES, EntityRef, SaleRecord, Snapshot
from pos_recap.exceptions import DataQualityError
from pos_recap.utils import coerce_price, parse_date_lenient

logger = logging.getLogger(__name__)

# kind -> {entity id -> EntityRef}
ReferenceIndex = dict[str, dict[str, EntityRef]]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _rows(raw: Mapping[str, Any], key: str) -> Sequence[Any]:
    rows = raw.get(key)
    if rows is None:
        return []
    if not isinstance(rows, (list, tuple)):
        raise DataQualityError(f"Collection '{key}' must be a list, got {type(rows).__name__}")
    return rows


def _normalize_entities(raw: Mapping[str, Any], entity_cls: type) -> tuple[Any, ...]:
    entities = []
    for position, row in enumerate(_rows(raw, entity_cls.collection)):
        if not isinstance(row, Mapping):
            logger.warning("Skipping %s row %d: not an object", entity_cls.kind, position)
            continue
        if row.get("id") in (None, ""):
            logger.warning("Skipping %s row %d: missing id", entity_cls.kind, position)
            continue
        entities.append(entity_cls.from_mapping(row))
    return tuple(entities)


def build_index(entities_by_kind: Mapping[str, Sequence[Any]]) -> ReferenceIndex:
    """Index reference entities by kind and id.

    Later duplicates of an id replace earlier ones, matching how the
    collections are served (last write wins).
    """
    index: ReferenceIndex = {kind: {} for kind in ENTITY_TYPES}
    for kind, entities in entities_by_kind.items():
        for entity in entities:
            index[kind][entity.id] = entity.to_ref()
    return index


def resolve_ref(value: Any, known: Mapping[str, EntityRef]) -> EntityRef:
    """Resolve one raw reference value against the known entities.

    Args:
        value: Bare id, embedded entity mapping, or None.
        known: Entities of the matching kind, keyed by id.

    Returns:
        The entity from ``known`` when the id is found; otherwise an
        ``EntityRef`` built from the embedded copy; otherwise an
        unresolved ref that still remembers the id.
    """
    if value is None or value == "":
        return EntityRef()

    if isinstance(value, Mapping):
        ref_id = value.get("id")
        ref_id = None if ref_id in (None, "") else str(ref_id)
        if ref_id is not None and ref_id in known:
            return known[ref_id]
        name = _text(value.get("name")) or None
        attrs = {
            str(k): _text(v)
            for k, v in value.items()
            if k not in ("id", "name") and not isinstance(v, (Mapping, list))
        }
        return EntityRef(id=ref_id, name=name, attrs=attrs)

    ref_id = str(value)
    return known.get(ref_id, EntityRef(id=ref_id))


def normalize_sale(raw: Mapping[str, Any], index: ReferenceIndex, position: int = 0) -> SaleRecord:
    """Normalize a raw sale row into a ``SaleRecord``.

    Args:
        raw: Raw sale row.
        index: Reference index built from the same snapshot.
        position: Row position, used as id when the row has none.

    Returns:
        The normalized sale.
    """
    refs = {}
    for kind in ENTITY_TYPES:
        value = raw.get(kind)
        if value is None:
            value = raw.get(f"{kind}_id")
        refs[kind] = resolve_ref(value, index.get(kind, {}))

    sale_id = raw.get("id")
    if sale_id in (None, ""):
        sale_id = str(position)

    price = coerce_price(raw.get("price"))
    if price < 0:
        logger.warning("Sale %s has negative price %s; using 0", sale_id, price)
        price = 0.0

    raw_date = raw.get("date", raw.get("purchase_date"))
    purchase_date = parse_date_lenient(raw_date)
    if purchase_date is None and raw_date not in (None, ""):
        logger.warning("Sale %s has unparseable date %r", sale_id, raw_date)

    ship_raw = raw.get("ship_date", raw.get("shipDate"))

    return SaleRecord(
        id=str(sale_id),
        price=price,
        link=_text(raw.get("link")),
        purchase_date=purchase_date,
        ship_date=parse_date_lenient(ship_raw),
        note=_text(raw.get("note")),
        **refs,
    )


def normalize_snapshot(raw: Mapping[str, Any]) -> Snapshot:
    """Normalize raw collections into a ``Snapshot``.

    Args:
        raw: Mapping with any of the keys ``sales``, ``customers``,
            ``products``, ``channels``, ``payments``, ``admins``. Missing
            keys are treated as empty collections.

    Returns:
        Snapshot with every sale reference resolved against this same read.

    Raises:
        DataQualityError: If ``raw`` is not a mapping or a collection is not a list.
    """
    if not isinstance(raw, Mapping):
        raise DataQualityError(f"Snapshot must be an object, got {type(raw).__name__}")

    entities = {kind: _normalize_entities(raw, cls) for kind, cls in ENTITY_TYPES.items()}
    index = build_index(entities)

    sales = []
    for position, row in enumerate(_rows(raw, "sales")):
        if not isinstance(row, Mapping):
            logger.warning("Skipping sale row %d: not an object", position)
            continue
        sales.append(normalize_sale(row, index, position))

    unresolved = sum(
        1 for sale in sales for kind in ENTITY_TYPES if not sale.ref(kind).resolved
    )
    logger.info(
        "Normalized snapshot: %d sales, %d customers, %d products, %d channels, "
        "%d payments, %d admins (%d unresolved references)",
        len(sales),
        len(entities["customer"]),
        len(entities["product"]),
        len(entities["channel"]),
        len(entities["payment"]),
        len(entities["admin"]),
        unresolved,
    )

    return Snapshot(
        sales=tuple(sales),
        customers=entities["customer"],
        products=entities["product"],
        channels=entities["channel"],
        payments=entities["payment"],
        admins=entities["admin"],
    )
