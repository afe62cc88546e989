"""Data access for the report engine.

Raw collections come from a repository (in memory, a JSON snapshot file, or
the POS REST API) and are normalized into canonical records:

- **Snapshot**: one consistent read of sales and reference entities
- **SaleRecord**: a sale with every reference resolved to an ``EntityRef``
- **Customer / Product / Channel / Payment / Admin**: reference entities

Example:
    >>> from pos_recap.data import JsonFileRepository
    >>>
    >>> repo = JsonFileRepository("data/snapshot.json")
    >>> snapshot = repo.load_snapshot()
    >>> len(snapshot.sales)
    42
"""

from pos_recap.data.models import (
    UNRESOLVED,
    Admin,
    Channel,
    Customer,
    EntityRef,
    Payment,
    Product,
    SaleRecord,
    Snapshot,
)
from pos_recap.data.normalize import normalize_sale, normalize_snapshot
from pos_recap.data.repository import (
    ApiRepository,
    InMemoryRepository,
    JsonFileRepository,
    SnapshotRepository,
    make_session,
)

__all__ = [
    "UNRESOLVED",
    "Admin",
    "ApiRepository",
    "Channel",
    "Customer",
    "EntityRef",
    "InMemoryRepository",
    "JsonFileRepository",
    "Payment",
    "Product",
    "SaleRecord",
    "Snapshot",
    "SnapshotRepository",
    "make_session",
    "normalize_sale",
    "normalize_snapshot",
]
