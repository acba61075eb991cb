"""
inventory/models.py -- Domain dataclasses for tracked assets.

Pure data containers with zero logic. Validation and base scoping live in
inventory/repository.py; SQL lives in inventory/store.py.
"""

from dataclasses import dataclass
from typing import Optional

ASSET_TYPES: tuple[str, ...] = ("vehicle", "weapon", "ammunition", "equipment")
ASSET_STATUSES: tuple[str, ...] = ("available", "assigned", "maintenance", "decommissioned")

DEFAULT_STATUS = "available"


@dataclass
class Asset:
    """A stock line of one kind of materiel held at a base.

    quantity is the number held; assigned_quantity is how many of those are
    currently issued out. serial_number is optional and, when set, unique
    across every base.

    id is None before the record is written to the database.
    """

    name: str
    type: str  # "vehicle" | "weapon" | "ammunition" | "equipment"
    quantity: int
    base: str
    status: str = DEFAULT_STATUS  # "available" | "assigned" | "maintenance" | "decommissioned"
    assigned_quantity: int = 0
    serial_number: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, bumped on every update
