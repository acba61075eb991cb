"""
inventory/store.py -- SQLAlchemy-backed persistence layer for assets.

Uses SQLAlchemy Core (not ORM) so the dataclass in inventory/models.py
remains the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. AssetStore is the storage repository;
_row_to_asset is the mapper. Permission checks are NOT done here -- see
inventory/repository.py.

Serial numbers: UNIQUE(serial_number) is a plain column constraint. NULL
values never collide (SQLite and PostgreSQL both treat NULLs as distinct),
which gives "unique when present" without a partial index. Blank strings are
normalized to NULL by the repository before they get here.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = AssetStore("sqlite:///armory.db")
    asset_id = store.create_asset(asset)
    assets = store.list_assets(base="Alpha")
    store.update_asset(asset_id, status="maintenance")
    store.close()
"""

from dataclasses import fields as dataclass_fields
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text

from core.db import make_engine, utc_now
from inventory.models import DEFAULT_STATUS, Asset

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_assets = Table(
    "assets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("type", String(30), nullable=False),
    Column("serial_number", String(255), unique=True),
    Column("status", String(30), nullable=False, server_default=DEFAULT_STATUS),
    Column("quantity", Integer, nullable=False),
    Column("assigned_quantity", Integer, nullable=False, server_default="0"),
    Column("base", String(255), nullable=False),
    Column("notes", Text),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

# Columns update_asset() accepts. Everything else is immutable or store-owned.
UPDATABLE_COLUMNS = frozenset(
    f.name for f in dataclass_fields(Asset) if f.name not in ("id", "created_at", "updated_at")
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AssetStore:
    def __init__(self, db_url: str) -> None:
        self.engine = make_engine(db_url)
        metadata.create_all(self.engine)

    def create_asset(self, asset: Asset) -> int:
        """Insert a new asset and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError on a duplicate serial number.
        """
        now = utc_now()
        with self.engine.connect() as conn:
            result = conn.execute(
                _assets.insert().values(
                    name=asset.name,
                    type=asset.type,
                    serial_number=asset.serial_number,
                    status=asset.status,
                    quantity=asset.quantity,
                    assigned_quantity=asset.assigned_quantity,
                    base=asset.base,
                    notes=asset.notes,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_asset(self, asset_id: int) -> Optional[Asset]:
        """Return the asset with this ID, or None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_assets.select().where(_assets.c.id == asset_id)).fetchone()
        return _row_to_asset(row) if row is not None else None

    def list_assets(self, base: Optional[str] = None) -> list[Asset]:
        """Return assets ordered by ID, optionally only those at one base."""
        query = _assets.select().order_by(_assets.c.id)
        if base is not None:
            query = query.where(_assets.c.base == base)
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_asset(r) for r in rows]

    def update_asset(self, asset_id: int, **fields) -> bool:
        """Update the given columns and bump updated_at.

        Returns True if a row was updated, False if asset_id was not found.
        Raises ValueError for a column outside UPDATABLE_COLUMNS and
        sqlalchemy.exc.IntegrityError on a duplicate serial number.
        """
        unknown = set(fields) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown asset columns: {sorted(unknown)!r}")
        with self.engine.connect() as conn:
            result = conn.execute(
                _assets.update().where(_assets.c.id == asset_id).values(updated_at=utc_now(), **fields)
            )
            conn.commit()
        return result.rowcount > 0

    def delete_asset(self, asset_id: int) -> bool:
        """Delete an asset. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_assets.delete().where(_assets.c.id == asset_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_asset(row) -> Asset:
    return Asset(
        id=row.id,
        name=row.name,
        type=row.type,
        serial_number=row.serial_number,
        status=row.status,
        quantity=row.quantity,
        assigned_quantity=row.assigned_quantity,
        base=row.base,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
