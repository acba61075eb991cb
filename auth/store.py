"""
auth/store.py -- User account table and its repository.

UserStore speaks SQL; _row_to_user turns rows back into auth.models.User.
Nothing above this module builds queries.

UNIQUE(username) lives in the schema. create_user() just inserts: when two
sign-ups race for one name, the database picks the winner and the other gets
IntegrityError, which CredentialStore reports as a conflict.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, distinct, select

from auth.models import ROLE_OFFICER, User
from core.db import make_engine, utc_now

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("name", String(255), nullable=False),
    Column("role", String(30), nullable=False, server_default=ROLE_OFFICER),
    Column("base", String(255), nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


class UserStore:
    """Persistence for User records.

        store = UserStore("sqlite:///armory.db")
        uid = store.create_user(User(username="root", name="Ops", role="admin",
                                     base="HQ", hashed_password=hash_password("...")))
        store.get_by_id(uid)
    """

    def __init__(self, db_url: str) -> None:
        self.engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def create_user(self, user: User) -> int:
        """Insert user and return the new id. IntegrityError on a taken username."""
        stamp = utc_now()
        row = {
            "username": user.username,
            "hashed_password": user.hashed_password,
            "name": user.name,
            "role": user.role,
            "base": user.base,
            "created_at": stamp,
            "updated_at": stamp,
        }
        with self.engine.begin() as conn:
            return conn.execute(_users.insert().values(**row)).inserted_primary_key[0]

    def get_by_username(self, username: str) -> User | None:
        return self._fetch_one(_users.c.username == username)

    def get_by_id(self, user_id: int) -> User | None:
        return self._fetch_one(_users.c.id == user_id)

    def list_users(self) -> list[User]:
        with self.engine.connect() as conn:
            rows = conn.execute(select(_users).order_by(_users.c.username)).all()
        return [_row_to_user(r) for r in rows]

    def list_bases(self) -> list[str]:
        """Distinct non-empty bases across all users, alphabetical."""
        query = select(distinct(_users.c.base)).where(_users.c.base != "").order_by(_users.c.base)
        with self.engine.connect() as conn:
            return list(conn.execute(query).scalars())

    def delete_user(self, user_id: int) -> bool:
        """Delete by id; False when there was no such user."""
        with self.engine.begin() as conn:
            return conn.execute(_users.delete().where(_users.c.id == user_id)).rowcount > 0

    def close(self) -> None:
        self.engine.dispose()

    def _fetch_one(self, condition) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(select(_users).where(condition)).first()
        return None if row is None else _row_to_user(row)


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        hashed_password=row.hashed_password,
        name=row.name,
        role=row.role,
        base=row.base,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
