"""
Account store for SQLAlchemy databases and an in-memory test implementation.

Each account owns an ordered list of todo items. Every todo operation is
keyed by ``(account_id, todo_id)`` so one account can never reach into
another account's list.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Protocol

from sqlalchemy import (
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    delete,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from todos_api.errors import DuplicateUsername, StoreError

logger = logging.getLogger(__name__)


class AccountStore(Protocol):
    """Interface for account and todo persistence."""

    def create_account(self, username: str, password_hash: str) -> "AccountRecord":
        ...

    def get_account(self, account_id: str) -> Optional["AccountRecord"]:
        ...

    def find_by_username(self, username: str) -> Optional["AccountRecord"]:
        ...

    def add_todo(self, account_id: str, text: str) -> Optional["AccountRecord"]:
        ...

    def update_todo(
        self, account_id: str, todo_id: str, text: str
    ) -> Optional["AccountRecord"]:
        ...

    def remove_todo(
        self, account_id: str, todo_id: str
    ) -> Optional["AccountRecord"]:
        ...


@dataclass
class TodoItem:
    todo_id: str
    text: str

    def as_dict(self) -> dict:
        return {"id": self.todo_id, "text": self.text}


@dataclass
class AccountRecord:
    account_id: str
    username: str
    password_hash: str
    todos: list[TodoItem] = field(default_factory=list)
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        """Public projection; the password hash is never included."""
        return {
            "id": self.account_id,
            "username": self.username,
            "todos": [todo.as_dict() for todo in self.todos],
        }


class InMemoryAccountStore:
    """Simple in-memory account store for development and tests."""

    def __init__(self):
        self.accounts: Dict[str, AccountRecord] = {}
        self.usernames: Dict[str, str] = {}
        self._lock = threading.Lock()

    def _snapshot(self, account_id: str) -> Optional[AccountRecord]:
        account = self.accounts.get(account_id)
        if not account:
            return None
        return AccountRecord(
            account_id=account.account_id,
            username=account.username,
            password_hash=account.password_hash,
            todos=[TodoItem(t.todo_id, t.text) for t in account.todos],
            created_at=account.created_at,
        )

    def create_account(self, username: str, password_hash: str) -> AccountRecord:
        with self._lock:
            if username in self.usernames:
                raise DuplicateUsername(username)
            account_id = uuid.uuid4().hex
            self.accounts[account_id] = AccountRecord(
                account_id=account_id,
                username=username,
                password_hash=password_hash,
            )
            self.usernames[username] = account_id
            return self._snapshot(account_id)

    def get_account(self, account_id: str) -> Optional[AccountRecord]:
        with self._lock:
            return self._snapshot(account_id)

    def find_by_username(self, username: str) -> Optional[AccountRecord]:
        with self._lock:
            account_id = self.usernames.get(username)
            return self._snapshot(account_id) if account_id else None

    def add_todo(self, account_id: str, text: str) -> Optional[AccountRecord]:
        with self._lock:
            account = self.accounts.get(account_id)
            if not account:
                return None
            account.todos.append(TodoItem(todo_id=uuid.uuid4().hex, text=text))
            return self._snapshot(account_id)

    def update_todo(
        self, account_id: str, todo_id: str, text: str
    ) -> Optional[AccountRecord]:
        with self._lock:
            account = self.accounts.get(account_id)
            if not account:
                return None
            for todo in account.todos:
                if todo.todo_id == todo_id:
                    todo.text = text
                    break
            return self._snapshot(account_id)

    def remove_todo(
        self, account_id: str, todo_id: str
    ) -> Optional[AccountRecord]:
        with self._lock:
            account = self.accounts.get(account_id)
            if not account:
                return None
            account.todos = [t for t in account.todos if t.todo_id != todo_id]
            return self._snapshot(account_id)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.accounts.clear()
            self.usernames.clear()


class SqlAccountStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    Todo mutations are single UPDATE/DELETE statements scoped to one account,
    so concurrent edits of the same list do not overwrite each other.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("database_url is required for SqlAccountStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self.Session() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.exception("Account store operation failed")
            raise StoreError("Account store failure") from exc

    def _load_account(
        self, session: Session, account_id: str
    ) -> Optional[AccountRecord]:
        row = session.get(AccountRow, account_id)
        if not row:
            return None
        stmt = (
            select(TodoRow)
            .where(TodoRow.account_id == account_id)
            .order_by(TodoRow.seq.asc())
        )
        todos = [
            TodoItem(todo_id=todo.todo_id, text=todo.text)
            for todo in session.execute(stmt).scalars()
        ]
        return AccountRecord(
            account_id=row.account_id,
            username=row.username,
            password_hash=row.password_hash,
            todos=todos,
            created_at=row.created_at,
        )

    def create_account(self, username: str, password_hash: str) -> AccountRecord:
        account_id = uuid.uuid4().hex
        with self._session() as session:
            session.add(
                AccountRow(
                    account_id=account_id,
                    username=username,
                    password_hash=password_hash,
                    created_at=time.time(),
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                stmt = select(AccountRow.account_id).where(
                    AccountRow.username == username
                )
                if session.execute(stmt).scalar_one_or_none():
                    raise DuplicateUsername(username) from exc
                raise
            return self._load_account(session, account_id)

    def get_account(self, account_id: str) -> Optional[AccountRecord]:
        with self._session() as session:
            return self._load_account(session, account_id)

    def find_by_username(self, username: str) -> Optional[AccountRecord]:
        with self._session() as session:
            stmt = select(AccountRow.account_id).where(
                AccountRow.username == username
            )
            account_id = session.execute(stmt).scalar_one_or_none()
            if not account_id:
                return None
            return self._load_account(session, account_id)

    def add_todo(self, account_id: str, text: str) -> Optional[AccountRecord]:
        with self._session() as session:
            if not session.get(AccountRow, account_id):
                return None
            session.add(
                TodoRow(
                    todo_id=uuid.uuid4().hex,
                    account_id=account_id,
                    text=text,
                    created_at=time.time(),
                )
            )
            session.commit()
            return self._load_account(session, account_id)

    def update_todo(
        self, account_id: str, todo_id: str, text: str
    ) -> Optional[AccountRecord]:
        with self._session() as session:
            session.execute(
                update(TodoRow)
                .where(TodoRow.account_id == account_id, TodoRow.todo_id == todo_id)
                .values(text=text)
            )
            session.commit()
            return self._load_account(session, account_id)

    def remove_todo(
        self, account_id: str, todo_id: str
    ) -> Optional[AccountRecord]:
        with self._session() as session:
            session.execute(
                delete(TodoRow).where(
                    TodoRow.account_id == account_id, TodoRow.todo_id == todo_id
                )
            )
            session.commit()
            return self._load_account(session, account_id)


Base = declarative_base()


class AccountRow(Base):
    __tablename__ = "accounts"

    account_id = Column(String, primary_key=True)
    username = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(Float, nullable=False)


class TodoRow(Base):
    __tablename__ = "todo_items"
    __table_args__ = (UniqueConstraint("account_id", "todo_id"),)

    seq = Column(Integer, primary_key=True, autoincrement=True)
    todo_id = Column(String, nullable=False)
    account_id = Column(
        String, ForeignKey("accounts.account_id"), nullable=False, index=True
    )
    text = Column(String, nullable=False)
    created_at = Column(Float, nullable=False)
