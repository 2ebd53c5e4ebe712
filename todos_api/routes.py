"""
HTTP routes for the todos API.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from todos_api.auth import require_account_id
from todos_api.config import get_settings
from todos_api.db import AccountRecord, AccountStore
from todos_api.dependencies import get_account_store, get_token_service
from todos_api.errors import BadRequest, Unauthorized
from todos_api.passwords import (
    MAX_PASSWORD_BYTES,
    dummy_password_hash,
    hash_password,
    verify_password,
)
from todos_api.schemas import (
    AccountResponse,
    AuthResponse,
    CredentialsRequest,
    TodoItemResponse,
    TodoTextRequest,
)
from todos_api.tokens import TokenService

logger = logging.getLogger(__name__)

router = APIRouter()
account_router = APIRouter()


def _require_account(account: AccountRecord | None) -> AccountRecord:
    # A token can outlive its account; treat that like a bad token.
    if account is None:
        raise Unauthorized("Account no longer exists")
    return account


def _todo_list(account: AccountRecord) -> list[TodoItemResponse]:
    return [TodoItemResponse(**todo.as_dict()) for todo in account.todos]


def _account_response(account: AccountRecord) -> AccountResponse:
    return AccountResponse(**account.as_dict())


@account_router.post("/register", response_model=AuthResponse)
def register(
    payload: CredentialsRequest,
    store: AccountStore = Depends(get_account_store),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Create an account with an empty todo list and return a token for it.
    """
    if len(payload.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise BadRequest(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    settings = get_settings()
    account = store.create_account(
        payload.username,
        hash_password(payload.password, rounds=settings.bcrypt_rounds),
    )
    logger.info("Registered account %s for %s", account.account_id, account.username)
    token = tokens.issue(account.account_id, settings.register_token_ttl_seconds)
    return AuthResponse(token=token)


@account_router.post("/login", response_model=AuthResponse)
def login(
    payload: CredentialsRequest,
    store: AccountStore = Depends(get_account_store),
    tokens: TokenService = Depends(get_token_service),
):
    logger.info("Login attempt for %s", payload.username)
    settings = get_settings()
    account = store.find_by_username(payload.username)
    if account is None:
        verify_password(payload.password, dummy_password_hash(settings.bcrypt_rounds))
        logger.warning("Login failed for %s", payload.username)
        raise Unauthorized("Invalid username or password")
    if not verify_password(payload.password, account.password_hash):
        logger.warning("Login failed for %s", payload.username)
        raise Unauthorized("Invalid username or password")
    token = tokens.issue(account.account_id, settings.login_token_ttl_seconds)
    return AuthResponse(token=token)


@router.get("/todos", response_model=list[TodoItemResponse])
def list_todos(
    account_id: str = Depends(require_account_id),
    store: AccountStore = Depends(get_account_store),
):
    account = _require_account(store.get_account(account_id))
    return _todo_list(account)


@router.post("/todos", response_model=list[TodoItemResponse])
def create_todo(
    payload: TodoTextRequest,
    account_id: str = Depends(require_account_id),
    store: AccountStore = Depends(get_account_store),
):
    account = _require_account(store.add_todo(account_id, payload.text))
    return _todo_list(account)


@router.put("/todos/{todo_id}", response_model=AccountResponse)
def update_todo(
    todo_id: str,
    payload: TodoTextRequest,
    account_id: str = Depends(require_account_id),
    store: AccountStore = Depends(get_account_store),
):
    """
    Replace the text of one todo. An unknown ``todo_id`` leaves the list
    unchanged and still returns the account.
    """
    account = _require_account(store.update_todo(account_id, todo_id, payload.text))
    return _account_response(account)


@router.delete("/todos/{todo_id}", response_model=AccountResponse)
def delete_todo(
    todo_id: str,
    account_id: str = Depends(require_account_id),
    store: AccountStore = Depends(get_account_store),
):
    account = _require_account(store.remove_todo(account_id, todo_id))
    return _account_response(account)
