"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import threading

from todos_api.config import get_settings
from todos_api.db import AccountStore, InMemoryAccountStore, SqlAccountStore
from todos_api.tokens import TokenService, load_signing_secret

_account_store: AccountStore | None = None
_token_service: TokenService | None = None
_lock = threading.Lock()


def get_account_store() -> AccountStore:
    """
    Return a singleton account store so accounts persist across requests.
    """
    global _account_store
    if _account_store is not None:
        return _account_store

    with _lock:
        if _account_store is None:
            settings = get_settings()
            if settings.use_in_memory_backends or not settings.database_url:
                _account_store = InMemoryAccountStore()
            else:
                _account_store = SqlAccountStore(settings.database_url)
    return _account_store


def get_token_service() -> TokenService:
    """
    Return the singleton token service. The signing key is loaded once and
    never rotated; ``create_app`` builds it so a bad key fails startup.
    """
    global _token_service
    if _token_service is not None:
        return _token_service

    with _lock:
        if _token_service is None:
            settings = get_settings()
            _token_service = TokenService(
                load_signing_secret(settings), algorithm=settings.token_algorithm
            )
    return _token_service
