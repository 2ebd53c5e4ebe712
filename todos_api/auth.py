"""
Bearer token gate for protected routes.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request

from todos_api.config import get_settings
from todos_api.dependencies import get_token_service
from todos_api.errors import AuthError, MissingToken, Unauthorized
from todos_api.tokens import TokenService

logger = logging.getLogger(__name__)


def require_account_id(
    request: Request, tokens: TokenService = Depends(get_token_service)
) -> str:
    """
    Resolve the request's bearer token to an account id.

    The id is also attached to ``request.state.account_id``. The account
    store is never consulted here.
    """
    header = get_settings().token_header
    token = request.headers.get(header)
    if not token:
        raise MissingToken()
    try:
        account_id = tokens.verify(token)
    except AuthError as exc:
        logger.info("Rejected token on %s: %s", request.url.path, exc)
        raise Unauthorized("Invalid or expired token") from exc
    request.state.account_id = account_id
    return account_id
