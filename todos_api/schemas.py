"""
Pydantic schemas for the todos API.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=256)
    password: str = Field(..., min_length=1, max_length=256)


class AuthResponse(BaseModel):
    auth: Literal[True] = True
    token: str


class TodoTextRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=4096)


class TodoItemResponse(BaseModel):
    id: str
    text: str


class AccountResponse(BaseModel):
    id: str
    username: str
    todos: list[TodoItemResponse]
