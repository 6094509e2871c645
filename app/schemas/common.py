"""Envelopes shared by the v1 routes."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class APIEnvelope(BaseModel):
    status: str = "ok"
    message: str | None = None


class ListEnvelope(BaseModel):
    items: list[Any]
    total: int
