# API schemas — payloads exchanged with the auth endpoints.
# Created: 2026-10-19

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RefreshResponse(BaseModel):
    """Body of a successful ``POST /auth/refresh``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: str = Field(alias="accessToken", min_length=1)
