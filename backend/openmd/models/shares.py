from typing import Optional

from pydantic import BaseModel, Field


class ShareCreateIn(BaseModel):
    # optional here so a missing id is a 400, not a schema error
    noteId: Optional[int] = None
    password: Optional[str] = Field(default=None, max_length=128)
    expiresInHours: Optional[float] = Field(default=None, ge=0, le=24 * 365)


class ShareCreateOut(BaseModel):
    id: int
    shareCode: str
    shareUrl: str


class ShareMetaOut(BaseModel):
    id: int
    shareCode: str
    hasPassword: bool
    expiresAt: Optional[str] = None
    views: int
    createdAt: str


class ShareUnlockIn(BaseModel):
    password: str = Field(default="", max_length=128)
