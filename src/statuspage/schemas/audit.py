from typing import Any

from pydantic import BaseModel


class AuditUser(BaseModel):
    id: int | None = None
    username: str | None = None
    role: str | None = None


class AuditEntryRead(BaseModel):
    at: str
    user: AuditUser | None = None
    action: str
    meta: dict[str, Any] = {}
    summary: str
