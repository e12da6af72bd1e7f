"""Response schema for the audit log listing."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AuditAction = Literal["CREATE", "UPDATE", "DELETE", "LOGIN", "LOGOUT", "RESET"]


class AuditLogEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    action: AuditAction
    entity: str
    details: str
    performed_by: str = Field(alias="performedBy")
    timestamp: datetime | None = None
