"""Audit log model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from carzone.database import Base
from carzone.utils.datetime import utc_now


class AuditLog(Base):
    """Append-only record of booking and payment state changes."""

    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Action details
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    resource_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, index=True)

    # Changes
    old_values: Mapped[dict | None] = mapped_column(JSON().with_variant(JSONB, "postgresql"))
    new_values: Mapped[dict | None] = mapped_column(JSON().with_variant(JSONB, "postgresql"))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now(), index=True
    )
