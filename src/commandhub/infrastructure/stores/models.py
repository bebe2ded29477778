from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class CommandExecutionModel(Base):
    __tablename__ = "command_executions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    request_id: Mapped[str] = mapped_column(String(64), index=True)
    action: Mapped[str] = mapped_column(String(128), index=True)
    user_id: Mapped[str] = mapped_column(String(128), default="", index=True)

    success: Mapped[bool] = mapped_column(Boolean, default=False)
    error_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    execution_time_ms: Mapped[float] = mapped_column(Float, default=0.0)

    ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "action": self.action,
            "user_id": self.user_id,
            "success": self.success,
            "error_code": self.error_code,
            "execution_time_ms": self.execution_time_ms,
            "ts": self.ts.isoformat() if self.ts else None,
        }
