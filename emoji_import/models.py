from __future__ import annotations

from datetime import datetime
from sqlalchemy import Boolean, Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Text
from sqlalchemy.orm import relationship

from .db import Base


class UploadRun(Base):
    __tablename__ = "upload_runs"
    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=True)
    host = Column(String, nullable=False)
    manifest = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="running")  # running|done|partial|aborted|auth_failed|error
    started_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    finished_at = Column(DateTime, nullable=True)
    message = Column(Text, nullable=True)

    attempts = relationship(
        "UploadAttempt",
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="UploadAttempt.position",
    )


class UploadAttempt(Base):
    __tablename__ = "upload_attempts"
    id = Column(Integer, primary_key=True)
    run_id = Column(Integer, ForeignKey("upload_runs.id"), nullable=False)
    position = Column(Integer, nullable=False)  # index in the manifest
    name = Column(String, nullable=False)
    src = Column(Text, nullable=False)
    ok = Column(Boolean, nullable=False, default=False)
    error = Column(Text, nullable=True)
    attempted_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    run = relationship("UploadRun", back_populates="attempts")

    __table_args__ = (
        UniqueConstraint("run_id", "position", name="uq_run_position"),
    )
