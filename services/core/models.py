from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime, Text, Integer, BigInteger
from database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SystemConfig(Base):
    """Key/value agent configuration with an updated_by/updated_at audit pair"""
    __tablename__ = "system_config"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    key = Column(String(255), nullable=False, unique=True, index=True)
    value = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    updated_by = Column(String(255), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class AnalysisRun(Base):
    """
    One execution of the resource analysis cycle.

    method: heuristic | ai
    status: running | completed | failed
    """
    __tablename__ = "analysis_runs"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    method = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default="running")
    triggered_by = Column(String(255), nullable=False, default="system")
    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    finished_at = Column(DateTime(timezone=True), nullable=True)

    evaluated = Column(Integer, default=0)
    autonomous = Column(Integer, default=0)
    routed_for_approval = Column(Integer, default=0)
    failed = Column(Integer, default=0)
    skipped_invalid = Column(Integer, default=0)
    # integer-scaled (x1000), same as recommendation savings
    savings_executed = Column(BigInteger, default=0)

    error_message = Column(Text, nullable=True)
