from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


def utcnow() -> datetime:
    # SQLite drops tzinfo, so everything is stored as naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ExperienceLevel(str, Enum):
    junior = "0-2 years"
    early = "3-4 years"
    mid = "4-6 years"
    senior = "6-8 years"
    staff = "8+ years"


class InterviewRound(str, Enum):
    phone = "phone"
    onsite = "onsite"
    technical = "technical"
    behavioral = "behavioral"
    system_design = "system_design"
    other = "other"


class QuestionSource(str, Enum):
    direct = "direct"
    other = "other"


class Freshness(str, Enum):
    week = "Last 7 days"
    month = "Last 30 days"
    quarter = "Last 90 days"
    all_time = "All time"

    @property
    def days(self) -> Optional[int]:
        return {"Last 7 days": 7, "Last 30 days": 30, "Last 90 days": 90}.get(self.value)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    password_hash: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    questions: Mapped[list[Question]] = relationship("Question", back_populates="author", cascade="all, delete-orphan")  # type: ignore[name-defined]


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    content: Mapped[str] = mapped_column(Text)
    company: Mapped[str] = mapped_column(String(100), index=True)
    skill: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    interview_date: Mapped[datetime] = mapped_column(DateTime)
    experience_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    round: Mapped[str] = mapped_column(String(20), default=InterviewRound.other.value)
    source: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    is_flagged: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    author: Mapped[User] = relationship("User", back_populates="questions")


class OptionType(str, Enum):
    company = "company"
    technology = "technology"


class InterviewDetailOption(Base):
    """Admin-curated choices offered by the submit form and filters."""

    __tablename__ = "interview_detail_options"
    __table_args__ = (UniqueConstraint("type", "value", name="uq_option_type_value"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    type: Mapped[OptionType] = mapped_column(SAEnum(OptionType), index=True)
    value: Mapped[str] = mapped_column(String(100))
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class ClientState(Base):
    """Per-client key/value entries, keyed by the id kept in the session cookie."""

    __tablename__ = "client_state"

    client_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
