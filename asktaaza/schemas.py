"""
Request/response models for the HTTP API
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import ExperienceLevel, Freshness, InterviewRound, QuestionSource


class QuestionSubmission(BaseModel):
    content: str = Field(..., min_length=10, max_length=1000)
    company: str = Field(..., min_length=1, max_length=100)
    skill: str = Field(..., min_length=1, max_length=100)
    category: Optional[str] = Field(default=None, max_length=100)
    interview_date: date
    experience_level: Optional[ExperienceLevel] = None
    round: Optional[InterviewRound] = None
    source: Optional[QuestionSource] = None
    # set when the user saw the "looks like a duplicate" prompt and went ahead
    confirm_duplicate: bool = False

    @field_validator("interview_date")
    @classmethod
    def not_in_future(cls, v: date) -> date:
        if v > date.today():
            raise ValueError("Interview date cannot be in the future")
        return v


class QuestionFilter(BaseModel):
    company: Optional[str] = None
    skill: Optional[str] = None
    experience_level: Optional[ExperienceLevel] = None
    round: Optional[InterviewRound] = None
    freshness: Optional[Freshness] = None
    search: Optional[str] = None


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str
    company: str
    skill: Optional[str] = None
    category: Optional[str] = None
    interview_date: datetime
    experience_level: Optional[str] = None
    round: str
    source: Optional[str] = None
    created_at: datetime
    confidence: Optional[str] = None
    confidence_label: Optional[str] = None
    # content split into individual questions for display
    items: list[str] = Field(default_factory=list)
    highlighted: Optional[str] = None


class AdminQuestionOut(QuestionOut):
    is_flagged: bool
    user_id: int
    updated_at: datetime


class TopicCount(BaseModel):
    name: str
    count: int
    period: str


class CompanyCount(BaseModel):
    name: str
    discussions: int


class LimitsOut(BaseModel):
    can_submit: bool
    reason: Optional[str] = None
    time_until_next: Optional[int] = None


class Credentials(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
    name: Optional[str] = Field(default=None, max_length=100)


class OptionIn(BaseModel):
    value: str = Field(..., max_length=100)


class OptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    value: str
