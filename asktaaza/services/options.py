from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models import InterviewDetailOption, OptionType


logger = logging.getLogger(__name__)


def _ordered(db: Session, option_type: OptionType):
    return (
        db.query(InterviewDetailOption)
        .filter(InterviewDetailOption.type == option_type)
        .order_by(InterviewDetailOption.sort_order.asc(), InterviewDetailOption.value.asc())
    )


def get_options(db: Session, option_type: OptionType) -> list[str]:
    return [o.value for o in _ordered(db, option_type).all()]


def get_options_for_admin(db: Session, option_type: OptionType) -> list[InterviewDetailOption]:
    return _ordered(db, option_type).all()


def add_option(db: Session, option_type: OptionType, value: str) -> Optional[InterviewDetailOption]:
    """Add a choice; returns None for blank or already-listed values."""
    trimmed = value.strip()
    if not trimmed:
        return None
    exists = (
        db.query(InterviewDetailOption)
        .filter(InterviewDetailOption.type == option_type, InterviewDetailOption.value == trimmed)
        .first()
    )
    if exists:
        return None
    opt = InterviewDetailOption(type=option_type, value=trimmed, sort_order=0)
    db.add(opt)
    db.commit()
    db.refresh(opt)
    logger.info("Added %s option %r", option_type.value, trimmed)
    return opt


def remove_option(db: Session, option_id: int) -> bool:
    deleted = db.query(InterviewDetailOption).filter(InterviewDetailOption.id == option_id).delete()
    db.commit()
    return bool(deleted)
