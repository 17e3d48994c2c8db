from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..models import Freshness, InterviewRound, Question, User, utcnow
from ..schemas import QuestionFilter, QuestionSubmission
from .ranking import sort_by_rank


logger = logging.getLogger(__name__)

TRENDING_DAYS = 7


def _naive_utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return utcnow()
    if now.tzinfo is not None:
        return now.astimezone(timezone.utc).replace(tzinfo=None)
    return now


def _value(v):
    return v.value if v is not None and hasattr(v, "value") else v


def create_question(db: Session, user: User, submission: QuestionSubmission) -> Question:
    q = Question(
        content=submission.content.strip(),
        company=submission.company.strip(),
        skill=submission.skill.strip(),
        category=(submission.category or "").strip() or None,
        interview_date=datetime.combine(submission.interview_date, time.min),
        experience_level=_value(submission.experience_level),
        round=_value(submission.round) or InterviewRound.other.value,
        source=_value(submission.source),
        user_id=user.id,
    )
    try:
        db.add(q)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Error creating question")
        raise
    db.refresh(q)
    logger.info("Question %s created by user %s", q.id, user.id)
    return q


def get_questions(
    db: Session,
    filters: Optional[QuestionFilter] = None,
    now: Optional[datetime] = None,
) -> list[Question]:
    query = db.query(Question).filter(Question.is_flagged.is_(False))
    if filters:
        search = (filters.search or "").strip()
        if search:
            term = f"%{search}%"
            query = query.filter(
                or_(
                    Question.content.ilike(term),
                    Question.company.ilike(term),
                    Question.skill.ilike(term),
                    Question.category.ilike(term),
                )
            )
        if filters.company:
            query = query.filter(Question.company.ilike(f"%{filters.company}%"))
        if filters.skill:
            query = query.filter(Question.skill.ilike(f"%{filters.skill}%"))
        if filters.round:
            query = query.filter(Question.round == _value(filters.round))
        if filters.experience_level:
            query = query.filter(Question.experience_level == _value(filters.experience_level))
        if filters.freshness and filters.freshness != Freshness.all_time:
            since = _naive_utc(now) - timedelta(days=Freshness(filters.freshness).days)
            query = query.filter(Question.created_at >= since)
    try:
        return query.order_by(Question.created_at.desc()).all()
    except Exception:
        logger.exception("Error fetching questions")
        raise


def get_ranked_questions(
    db: Session,
    filters: Optional[QuestionFilter] = None,
    now: Optional[datetime] = None,
) -> list[Question]:
    now = _naive_utc(now)
    return sort_by_rank(get_questions(db, filters, now=now), now=now)


def get_question_by_id(db: Session, question_id: int) -> Optional[Question]:
    return (
        db.query(Question)
        .filter(Question.id == question_id, Question.is_flagged.is_(False))
        .one_or_none()
    )


def _top_values(db: Session, column, since: Optional[datetime], limit: int) -> list[tuple[str, int]]:
    query = (
        db.query(column, func.count(Question.id))
        .filter(Question.is_flagged.is_(False), column.isnot(None), column != "")
    )
    if since is not None:
        query = query.filter(Question.created_at >= since)
    rows = query.group_by(column).order_by(func.count(Question.id).desc()).limit(limit).all()
    return [(name, int(count)) for name, count in rows]


def get_trending_topics(db: Session, now: Optional[datetime] = None, limit: int = 5) -> list[dict]:
    """Most common skills and categories from the last week.

    Skills win over categories with the same name. Falls back to all-time
    skills when nothing was posted this week.
    """
    since = _naive_utc(now) - timedelta(days=TRENDING_DAYS)
    try:
        combined: dict[str, int] = {}
        for name, count in _top_values(db, Question.skill, since, limit):
            combined[name] = count
        for name, count in _top_values(db, Question.category, since, limit):
            combined.setdefault(name, count)

        trending = sorted(combined.items(), key=lambda kv: kv[1], reverse=True)[:limit]
        if trending:
            return [{"name": n, "count": c, "period": "this week"} for n, c in trending]

        return [
            {"name": n or "General", "count": c, "period": "all time"}
            for n, c in _top_values(db, Question.skill, None, limit)
        ]
    except Exception:
        logger.exception("Error fetching trending topics")
        raise


def get_top_companies(db: Session, limit: int = 5) -> list[dict]:
    try:
        rows = (
            db.query(Question.company, func.count(Question.id))
            .filter(Question.is_flagged.is_(False))
            .group_by(Question.company)
            .order_by(func.count(Question.id).desc())
            .limit(limit)
            .all()
        )
    except Exception:
        logger.exception("Error fetching top companies")
        raise
    return [{"name": name, "discussions": int(count)} for name, count in rows]


# --- moderation ---

def get_all_questions_for_admin(db: Session) -> list[Question]:
    return db.query(Question).order_by(Question.created_at.desc()).all()


def _set_flag(db: Session, question_id: int, flagged: bool) -> bool:
    q = db.get(Question, question_id)
    if not q:
        return False
    q.is_flagged = flagged
    q.updated_at = utcnow()
    db.add(q)
    db.commit()
    logger.info("Question %s %s", question_id, "flagged" if flagged else "approved")
    return True


def flag_question(db: Session, question_id: int) -> bool:
    return _set_flag(db, question_id, True)


def approve_question(db: Session, question_id: int) -> bool:
    return _set_flag(db, question_id, False)


def delete_question(db: Session, question_id: int) -> bool:
    deleted = db.query(Question).filter(Question.id == question_id).delete()
    db.commit()
    if deleted:
        logger.info("Question %s deleted", question_id)
    return bool(deleted)
