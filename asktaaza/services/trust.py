from typing import Any, Literal


ConfidenceLevel = Literal["high", "medium", "low"]

_LABELS = {
    "high": "High Confidence",
    "medium": "Medium Confidence",
    "low": "Low Confidence",
}

TRUSTED_AFTER = 5


def calculate_confidence(question: Any) -> ConfidenceLevel:
    score = 0
    # first-hand reports weigh more than relayed ones
    source = getattr(question, "source", None)
    if source == "direct":
        score += 3
    elif source == "other":
        score += 1

    for field in ("company", "skill", "experience_level", "round", "category"):
        if getattr(question, field, None):
            score += 1

    if score >= 6:
        return "high"
    if score >= 4:
        return "medium"
    return "low"


def confidence_label(level: ConfidenceLevel) -> str:
    return _LABELS[level]


def contributor_type(submission_count: int) -> str:
    return "trusted" if submission_count >= TRUSTED_AFTER else "new"
