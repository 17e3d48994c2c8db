import re
from typing import Optional


_NUMBERING = re.compile(r"^\d+\.\s*")


def format_questions(content: str) -> list[str]:
    """Split a multi-question submission into individual questions.

    One question per non-blank line, with leading "1. " style numbering
    removed. Single-line content comes back as-is (trimmed).
    """
    lines = [l for l in re.split(r"\n+", content) if l.strip()]
    if len(lines) > 1:
        return [_NUMBERING.sub("", l.strip()) for l in lines]
    return [content.strip()]


def highlight_keywords(text: str, query: str) -> str:
    if not query or not text:
        return text
    keywords = [re.escape(w) for w in query.strip().split() if w]
    if not keywords:
        return text
    pattern = re.compile("(" + "|".join(keywords) + ")", re.IGNORECASE)
    return pattern.sub(r"<mark>\1</mark>", text)


def matches_search(text: Optional[str], query: str) -> bool:
    if not text or not query:
        return False
    q = query.strip().lower()
    if not q:
        return False
    return q in text.lower()
