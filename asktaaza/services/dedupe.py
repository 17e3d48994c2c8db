from typing import Iterable


def normalize(text: str) -> str:
    return text.strip().lower()


def words(text: str) -> list[str]:
    return text.split()


def _words_match(a: str, b: str) -> bool:
    """Equal words match; so does a substring when the longer word is 5+ chars.

    The length test is on the longer word, not the contained one, so a short
    word like "a" matches inside "explain". A stricter variant that requires
    the contained word itself to be 5+ chars would reject that pair.
    """
    if a == b:
        return True
    return (a in b or b in a) and max(len(a), len(b)) > 4


def word_overlap(candidate: str, stored: str) -> float:
    """Share of candidate words that match a stored word.

    Divided by the larger word count so a short candidate cannot look like
    a long stored question (and vice versa). Both inputs are expected to be
    normalized already.
    """
    new_words = words(candidate)
    old_words = words(stored)
    denom = max(len(new_words), len(old_words))
    if denom == 0:
        return 0.0
    matched = [w for w in new_words if any(_words_match(w, sw) for sw in old_words)]
    return len(matched) / denom


def is_similar(a: str, b: str, threshold: float = 0.7) -> bool:
    return word_overlap(normalize(a), normalize(b)) > threshold


def is_duplicate(candidate: str, accepted: Iterable[str], threshold: float = 0.7) -> bool:
    for t in accepted:
        if is_similar(candidate, t, threshold=threshold):
            return True
    return False
