"""
Contact name resolution.

Pure functions over (task contact name, contact directory snapshot) so the same
ranking serves the generator (server side ORM rows) and the review client
(wire dicts).
"""
import os
import unicodedata
from difflib import SequenceMatcher
from typing import Any, Iterable, Optional

CANDIDATE_LIMIT = int(os.getenv("CANDIDATE_LIMIT", "3"))
MIN_SIMILARITY = 0.45


def normalize_text(text: str) -> str:
    """Remove diacritics, collapse whitespace and lowercase for fuzzy matching."""
    normalized = unicodedata.normalize('NFD', text or "")
    without_diacritics = ''.join(c for c in normalized if unicodedata.category(c) != 'Mn')
    return " ".join(without_diacritics.lower().split())


def _field(contact: Any, name: str):
    if isinstance(contact, dict):
        return contact.get(name)
    return getattr(contact, name, None)


def contact_name(contact: Any) -> str:
    return _field(contact, "name") or ""


def has_contact_method(contact: Any) -> bool:
    return bool(_field(contact, "phone") or _field(contact, "email"))


def similarity(a: str, b: str) -> float:
    """Score two names in [0, 1].

    Full-string ratio, boosted when every token of the shorter name starts a
    token of the longer one ("Mary Johns" vs "Mary Johnson").
    """
    a, b = normalize_text(a), normalize_text(b)
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    score = SequenceMatcher(None, a, b).ratio()

    short, long_ = sorted((a.split(), b.split()), key=len)
    if all(any(tok.startswith(s) or s.startswith(tok) for tok in long_) for s in short):
        score = max(score, 0.8 if len(short) == len(long_) else 0.7)

    return round(score, 4)


def resolve_exact(name: str, contacts: Iterable[Any]) -> Optional[Any]:
    """Return the single contact whose normalized name equals `name`, else None."""
    target = normalize_text(name)
    if not target:
        return None
    matches = [c for c in contacts if normalize_text(contact_name(c)) == target]
    return matches[0] if len(matches) == 1 else None


def rank_candidates(
    name: str,
    contacts: Iterable[Any],
    limit: int = CANDIDATE_LIMIT,
    threshold: float = MIN_SIMILARITY,
) -> list[Any]:
    """Top-`limit` contacts by name similarity, best first.

    Ties keep contacts with a phone or email ahead of bare names, then
    alphabetical order, so the ranking is stable for the same snapshot.
    """
    scored = []
    for contact in contacts:
        score = similarity(name, contact_name(contact))
        if score >= threshold:
            scored.append((score, contact))

    scored.sort(key=lambda item: (-item[0], not has_contact_method(item[1]), normalize_text(contact_name(item[1]))))
    return [contact for _, contact in scored[:limit]]
