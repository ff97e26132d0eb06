"""Ordering and filtering of replacement recommendations."""

from .models import XrefRecommendation

# Lifecycle status -> sort rank. Unknown statuses sort with NRND.
_STATUS_RANK: dict[str, int] = {
    "active": 0,
    "nrnd": 1,
    "lasttimebuy": 1,
    "last time buy": 1,
    "obsolete": 2,
    "discontinued": 2,
}
_OBSOLETE_STATUSES = frozenset({"obsolete", "discontinued"})


def status_rank(status: str | None) -> int:
    return _STATUS_RANK.get((status or "").strip().lower(), 1)


def is_obsolete(rec: XrefRecommendation) -> bool:
    return (rec.part.status or "").strip().lower() in _OBSOLETE_STATUSES


def rank_key(rec: XrefRecommendation) -> tuple[int, int, int, str]:
    """Higher match first, then fewer fails, then healthier lifecycle, then MPN."""
    return (-rec.match_percentage, rec.fail_count, status_rank(rec.part.status), rec.part.mpn.upper())


def rank_recommendations(recs: list[XrefRecommendation]) -> list[XrefRecommendation]:
    """Return a new list in total, deterministic order; the input is not modified."""
    return sorted(recs, key=rank_key)


def filter_obsolete(recs: list[XrefRecommendation], hide_obsolete: bool = True) -> list[XrefRecommendation]:
    if not hide_obsolete:
        return list(recs)
    return [r for r in recs if not is_obsolete(r)]
