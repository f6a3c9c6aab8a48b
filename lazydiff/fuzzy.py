"""Substring-first fuzzy matching for file names and menu labels."""

from __future__ import annotations


def _fold(text: str, case_sensitive: bool) -> str:
    return text if case_sensitive else text.casefold()


def fuzzy_score(query: str, candidate: str, case_sensitive: bool = False) -> int | None:
    """Score an in-order subsequence match, or ``None`` when ``query`` is not one.

    Consecutive runs and matches right after a separator score higher; long
    candidates are mildly penalized.
    """
    if not query:
        return 0
    query_folded = _fold(query, case_sensitive)
    candidate_folded = _fold(candidate, case_sensitive)

    score = 0
    prev_idx = -1
    run = 0
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in "/_- .":
            score += 35
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score


def substring_index(query: str, candidate: str, case_sensitive: bool = False) -> int | None:
    if not query:
        return 0
    idx = _fold(candidate, case_sensitive).find(_fold(query, case_sensitive))
    if idx < 0:
        return None
    return idx


def fuzzy_match_labels(query: str, labels: list[str], limit: int = 200) -> list[tuple[int, str, int]]:
    """Rank ``labels`` against ``query`` as ``(index, label, score)`` tuples.

    Substring hits win outright; fuzzy subsequence scoring is used only when
    no label contains the query. An empty query keeps every label in order.
    """
    if not query:
        return [(idx, label, 0) for idx, label in enumerate(labels[: max(1, limit)])]

    substring_scored: list[tuple[int, int, str, int]] = []
    for idx, label in enumerate(labels):
        substr_idx = substring_index(query, label)
        if substr_idx is None:
            continue
        substring_scored.append((substr_idx, len(label), label, idx))
    if substring_scored:
        substring_scored.sort(key=lambda item: (item[0], item[1], item[2]))
        return [
            (label_idx, label, 10_000 - (substr_idx * 50) - label_len)
            for substr_idx, label_len, label, label_idx in substring_scored[: max(1, limit)]
        ]

    scored: list[tuple[int, int, str, int]] = []
    for idx, label in enumerate(labels):
        score = fuzzy_score(query, label)
        if score is None:
            continue
        scored.append((score, len(label), label, idx))
    scored.sort(key=lambda item: (-item[0], item[1], item[2]))
    return [(idx, label, score) for score, _, label, idx in scored[: max(1, limit)]]


__all__ = ["fuzzy_match_labels", "fuzzy_score", "substring_index"]
