# id3py/subsets.py
"""Exhaustive search for the best binary grouping of a nominal feature.

The search is exponential in the number of category values: a feature with
``m`` values has ``2 ** (m - 1) - 1`` candidate groupings.  Callers bound the
feature cardinality themselves.
"""
from __future__ import annotations

from typing import Iterator, NamedTuple

import numpy as np

from . import impurity
from .config import Criterion


class Bipartition(NamedTuple):
    group: frozenset      # value codes routed to branch 0
    score: float
    n_candidates: int


def n_bipartitions(n_values: int) -> int:
    return 2 ** (n_values - 1) - 1 if n_values >= 2 else 0


def bipartitions(n_values: int) -> Iterator[frozenset]:
    """Yield group A of every split of ``range(n_values)`` into two non-empty groups.

    Candidates come in reflected Gray-code order over ``n_values`` bits, most
    significant bit for code ``0``; a zero bit puts the code in group A.  Code
    ``0`` is always in group A, which removes the A/B swapped duplicates.
    """
    for i in range(1, 2 ** (n_values - 1) if n_values >= 2 else 1):
        gray = i ^ (i >> 1)
        yield frozenset(v for v in range(n_values)
                        if not (gray >> (n_values - 1 - v)) & 1)


def best_bipartition(value_counts: np.ndarray, criterion: Criterion,
                     missing_counts: np.ndarray | None = None) -> Bipartition:
    """Pick the grouping that scores best under ``criterion``.

    Parameters
    ----------
    value_counts : ndarray of shape (n_values, n_classes)
        Class counts of the instances holding each value code.
    criterion : Criterion
        Gain ratio keeps the last candidate with ``score >= best``, Gini the
        last one with ``score <= best``.
    missing_counts : ndarray of shape (n_classes,), optional
        Class counts of instances missing the value; they fall in branch 1.
    """
    value_counts = np.asarray(value_counts, dtype=float)
    n_values = value_counts.shape[0]
    parent = value_counts.sum(axis=0)
    if missing_counts is not None:
        parent = parent + missing_counts

    if n_values < 2:
        left = value_counts.sum(axis=0)
        s = impurity.score(criterion, parent, [left, parent - left])
        return Bipartition(frozenset(range(n_values)), s, 0)

    candidates = []
    best, best_group = impurity.initial_best(criterion), None
    for group in bipartitions(n_values):
        left = value_counts[sorted(group)].sum(axis=0)
        s = impurity.score(criterion, parent, [left, parent - left])
        candidates.append((group, s))
        if impurity.at_least_as_good(criterion, s, best):
            best, best_group = s, group
    if best_group is None:
        # every score fell below the starting bound through rounding
        best_group, best = candidates[0]
    return Bipartition(best_group, float(best), len(candidates))
