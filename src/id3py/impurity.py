# id3py/impurity.py
"""
id3py.impurity
==============

Impurity metrics used to score a candidate partition.

Every function accepts either a :class:`~id3py.dataset.Dataset` or a vector of
per-class instance counts, so the split search can score partitions from
counts alone without materialising sub-datasets.  The metrics assume no missing
class labels.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

from .config import Criterion
from .exceptions import UnsupportedCriterion


def _counts(part) -> np.ndarray:
    if hasattr(part, "class_counts"):
        return part.class_counts()
    return np.asarray(part, dtype=float)


def entropy(part) -> float:
    """Shannon entropy (base 2) of the class distribution; ``0`` when empty."""
    dist = _counts(part)
    tot = dist.sum()
    if tot <= 0:
        return 0.0
    p = dist[dist > 0] / tot
    return float(-np.sum(p * np.log2(p)))


def info_gain(parent, children: Sequence) -> float:
    parent = _counts(parent)
    n = parent.sum()
    gain = entropy(parent)
    if n <= 0:
        return gain
    for child in children:
        c = _counts(child)
        if c.sum() <= 0:
            continue
        gain -= c.sum() / n * entropy(c)
    return float(gain)


def split_info(parent, children: Sequence) -> float:
    n = _counts(parent).sum()
    if n <= 0:
        return 0.0
    w = [c.sum() / n for c in map(_counts, children) if c.sum() > 0]
    return float(-sum(wi * np.log2(wi) for wi in w))


def gain_ratio(parent, children: Sequence) -> float:
    """Information gain over split information.

    Defined as ``0`` when the split information is ``0``, which is the case
    for any split with a single non-empty branch.
    """
    s = split_info(parent, children)
    return float(info_gain(parent, children) / s) if s != 0 else 0.0


def gini_impurity(part) -> float:
    """``1 - sum(p_c ** 2)``; ``0`` for an empty partition."""
    dist = _counts(part)
    tot = dist.sum()
    if tot <= 0:
        return 0.0
    p = dist / tot
    return float(1.0 - np.sum(p * p))


def gini_reduction(parent, children: Sequence) -> float:
    parent = _counts(parent)
    n = parent.sum()
    gini = gini_impurity(parent)
    if n <= 0:
        return gini
    for child in children:
        c = _counts(child)
        gini -= c.sum() / n * gini_impurity(c)
    return float(gini)


# -----------------------------------------------------------------------------
# Criterion dispatch
# -----------------------------------------------------------------------------
def score(criterion: Criterion, parent, children: Sequence) -> float:
    """Score a partition of ``parent`` with the active criterion."""
    if criterion is Criterion.GAIN_RATIO:
        return gain_ratio(parent, children)
    if criterion is Criterion.GINI:
        return gini_reduction(parent, children)
    raise UnsupportedCriterion(f"No metric for criterion {criterion!r}")


def initial_best(criterion: Criterion) -> float:
    """Starting value of a best-score search under ``criterion``."""
    if criterion is Criterion.GAIN_RATIO:
        return 0.0
    if criterion is Criterion.GINI:
        return np.inf
    raise UnsupportedCriterion(f"No ordering for criterion {criterion!r}")


def at_least_as_good(criterion: Criterion, candidate: float, best: float) -> bool:
    """``candidate >= best`` for gain ratio, ``candidate <= best`` for Gini."""
    if criterion is Criterion.GAIN_RATIO:
        return candidate >= best
    if criterion is Criterion.GINI:
        return candidate <= best
    raise UnsupportedCriterion(f"No ordering for criterion {criterion!r}")


def best_index(criterion: Criterion, scores: Sequence[float]) -> int:
    """Position of the best score; the first one wins ties."""
    scores = np.asarray(scores, dtype=float)
    if criterion is Criterion.GAIN_RATIO:
        return int(np.argmax(scores))
    if criterion is Criterion.GINI:
        return int(np.argmin(scores))
    raise UnsupportedCriterion(f"No ordering for criterion {criterion!r}")
