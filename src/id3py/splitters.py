# id3py/splitters.py
"""
id3py.splitters
===============

Split generators.  Each one takes a dataset and a feature and returns a
:class:`Split`: the ordered branch datasets plus the :class:`SplitRule` needed
to send a new instance down the same branch later.

Four strategies are available, chosen by the split style and the feature kind:

- nominal multi-way: one branch per value code;
- nominal binary: the best two-group partition of the value codes;
- numeric multi-way: ``max(2, floor(log2(N)))`` equal-width bins;
- numeric binary: the best ``x <= v`` threshold over the observed values.

Instances missing the feature value are routed as follows during training:
numeric multi-way drops them, both binary styles send them to branch 1 and
nominal multi-way sends them to branch 0.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from . import impurity
from .config import Criterion, TreeConfig
from .dataset import Dataset, FeatureSpec
from .subsets import best_bipartition


class SplitKind(str, Enum):
    NOMINAL_MULTIWAY = "nominal_multiway"
    NOMINAL_BINARY = "nominal_binary"
    NUMERIC_MULTIWAY = "numeric_multiway"
    NUMERIC_BINARY = "numeric_binary"


@dataclass(frozen=True)
class SplitRule:
    """Routing data of a split, kept by internal nodes after training.

    ``thresholds`` holds the single threshold of a numeric binary split or
    the ascending bin upper bounds of a numeric multi-way split; ``group``
    holds the value codes sent to branch 0 by a nominal binary split.
    """
    feature: int
    kind: SplitKind
    n_branches: int
    thresholds: tuple = ()
    group: frozenset = field(default_factory=frozenset)

    def branch_for(self, value: float) -> int | None:
        """Branch index for a known (non-missing) value, ``None`` if no branch fits."""
        if self.kind is SplitKind.NUMERIC_BINARY:
            return 0 if value <= self.thresholds[0] else 1
        if self.kind is SplitKind.NUMERIC_MULTIWAY:
            idx = int(np.searchsorted(self.thresholds, value, side="left"))
            return min(idx, self.n_branches - 1)
        if self.kind is SplitKind.NOMINAL_BINARY:
            return 0 if int(value) in self.group else 1
        code = int(value)
        return code if 0 <= code < self.n_branches else None

    def describe(self, branch: int, name: str, values: tuple = ()) -> str:
        """Condition satisfied by the instances of ``branch``."""
        def label(c):
            return str(values[c]) if c < len(values) else str(c)

        if self.kind is SplitKind.NUMERIC_BINARY:
            op = "<=" if branch == 0 else ">"
            return f"{name} {op} {self.thresholds[0]:.6g}"
        if self.kind is SplitKind.NUMERIC_MULTIWAY:
            if branch == self.n_branches - 1:
                return f"{name} > {self.thresholds[branch - 1]:.6g}"
            if branch == 0:
                return f"{name} <= {self.thresholds[0]:.6g}"
            return f"{self.thresholds[branch - 1]:.6g} < {name} <= {self.thresholds[branch]:.6g}"
        if self.kind is SplitKind.NOMINAL_BINARY:
            S = "{" + ", ".join(label(c) for c in sorted(self.group)) + "}"
            return f"{name} {'IN' if branch == 0 else 'NOT IN'} {S}"
        return f"{name} = {label(branch)}"


@dataclass(frozen=True, eq=False)
class Split:
    rule: SplitRule
    branches: tuple

    @property
    def sizes(self) -> list[int]:
        return [len(b) for b in self.branches]

    def passes_min_leaf(self, min_leaf_size: float) -> bool:
        """True when there are at least two branches and every branch holds
        strictly more than ``min_leaf_size`` instances."""
        # a single branch would hand the whole dataset to its child again
        return len(self.branches) >= 2 and all(len(b) > min_leaf_size for b in self.branches)


# -----------------------------------------------------------------------------
# Generators
# -----------------------------------------------------------------------------
def nominal_multiway(data: Dataset, feature: FeatureSpec) -> Split:
    m = feature.n_values
    rule = SplitRule(feature.index, SplitKind.NOMINAL_MULTIWAY, m)
    if m == 0:
        return Split(rule, ())
    codes = data.column(feature.index)
    codes = np.where(data.missing_mask(feature.index), 0.0, codes)
    return Split(rule, tuple(data.subset(codes == k) for k in range(m)))


def nominal_binary(data: Dataset, feature: FeatureSpec, criterion: Criterion) -> Split:
    codes = data.column(feature.index)
    known = ~data.missing_mask(feature.index)
    counts = np.zeros((feature.n_values, data.n_classes), dtype=float)
    np.add.at(counts, (codes[known].astype(int), data.y[known].astype(int)), 1.0)
    missing = data.subset(~known).class_counts()
    best = best_bipartition(counts, criterion, missing)

    in_group = np.isin(codes, list(best.group))
    rule = SplitRule(feature.index, SplitKind.NOMINAL_BINARY, 2, group=best.group)
    return Split(rule, (data.subset(in_group), data.subset(~in_group)))


def _bin_count(n_instances: int) -> int:
    k = int(math.log2(n_instances)) if n_instances > 0 else 0
    return max(2, k)


def numeric_multiway(data: Dataset, feature: FeatureSpec) -> Split:
    k = _bin_count(len(data))
    vals = data.column(feature.index)
    known = ~data.missing_mask(feature.index)
    if not known.any():
        rule = SplitRule(feature.index, SplitKind.NUMERIC_MULTIWAY, k, thresholds=(np.nan,) * k)
        return Split(rule, tuple(data.empty_like() for _ in range(k)))

    lo, hi = float(vals[known].min()), float(vals[known].max())
    width = (hi - lo) / k
    thresholds = tuple(lo + i * width for i in range(1, k + 1))
    rule = SplitRule(feature.index, SplitKind.NUMERIC_MULTIWAY, k, thresholds=thresholds)

    idx = np.full(len(vals), -1)
    idx[known] = np.minimum(np.searchsorted(thresholds, vals[known], side="left"), k - 1)
    return Split(rule, tuple(data.subset(idx == b) for b in range(k)))


def numeric_binary(data: Dataset, feature: FeatureSpec, criterion: Criterion) -> Split:
    vals = data.column(feature.index)
    known = ~data.missing_mask(feature.index)
    distinct = data.distinct_values(feature.index)

    if distinct.size <= 1:
        thr = float(distinct[0]) if distinct.size else np.nan
        rule = SplitRule(feature.index, SplitKind.NUMERIC_BINARY, 2, thresholds=(thr,))
        return Split(rule, (data, data.empty_like()))

    # cumulative class counts over the sorted known values
    order = np.argsort(vals[known], kind="mergesort")
    v = vals[known][order]
    yk = data.y[known][order].astype(int)
    M = np.zeros((v.shape[0], data.n_classes), dtype=float)
    M[np.arange(v.shape[0]), yk] = 1.0
    SW = M.cumsum(axis=0)
    parent = data.class_counts()
    last = np.searchsorted(v, distinct, side="right") - 1

    scores = []
    for i in last:
        left = SW[i]
        scores.append(impurity.score(criterion, parent, [left, parent - left]))
    thr = float(distinct[impurity.best_index(criterion, scores)])

    left_mask = known & (vals <= thr)
    rule = SplitRule(feature.index, SplitKind.NUMERIC_BINARY, 2, thresholds=(thr,))
    return Split(rule, (data.subset(left_mask), data.subset(~left_mask)))


def generate_split(data: Dataset, feature: FeatureSpec, config: TreeConfig) -> Split:
    """Split ``data`` on ``feature`` with the strategy selected by ``config``.

    A binary split of fewer than two instances is not attempted: the result
    has no branches.
    """
    if config.binary:
        if len(data) < 2:
            kind = SplitKind.NOMINAL_BINARY if feature.is_nominal else SplitKind.NUMERIC_BINARY
            return Split(SplitRule(feature.index, kind, 0), ())
        if feature.is_nominal:
            return nominal_binary(data, feature, config.criterion)
        return numeric_binary(data, feature, config.criterion)
    if feature.is_nominal:
        return nominal_multiway(data, feature)
    return numeric_multiway(data, feature)
