# id3py/dataset.py
"""
id3py.dataset
=============

Columnar view over labelled instances used by the tree induction code.

Feature values live in a single float matrix: numeric features hold their
value, nominal features hold a category code ``0 .. n_values - 1``.  ``NaN``
marks a missing value in either kind, and in the class vector.  Datasets are
never modified in place; splitting produces new views with :meth:`Dataset.subset`.

The ``encode_*`` helpers turn raw arrays (object or numeric, ``None``/``NaN``
for missing values) into that representation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np

NOMINAL = "nominal"
NUMERIC = "numeric"


def _isnan_scalar(v) -> bool:
    return (v is None) or (isinstance(v, float) and np.isnan(v))


@dataclass(frozen=True)
class FeatureSpec:
    """Descriptor of one feature column.

    ``values`` holds the category labels of a nominal feature, in code order.
    """
    index: int
    name: str
    kind: str = NUMERIC
    values: tuple = field(default=())

    def __post_init__(self):
        if self.kind not in (NOMINAL, NUMERIC):
            raise ValueError(f"Unknown feature kind {self.kind!r}")

    @property
    def is_nominal(self) -> bool:
        return self.kind == NOMINAL

    @property
    def n_values(self) -> int:
        return len(self.values)


class Dataset:
    """Immutable set of instances sharing one feature/class schema.

    Parameters
    ----------
    X : array-like of shape (n_instances, n_features)
        Feature values and nominal codes, ``NaN`` for missing.
    y : array-like of shape (n_instances,)
        Class codes in ``0 .. n_classes - 1``, ``NaN`` for missing.
    features : sequence of FeatureSpec
        One descriptor per column of ``X``.
    n_classes : int
        Size of the class value set.
    """

    def __init__(self, X, y, features: Sequence[FeatureSpec], n_classes: int):
        self.features = tuple(features)
        X = np.asarray(X, dtype=float)
        if X.size == 0:
            X = X.reshape(0, len(self.features))
        if X.ndim != 2 or X.shape[1] != len(self.features):
            raise ValueError(f"X must have shape (n, {len(self.features)}), got {X.shape}")
        y = np.asarray(y, dtype=float).reshape(-1)
        if len(y) != X.shape[0]:
            raise ValueError("y must have the same length as X")
        self.X = X
        self.y = y
        self.n_classes = int(n_classes)

    def __len__(self) -> int:
        return self.X.shape[0]

    def __repr__(self) -> str:
        return (f"Dataset(n_instances={len(self)}, n_features={self.n_features}, "
                f"n_classes={self.n_classes})")

    @property
    def n_instances(self) -> int:
        return self.X.shape[0]

    @property
    def n_features(self) -> int:
        return len(self.features)

    def column(self, j: int) -> np.ndarray:
        return self.X[:, j]

    def missing_mask(self, j: int) -> np.ndarray:
        return np.isnan(self.X[:, j])

    def class_counts(self) -> np.ndarray:
        """Number of instances per class code, ignoring missing labels."""
        known = self.y[~np.isnan(self.y)].astype(int)
        return np.bincount(known, minlength=self.n_classes).astype(float)

    def subset(self, rows) -> "Dataset":
        """Return the instances selected by a boolean mask or index array."""
        rows = np.asarray(rows)
        if rows.dtype != bool:
            rows = rows.astype(int)
        return Dataset(self.X[rows], self.y[rows], self.features, self.n_classes)

    def empty_like(self) -> "Dataset":
        return self.subset(np.zeros(0, dtype=int))

    def drop_missing_class(self) -> "Dataset":
        return self.subset(~np.isnan(self.y))

    def distinct_values(self, j: int) -> np.ndarray:
        """Sorted distinct non-missing values of feature ``j``."""
        col = self.X[:, j]
        return np.unique(col[~np.isnan(col)])

    def mean_or_mode(self, j: int) -> float:
        """Mean of a numeric feature or most frequent code of a nominal one.

        Missing values are ignored; the lowest code wins ties.  ``NaN`` if the
        column holds no known value.
        """
        col = self.X[:, j]
        known = col[~np.isnan(col)]
        if known.size == 0:
            return float("nan")
        if self.features[j].is_nominal:
            counts = np.bincount(known.astype(int))
            return float(np.argmax(counts))
        return float(known.mean())

    def majority_class(self) -> int | None:
        if len(self) == 0 or self.n_classes == 0:
            return None
        return int(np.argmax(self.class_counts()))


# -----------------------------------------------------------------------------
# Encoding of raw arrays
# -----------------------------------------------------------------------------
def resolve_categorical(categorical_features, feature_names, n_features: int) -> set[int]:
    """Map ``categorical_features`` given as indices or names to column indices."""
    if not categorical_features:
        return set()
    cf = list(categorical_features)
    if isinstance(cf[0], str):
        if feature_names is None:
            raise ValueError("feature_names must be provided when using categorical_features by name")
        name_to_idx = {n: i for i, n in enumerate(feature_names)}
        try:
            idx = {name_to_idx[n] for n in cf}
        except KeyError as e:
            raise ValueError(f"Unknown categorical feature {e.args[0]!r}") from None
    else:
        idx = {int(i) for i in cf}
    bad = [i for i in idx if not 0 <= i < n_features]
    if bad:
        raise ValueError(f"categorical feature index out of range: {bad}")
    return idx


def as_2d(X, n_features: int = 0) -> np.ndarray:
    """Sample matrix view of ``X``.  A 1-D array is a single feature column;
    empty input becomes a ``(0, n_features)`` matrix."""
    X = np.asarray(X)
    if X.size == 0 and X.ndim <= 1:
        return X.reshape(0, n_features)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    if X.ndim != 2:
        raise ValueError(f"Expected a 2-D array, got shape {X.shape}")
    return X


def _numeric_column(col: np.ndarray) -> np.ndarray:
    if col.dtype.kind in "fiub":
        return col.astype(float)
    return np.array([np.nan if _isnan_scalar(v) else float(v) for v in col], dtype=float)


def _nominal_column(col: np.ndarray, values: Iterable) -> np.ndarray:
    lookup = {v: i for i, v in enumerate(values)}
    return np.array([np.nan if _isnan_scalar(v) else lookup.get(v, np.nan) for v in col],
                    dtype=float)


def encode_features(X, categorical: set[int] | None = None,
                    feature_names: Sequence[str] | None = None):
    """Encode a raw training matrix.

    Returns
    -------
    codes : ndarray of shape (n_samples, n_features)
    features : list[FeatureSpec]
    """
    X = as_2d(X)
    n_features = X.shape[1]
    categorical = categorical or set()
    names = list(feature_names) if feature_names is not None else [f"f{i}" for i in range(n_features)]
    codes = np.empty(X.shape, dtype=float)
    features = []
    for j in range(n_features):
        col = X[:, j]
        if j in categorical:
            known = [v for v in col if not _isnan_scalar(v)]
            values = tuple(np.unique(np.asarray(known, dtype=object)).tolist()) if known else ()
            codes[:, j] = _nominal_column(col, values)
            features.append(FeatureSpec(j, names[j], NOMINAL, values))
        else:
            codes[:, j] = _numeric_column(col)
            features.append(FeatureSpec(j, names[j], NUMERIC))
    return codes, features


def encode_rows(X, features: Sequence[FeatureSpec]) -> np.ndarray:
    """Encode rows for prediction; unseen categories become missing."""
    X = as_2d(X, len(features))
    if X.shape[1] != len(features):
        raise ValueError(f"X has {X.shape[1]} features, expected {len(features)}")
    codes = np.empty((X.shape[0], len(features)), dtype=float)
    for spec in features:
        col = X[:, spec.index]
        codes[:, spec.index] = (_nominal_column(col, spec.values) if spec.is_nominal
                                else _numeric_column(col))
    return codes


def encode_labels(y):
    """Encode class labels.

    Returns
    -------
    codes : ndarray of shape (n_samples,)
        Class codes as floats, ``NaN`` where the label is missing.
    classes : ndarray
        Sorted distinct known labels; ``classes[code]`` recovers a label.
    """
    y = np.asarray(y)
    if y.ndim != 1:
        y = y.reshape(-1)
    if y.dtype.kind in "iub":
        missing = np.zeros(len(y), dtype=bool)
    elif y.dtype.kind == "f":
        missing = np.isnan(y)
    else:
        missing = np.array([_isnan_scalar(v) for v in y], dtype=bool)
    classes = np.unique(y[~missing])
    lookup = {c: i for i, c in enumerate(classes.tolist())}
    codes = np.full(len(y), np.nan)
    for i, v in enumerate(y):
        if not missing[i]:
            codes[i] = lookup[v.item() if isinstance(v, np.generic) else v]
    return codes, classes
