# -*- coding: utf-8 -*-
"""
id3py.tree
==========

Decision tree induction with a choice of attribute-quality criterion (gain
ratio or Gini reduction) and split style (binary or multi-way), for nominal
and numeric features.

The module has three layers:

- the node types :class:`Leaf` and :class:`InternalNode` and the recursive
  builder :func:`build`, which returns a :class:`DecisionTree`;
- prediction on a :class:`DecisionTree` (:func:`classify`,
  :func:`class_distribution`), which fills a missing split value with the
  training mean or mode on a copy of the instance;
- :class:`ID3Classifier`, a scikit-learn style estimator that encodes raw
  arrays, builds the tree and maps predictions back to the original labels.

Pruning is not performed.  A branch that receives fewer training instances
than ``min_leaf_size`` is left without a subtree, and an instance routed to it
at prediction time raises :class:`~id3py.exceptions.UnroutableInstance`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin

from . import impurity
from .config import SMALL, Criterion, TreeConfig
from .dataset import (Dataset, FeatureSpec, as_2d, encode_features,
                      encode_labels, encode_rows, resolve_categorical)
from .exceptions import EmptyTrainingSet, InvalidConfiguration, UnroutableInstance
from .splitters import SplitRule, generate_split

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------
@dataclass(frozen=True, eq=False)
class Leaf:
    """Terminal node.

    Attributes
    ----------
    data : Dataset
        Training instances that reached the leaf.
    distribution : ndarray of shape (n_classes,)
        Normalised class counts; all zeros for a leaf without instances.
    majority_class : int or None
        Most frequent class code, ``None`` for a leaf without instances.
    """
    data: Dataset
    distribution: np.ndarray
    majority_class: int | None

    is_leaf = True
    tree_size = 1
    n_leaves = 1
    n_rules = 0

    @property
    def n_errors(self) -> int:
        if self.majority_class is None:
            return 0
        return int(len(self.data) - self.data.class_counts()[self.majority_class])


@dataclass(frozen=True, eq=False)
class InternalNode:
    """Split node.  ``children[i]`` is ``None`` when branch ``i`` received too
    few training instances to be grown."""
    rule: SplitRule
    children: tuple

    is_leaf = False

    @property
    def feature(self) -> int:
        return self.rule.feature

    # absent children count as one leaf each
    @property
    def tree_size(self) -> int:
        return 1 + sum(1 if ch is None else ch.tree_size for ch in self.children)

    @property
    def n_leaves(self) -> int:
        return sum(1 if ch is None else ch.n_leaves for ch in self.children)

    @property
    def n_rules(self) -> int:
        return 1 + sum(1 if ch is None else ch.n_rules for ch in self.children)


def make_leaf(data: Dataset) -> Leaf:
    counts = data.class_counts()
    tot = counts.sum()
    if tot <= 0:
        return Leaf(data, np.zeros(data.n_classes, dtype=float), None)
    return Leaf(data, counts / tot, int(np.argmax(counts)))


# -----------------------------------------------------------------------------
# Trained tree and prediction
# -----------------------------------------------------------------------------
@dataclass(frozen=True, eq=False)
class Route:
    """Result of walking one instance down the tree.

    ``instance`` is the copy that was routed; ``substituted`` maps each feature
    whose missing value was filled in to the value used.
    """
    leaf: Leaf
    instance: np.ndarray
    substituted: dict = field(default_factory=dict)


@dataclass(frozen=True, eq=False)
class DecisionTree:
    """Result of :func:`build`.

    ``fill_values[j]`` is the training mean (numeric) or mode (nominal) of
    feature ``j``, used for instances missing the value at prediction time.
    ``majority_class`` is the most frequent class of the whole training set.
    """
    root: Leaf | InternalNode
    config: TreeConfig
    features: tuple
    n_classes: int
    majority_class: int | None
    fill_values: tuple

    @property
    def tree_size(self) -> int:
        return self.root.tree_size

    @property
    def n_leaves(self) -> int:
        return self.root.n_leaves

    @property
    def n_rules(self) -> int:
        return self.root.n_rules

    def route(self, instance) -> Route:
        """Walk ``instance`` (encoded feature vector, ``NaN`` = missing) to a leaf.

        Raises
        ------
        UnroutableInstance
            If the instance reaches a branch without a subtree, or a value that
            no branch accepts.
        """
        x = np.array(instance, dtype=float).reshape(-1)
        if x.shape[0] != len(self.features):
            raise ValueError(f"instance has {x.shape[0]} values, expected {len(self.features)}")
        substituted = {}
        node = self.root
        while not node.is_leaf:
            j = node.feature
            if np.isnan(x[j]):
                x[j] = self.fill_values[j]
                substituted[j] = x[j]
            branch = None if np.isnan(x[j]) else node.rule.branch_for(x[j])
            if branch is None:
                raise UnroutableInstance(
                    f"No branch of feature {j} accepts value {x[j]!r}", feature_index=j)
            child = node.children[branch]
            if child is None:
                raise UnroutableInstance(
                    f"Branch {branch} of feature {j} received no training subtree",
                    feature_index=j, branch=branch)
            node = child
        return Route(node, x, substituted)

    def classify(self, instance) -> int | None:
        return self.route(instance).leaf.majority_class

    def class_distribution(self, instance) -> np.ndarray:
        return self.route(instance).leaf.distribution.copy()


def classify(tree: DecisionTree, instance) -> int | None:
    """Majority class code of the leaf reached by ``instance``.

    ``None`` when that leaf holds no training instances.
    """
    return tree.classify(instance)


def class_distribution(tree: DecisionTree, instance) -> np.ndarray:
    """Class probability estimates of the leaf reached by ``instance``."""
    return tree.class_distribution(instance)


# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------
def build(data: Dataset, config: TreeConfig | None = None) -> DecisionTree:
    """Induce a decision tree from ``data``.

    Instances with a missing class are removed once, before construction.

    Raises
    ------
    EmptyTrainingSet
        If no instance remains and the dataset has no class values at all.
        Zero instances with a class schema give a root leaf without instances.
    InvalidConfiguration
        If ``config`` is not a :class:`TreeConfig`.
    """
    if config is None:
        config = TreeConfig()
    if not isinstance(config, TreeConfig):
        raise InvalidConfiguration(f"config must be a TreeConfig, got {type(config).__name__}")
    data = data.drop_missing_class()
    if len(data) == 0 and data.n_classes == 0:
        raise EmptyTrainingSet("Cannot build a tree from zero instances without class values")

    root = _make_tree(data, config, depth=0)
    tree = DecisionTree(
        root=root,
        config=config,
        features=data.features,
        n_classes=data.n_classes,
        majority_class=data.majority_class(),
        fill_values=tuple(data.mean_or_mode(j) for j in range(data.n_features)),
    )
    logger.debug("Built tree: size=%d leaves=%d", tree.tree_size, tree.n_leaves)
    return tree


def _make_tree(data: Dataset, config: TreeConfig, depth: int):
    if len(data) == 0 or data.n_features == 0:
        return make_leaf(data)

    criterion = config.criterion
    splits = [generate_split(data, f, config) for f in data.features]
    scores = [impurity.score(criterion, data, s.branches) for s in splits]
    best = impurity.best_index(criterion, scores)
    split = splits[best]
    logger.debug("depth=%d n=%d scores=%s choosing feature %d (%s)", depth, len(data),
                 np.round(scores, 6).tolist(), best, data.features[best].name)

    fits = split.passes_min_leaf(config.min_leaf_size)
    # Gini stops on the size check alone; gain ratio also needs a zero score
    if (abs(scores[best]) < SMALL and not fits) or (criterion is Criterion.GINI and not fits):
        logger.debug("depth=%d leaf over %d instances", depth, len(data))
        return make_leaf(data)

    children = tuple(
        _make_tree(branch, config, depth + 1) if len(branch) >= config.min_leaf_size else None
        for branch in split.branches
    )
    return InternalNode(split.rule, children)


# -----------------------------------------------------------------------------
# Text export
# -----------------------------------------------------------------------------
def _feature_name(features, j, fn=None) -> str:
    if fn is not None and 0 <= j < len(fn):
        return str(fn[j])
    return features[j].name


def _class_name(c, cn=None) -> str:
    return str(cn[c]) if cn is not None else str(c)


def export_text(tree: DecisionTree, feature_names=None, class_names=None) -> str:
    """Indented text rendering of ``tree``.

    Each branch gets one line, indented with ``|  `` per level.  Leaves read
    ``: <class> (<instances>)`` or ``: <class> (<instances>/<errors>)``; a leaf
    without instances or a branch without subtree reads ``: null``.
    """
    lines: list[str] = []

    def leaf_text(leaf: Leaf) -> str:
        if leaf.majority_class is None:
            return ": null"
        info = f"({float(len(leaf.data))}"
        if leaf.n_errors:
            info += f"/{float(leaf.n_errors)}"
        return f": {_class_name(leaf.majority_class, class_names)} {info})"

    def walk(node, level):
        spec: FeatureSpec = tree.features[node.feature]
        name = _feature_name(tree.features, node.feature, feature_names)
        for i, child in enumerate(node.children):
            text = "|  " * level + node.rule.describe(i, name, spec.values)
            if child is None:
                lines.append(text + ": null")
            elif child.is_leaf:
                lines.append(text + leaf_text(child))
            else:
                lines.append(text)
                walk(child, level + 1)

    if tree.root.is_leaf:
        lines.append(leaf_text(tree.root))
    else:
        walk(tree.root, 0)
    return ("ID3 decision tree\n-----------------\n" + "\n".join(lines)
            + f"\n\nSize of the tree: {tree.tree_size}\n\nNumber of leaves: {tree.n_leaves}")


# -----------------------------------------------------------------------------
# Estimator
# -----------------------------------------------------------------------------
class ID3Classifier(ClassifierMixin, BaseEstimator):
    """
    Decision tree classifier in the ID3 family.

    At each node every feature is split (binary or multi-way) and scored with
    the selected criterion; the best feature is used and the children are
    grown recursively.  No pruning is applied.

    Parameters
    ----------
    criterion : {"gain_ratio", "gini"}, default="gain_ratio"
        Attribute-quality criterion.  The feature with the *highest* gain ratio
        is chosen; with ``"gini"`` the feature with the *lowest* Gini
        reduction is chosen.
    binary_splits : bool, default=False
        Use two-way splits (a threshold for numeric features, a best grouping
        of the categories for categorical ones) instead of one branch per
        category / equal-width bin.
    min_leaf_size : float, default=2.0
        A split is kept only if every branch receives strictly more training
        instances than this.  Branches with fewer instances get no subtree.
    feature_names : list[str] or None, default=None
        Names used by the text and rule exports.
    categorical_features : list[int|str] or None, default=None
        Indices or names of categorical features.  All other features are
        treated as numeric.
    verbose : int, default=0
        If positive, log a fit summary at INFO level.

    Notes
    -----
    Missing values (``None`` or ``numpy.nan``) are accepted in ``X``.  Rows
    with a missing label are ignored during ``fit``.  At prediction time a
    missing (or unseen categorical) value is replaced by the training mean or
    mode of its feature.  A 1-D ``X`` is read as a single feature column, in
    ``fit`` and at prediction time alike.
    """

    def __init__(
        self,
        *,
        criterion: str = "gain_ratio",
        binary_splits: bool = False,
        min_leaf_size: float = 2.0,
        feature_names: list[str] | None = None,
        categorical_features: list[int | str] | None = None,
        verbose: int = 0,
    ):
        self.criterion = criterion
        self.binary_splits = binary_splits
        self.min_leaf_size = min_leaf_size
        self.feature_names = feature_names
        self.categorical_features = categorical_features
        self.verbose = verbose

    def fit(self, X, y, feature_names=None):
        """Build the tree from the training set ``(X, y)``.

        Raises
        ------
        InvalidConfiguration
            For an unsupported ``criterion`` or an invalid ``min_leaf_size``.
        EmptyTrainingSet
            If ``y`` holds no known label.
        """
        config = TreeConfig.create(
            criterion=self.criterion,
            split_style="binary" if self.binary_splits else "multiway",
            min_leaf_size=self.min_leaf_size,
        )
        X = as_2d(X)
        y = np.asarray(y)
        if len(y) != X.shape[0]:
            raise ValueError("y must have the same length as X")

        n_features = X.shape[1]
        names = feature_names if feature_names is not None else self.feature_names
        if names is not None and len(names) != n_features:
            raise ValueError("feature_names length must match X.shape[1]")
        self.feature_names_ = list(names) if names is not None else [f"f{i}" for i in range(n_features)]
        cats = resolve_categorical(self.categorical_features, self.feature_names_, n_features)

        codes, features = encode_features(X, cats, self.feature_names_)
        y_codes, self.classes_ = encode_labels(y)
        self.n_features_in_ = n_features
        self.tree_ = build(Dataset(codes, y_codes, features, len(self.classes_)), config)
        if self.verbose:
            logger.info("Fitted %s: %d instances, %d features, tree size %d, %d leaves",
                        type(self).__name__, int((~np.isnan(y_codes)).sum()), n_features,
                        self.tree_.tree_size, self.tree_.n_leaves)
        return self

    def _check_fitted(self):
        if getattr(self, "tree_", None) is None:
            raise ValueError("Estimator not fitted. Call fit(...) first.")

    def _encode(self, X) -> np.ndarray:
        return encode_rows(np.asarray(X, dtype=object), self.tree_.features)

    def predict(self, X):
        """
        Predict class labels for the provided samples.

        Raises
        ------
        ValueError
            If the estimator has not been fitted.
        UnroutableInstance
            If a sample reaches a branch without a subtree or a leaf without
            training instances.
        """
        self._check_fitted()
        out = []
        for x in self._encode(X):
            code = self.tree_.classify(x)
            if code is None:
                raise UnroutableInstance("Instance reached a leaf without training instances")
            out.append(code)
        return self.classes_[np.asarray(out, dtype=int)]

    def predict_proba(self, X):
        """Class distribution of the leaf reached by each sample, ordered like
        :attr:`classes_`."""
        self._check_fitted()
        rows = [self.tree_.class_distribution(x) for x in self._encode(X)]
        return np.asarray(rows, dtype=float).reshape(len(rows), len(self.classes_))

    def predict_rule(self, X, feature_names=None):
        """Conjunction of branch conditions followed by each sample."""
        self._check_fitted()
        fn = feature_names if feature_names is not None else self.feature_names_
        return [self._trace_rule(x, fn) for x in self._encode(X)]

    def _trace_rule(self, x, fn):
        route = self.tree_.route(x)
        parts, node = [], self.tree_.root
        filled = route.instance
        while not node.is_leaf:
            j = node.feature
            branch = node.rule.branch_for(filled[j])
            spec = self.tree_.features[j]
            parts.append(node.rule.describe(branch, _feature_name(self.tree_.features, j, fn), spec.values))
            node = node.children[branch]
        return " AND ".join(parts) if parts else "<root>"

    def export_rules(self, *, feature_names=None, class_names=None):
        """All root-to-leaf rules as ``<antecedent> => <class>`` strings.

        Branches without a subtree and leaves without instances are skipped.
        """
        self._check_fitted()
        fn = feature_names if feature_names is not None else self.feature_names_
        cn = class_names if class_names is not None else [str(c) for c in self.classes_]
        rules: list[str] = []
        self._collect_rules(self.tree_.root, [], rules, fn, cn)
        return rules

    def _collect_rules(self, node, parts, rules, fn, cn):
        if node.is_leaf:
            if node.majority_class is not None:
                body = " AND ".join(parts) if parts else "<root>"
                rules.append(f"{body} => {_class_name(node.majority_class, cn)}")
            return
        spec = self.tree_.features[node.feature]
        name = _feature_name(self.tree_.features, node.feature, fn)
        for i, child in enumerate(node.children):
            if child is not None:
                self._collect_rules(child, parts + [node.rule.describe(i, name, spec.values)],
                                    rules, fn, cn)

    def export_text(self, feature_names=None, class_names=None) -> str:
        self._check_fitted()
        fn = feature_names if feature_names is not None else self.feature_names_
        cn = class_names if class_names is not None else [str(c) for c in self.classes_]
        return export_text(self.tree_, fn, cn)

    def print_tree(self, feature_names=None, class_names=None):
        """Pretty-print the decision tree to ``stdout``."""
        print(self.export_text(feature_names, class_names))

    def measures(self) -> dict:
        """Tree size, number of leaves and number of rules."""
        self._check_fitted()
        return {
            "tree_size": self.tree_.tree_size,
            "n_leaves": self.tree_.n_leaves,
            "n_rules": self.tree_.n_rules,
        }
