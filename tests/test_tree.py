import logging

import numpy as np
import pytest

from id3py import (Criterion, Dataset, EmptyTrainingSet, FeatureSpec,
                   InvalidConfiguration, SplitStyle, TreeConfig,
                   UnroutableInstance, build, class_distribution, classify,
                   export_text)
from id3py.tree import InternalNode, Leaf

nan = np.nan


def _binary_feature_dataset():
    """A perfectly predicts Y: A=0 -> 0 (x2), A=1 -> 1 (x2)."""
    X = np.array([[0], [0], [1], [1]], dtype=float)
    y = np.array([0, 0, 1, 1], dtype=float)
    return Dataset(X, y, [FeatureSpec(0, "A", "nominal", ("a0", "a1"))], 2)


def _numeric_dataset():
    X = np.array([[1], [2], [3], [4], [5]], dtype=float)
    y = np.array([0, 0, 0, 1, 1], dtype=float)
    return Dataset(X, y, [FeatureSpec(0, "x")], 2)


def _two_feature_dataset():
    """A separates the classes, B carries no information about them."""
    X = np.array([[0, 0], [0, 1], [1, 0], [1, 1]], dtype=float)
    y = np.array([0, 0, 1, 1], dtype=float)
    features = [FeatureSpec(0, "A", "nominal", ("a0", "a1")),
                FeatureSpec(1, "B", "nominal", ("b0", "b1"))]
    return Dataset(X, y, features, 2)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------
def test_config_defaults_and_coercion():
    cfg = TreeConfig.create()
    assert cfg.criterion is Criterion.GAIN_RATIO
    assert cfg.split_style is SplitStyle.MULTIWAY
    assert cfg.min_leaf_size == 2.0
    cfg = TreeConfig.create("GINI", "Binary", 3)
    assert cfg.criterion is Criterion.GINI
    assert cfg.binary
    assert cfg.min_leaf_size == 3.0


@pytest.mark.parametrize("kwargs", [
    {"criterion": "entropy"},
    {"split_style": "ternary"},
    {"min_leaf_size": -1},
    {"min_leaf_size": "two"},
    {"min_leaf_size": float("nan")},
    {"min_leaf_size": True},
])
def test_config_rejects_invalid_values(kwargs):
    with pytest.raises(InvalidConfiguration):
        TreeConfig.create(**kwargs)


def test_build_rejects_non_config():
    with pytest.raises(InvalidConfiguration):
        build(_numeric_dataset(), {"criterion": "gini"})


# -----------------------------------------------------------------------------
# End-to-end scenarios
# -----------------------------------------------------------------------------
def test_perfectly_correlated_nominal_feature():
    cfg = TreeConfig.create("gain_ratio", "multiway", 1)
    tree = build(_binary_feature_dataset(), cfg)
    root = tree.root
    assert isinstance(root, InternalNode)
    assert root.feature == 0
    assert len(root.children) == 2
    assert all(isinstance(ch, Leaf) for ch in root.children)
    assert np.allclose(root.children[0].distribution, [1.0, 0.0])
    assert np.allclose(root.children[1].distribution, [0.0, 1.0])
    assert classify(tree, [0]) == 0
    assert classify(tree, [1]) == 1


def test_numeric_binary_threshold_at_three():
    cfg = TreeConfig.create("gain_ratio", "binary", 1)
    tree = build(_numeric_dataset(), cfg)
    assert isinstance(tree.root, InternalNode)
    assert tree.root.rule.thresholds == (3.0,)
    left, right = tree.root.children
    assert left.majority_class == 0 and np.allclose(left.distribution, [1, 0])
    assert right.majority_class == 1 and np.allclose(right.distribution, [0, 1])
    assert classify(tree, [2.5]) == 0
    assert classify(tree, [4.5]) == 1


def test_constant_feature_never_beats_informative_one():
    X = np.array([[7, 0], [7, 0], [7, 1], [7, 1]], dtype=float)
    y = np.array([0, 0, 1, 1], dtype=float)
    features = [FeatureSpec(0, "const"), FeatureSpec(1, "A", "nominal", ("a0", "a1"))]
    tree = build(Dataset(X, y, features, 2), TreeConfig.create(min_leaf_size=1))
    assert tree.root.feature == 1


def test_training_instances_classified_correctly():
    data = _numeric_dataset()
    tree = build(data, TreeConfig.create("gain_ratio", "binary", 1))
    for x, label in zip(data.X, data.y):
        assert classify(tree, x) == label


def test_empty_dataset_gives_degenerate_leaf():
    data = Dataset(np.empty((0, 1)), np.empty(0), [FeatureSpec(0, "x")], 2)
    tree = build(data)
    assert isinstance(tree.root, Leaf)
    assert tree.root.majority_class is None
    assert not tree.root.distribution.any()
    assert tree.majority_class is None
    assert classify(tree, [1.0]) is None
    assert not class_distribution(tree, [1.0]).any()


def test_empty_dataset_without_classes_raises():
    data = Dataset(np.empty((0, 1)), np.empty(0), [FeatureSpec(0, "x")], 0)
    with pytest.raises(EmptyTrainingSet):
        build(data)


def test_missing_class_rows_are_removed():
    X = np.array([[1], [2], [3], [4]], dtype=float)
    y = np.array([0, nan, 0, 0])
    tree = build(Dataset(X, y, [FeatureSpec(0, "x")], 2), TreeConfig.create(min_leaf_size=5))
    assert isinstance(tree.root, Leaf)
    assert len(tree.root.data) == 3
    assert np.allclose(tree.root.distribution, [1.0, 0.0])


def test_build_is_deterministic():
    data = _two_feature_dataset()
    for cfg in (TreeConfig.create(min_leaf_size=1),
                TreeConfig.create("gini", "binary", 0)):
        a, b = build(data, cfg), build(data, cfg)
        assert export_text(a) == export_text(b)
        assert a.tree_size == b.tree_size
        for x in data.X:
            assert np.array_equal(class_distribution(a, x), class_distribution(b, x))


def test_single_class_with_small_leaves_stops():
    X = np.array([[1], [2], [3]], dtype=float)
    y = np.array([1, 1, 1], dtype=float)
    tree = build(Dataset(X, y, [FeatureSpec(0, "x")], 2), TreeConfig.create(min_leaf_size=2))
    assert isinstance(tree.root, Leaf)
    assert tree.root.majority_class == 1


def test_single_instance_binary_style_is_a_leaf():
    X = np.array([[4.0]])
    tree = build(Dataset(X, [1], [FeatureSpec(0, "x")], 2), TreeConfig.create(split_style="binary"))
    assert isinstance(tree.root, Leaf)
    assert classify(tree, [0.0]) == 1


# -----------------------------------------------------------------------------
# Criterion asymmetry
# -----------------------------------------------------------------------------
def test_gain_ratio_prefers_informative_feature():
    tree = build(_two_feature_dataset(), TreeConfig.create("gain_ratio", "multiway", 1))
    assert tree.root.feature == 0


def test_gini_prefers_lowest_reduction():
    tree = build(_two_feature_dataset(), TreeConfig.create("gini", "multiway", 1))
    # B reduces Gini impurity by 0, A by 0.5: the lower score wins
    assert tree.root.feature == 1


def test_gini_numeric_binary_root_is_a_leaf():
    tree = build(_numeric_dataset(), TreeConfig.create("gini", "binary", 1))
    assert isinstance(tree.root, Leaf)
    assert tree.root.majority_class == 0
    assert np.allclose(tree.root.distribution, [0.6, 0.4])


def test_gini_stops_when_leaves_too_small():
    tree = build(_binary_feature_dataset(), TreeConfig.create("gini", "multiway", 2))
    assert isinstance(tree.root, Leaf)


def test_gain_ratio_splits_despite_small_leaves_when_informative():
    tree = build(_binary_feature_dataset(), TreeConfig.create("gain_ratio", "multiway", 2))
    # score is non-zero, so the size check alone does not stop the split
    assert isinstance(tree.root, InternalNode)
    assert all(isinstance(ch, Leaf) for ch in tree.root.children)


# -----------------------------------------------------------------------------
# Prediction
# -----------------------------------------------------------------------------
def _tree_with_absent_branch():
    X = np.array([[0], [0], [0], [1], [1], [1]], dtype=float)
    y = np.array([0, 0, 0, 1, 1, 1], dtype=float)
    spec = FeatureSpec(0, "A", "nominal", ("a0", "a1", "a2"))
    return build(Dataset(X, y, [spec], 2), TreeConfig.create(min_leaf_size=1))


def test_absent_branch_raises_unroutable():
    tree = _tree_with_absent_branch()
    assert tree.root.children[2] is None
    assert classify(tree, [0]) == 0
    with pytest.raises(UnroutableInstance) as exc:
        classify(tree, [2])
    assert exc.value.feature_index == 0
    assert exc.value.branch == 2
    with pytest.raises(UnroutableInstance):
        class_distribution(tree, [2])


def test_out_of_range_code_raises_unroutable():
    tree = _tree_with_absent_branch()
    with pytest.raises(UnroutableInstance):
        classify(tree, [5])


def test_missing_value_is_substituted_on_a_copy():
    tree = build(_binary_feature_dataset(), TreeConfig.create(min_leaf_size=1))
    instance = np.array([nan])
    route = tree.route(instance)
    # mode of A is 0 (tie, lowest code wins)
    assert route.substituted == {0: 0.0}
    assert route.instance[0] == 0.0
    assert route.leaf.majority_class == 0
    assert np.isnan(instance[0])


def test_missing_numeric_value_uses_training_mean():
    X = np.array([[1], [2], [9], [10]], dtype=float)
    y = np.array([0, 0, 1, 1], dtype=float)
    tree = build(Dataset(X, y, [FeatureSpec(0, "x")], 2), TreeConfig.create("gain_ratio", "binary", 1))
    assert tree.fill_values == (5.5,)
    assert tree.root.rule.thresholds == (2.0,)
    assert classify(tree, [nan]) == 1


def test_distribution_is_a_copy():
    tree = build(_binary_feature_dataset(), TreeConfig.create(min_leaf_size=1))
    dist = class_distribution(tree, [0])
    dist[:] = 0
    assert np.allclose(class_distribution(tree, [0]), [1.0, 0.0])


def test_instance_length_is_checked():
    tree = build(_binary_feature_dataset(), TreeConfig.create(min_leaf_size=1))
    with pytest.raises(ValueError):
        classify(tree, [0, 1])


# -----------------------------------------------------------------------------
# Measures, export and logging
# -----------------------------------------------------------------------------
def test_tree_measures():
    tree = build(_binary_feature_dataset(), TreeConfig.create(min_leaf_size=1))
    assert (tree.tree_size, tree.n_leaves, tree.n_rules) == (3, 2, 1)
    tree = _tree_with_absent_branch()
    # the absent branch counts as a leaf
    assert (tree.tree_size, tree.n_leaves, tree.n_rules) == (4, 3, 2)


def test_export_text():
    text = export_text(_tree_with_absent_branch(), class_names=["no", "yes"])
    lines = text.splitlines()
    assert "A = a0: no (3.0)" in lines
    assert "A = a1: yes (3.0)" in lines
    assert "A = a2: null" in lines
    assert "Size of the tree: 4" in lines
    assert "Number of leaves: 3" in lines


def test_export_text_reports_leaf_errors():
    X = np.array([[0], [0], [0], [1], [1], [1]], dtype=float)
    y = np.array([0, 0, 1, 1, 1, 1], dtype=float)
    spec = FeatureSpec(0, "A", "nominal", ("a0", "a1", "a2"))
    tree = build(Dataset(X, y, [spec], 2), TreeConfig.create(min_leaf_size=1))
    assert tree.root.children[0].n_errors == 1
    assert tree.root.children[1].n_errors == 0
    lines = export_text(tree, class_names=["no", "yes"]).splitlines()
    assert "A = a0: no (3.0/1.0)" in lines
    assert "A = a1: yes (3.0)" in lines
    assert "A = a2: null" in lines


def test_builder_logs_decisions(caplog):
    with caplog.at_level(logging.DEBUG, logger="id3py.tree"):
        build(_binary_feature_dataset(), TreeConfig.create(min_leaf_size=1))
    assert any("choosing feature 0" in r.getMessage() for r in caplog.records)
