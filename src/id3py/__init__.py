# id3py/__init__.py
"""
id3py: ID3-family decision trees with gain ratio or Gini criteria, binary or
multi-way splits, for nominal and numeric features (scikit-learn style).

Exports:
    - ID3Classifier
    - build, classify, class_distribution, export_text
    - TreeConfig, Criterion, SplitStyle
    - Dataset, FeatureSpec
"""
from .config import Criterion, SplitStyle, TreeConfig
from .dataset import Dataset, FeatureSpec
from .exceptions import (EmptyTrainingSet, InvalidConfiguration, TreeError,
                         UnroutableInstance, UnsupportedCriterion)
from .tree import (DecisionTree, ID3Classifier, build, class_distribution,
                   classify, export_text)

__all__ = [
    "ID3Classifier",
    "DecisionTree",
    "build",
    "classify",
    "class_distribution",
    "export_text",
    "TreeConfig",
    "Criterion",
    "SplitStyle",
    "Dataset",
    "FeatureSpec",
    "TreeError",
    "InvalidConfiguration",
    "EmptyTrainingSet",
    "UnroutableInstance",
    "UnsupportedCriterion",
]
__version__ = "0.1.0"
