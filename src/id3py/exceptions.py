# id3py/exceptions.py
"""Typed failures raised by tree induction and prediction."""
from __future__ import annotations


class TreeError(Exception):
    """Base class for every error raised by :mod:`id3py`."""


class InvalidConfiguration(TreeError, ValueError):
    """Unsupported criterion, split style or minimum leaf size."""


class EmptyTrainingSet(TreeError, ValueError):
    """Top-level build over zero instances with no class schema."""


class UnsupportedCriterion(TreeError, RuntimeError):
    """A criterion switch reached neither known case."""


class UnroutableInstance(TreeError, LookupError):
    """Prediction reached a branch that holds no subtree.

    Parameters
    ----------
    feature_index : int or None
        Splitting feature of the node where routing failed.
    branch : int or None
        Branch index the instance was routed to.
    """

    def __init__(self, message: str, *, feature_index: int | None = None,
                 branch: int | None = None):
        super().__init__(message)
        self.feature_index = feature_index
        self.branch = branch
