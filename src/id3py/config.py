# id3py/config.py
"""Build-time configuration shared, read-only, by every node of one tree."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from .exceptions import InvalidConfiguration

# Tolerance used when comparing a score against the no-information value.
SMALL = 1e-6


class Criterion(str, Enum):
    """Attribute-quality criterion.

    Gain ratio is maximised.  Gini reduction is *minimised*: lower scores are
    treated as better, the opposite sign convention to gain ratio.
    """
    GAIN_RATIO = "gain_ratio"
    GINI = "gini"

    @property
    def maximize(self) -> bool:
        return self is Criterion.GAIN_RATIO


class SplitStyle(str, Enum):
    BINARY = "binary"
    MULTIWAY = "multiway"


def _coerce(enum_cls, value, what: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    choices = ", ".join(repr(m.value) for m in enum_cls)
    raise InvalidConfiguration(f"Unsupported {what} {value!r}; expected one of {choices}")


@dataclass(frozen=True)
class TreeConfig:
    """Configuration fixed for the whole tree.

    Parameters
    ----------
    criterion : Criterion, default=Criterion.GAIN_RATIO
        Attribute-quality criterion.
    split_style : SplitStyle, default=SplitStyle.MULTIWAY
        Binary or multi-way partitions.  Whether a feature is split as nominal
        or numeric is decided by the feature itself.
    min_leaf_size : float, default=2.0
        A split is accepted only when every branch holds strictly more
        instances than this; branches with fewer instances are left without
        a subtree.
    """
    criterion: Criterion = Criterion.GAIN_RATIO
    split_style: SplitStyle = SplitStyle.MULTIWAY
    min_leaf_size: float = 2.0

    @classmethod
    def create(cls, criterion="gain_ratio", split_style="multiway",
               min_leaf_size=2.0) -> "TreeConfig":
        """Validate raw option values and return a config.

        Raises
        ------
        InvalidConfiguration
            For an unknown criterion or split style, or a minimum leaf size that
            is not a non-negative number.
        """
        crit = _coerce(Criterion, criterion, "criterion")
        style = _coerce(SplitStyle, split_style, "split style")
        if isinstance(min_leaf_size, bool):
            raise InvalidConfiguration("min_leaf_size must be a number, not a bool")
        try:
            size = float(min_leaf_size)
        except (TypeError, ValueError):
            raise InvalidConfiguration(f"min_leaf_size must be a number, got {min_leaf_size!r}")
        if math.isnan(size) or size < 0:
            raise InvalidConfiguration(f"min_leaf_size must be >= 0, got {min_leaf_size!r}")
        return cls(criterion=crit, split_style=style, min_leaf_size=size)

    @property
    def binary(self) -> bool:
        return self.split_style is SplitStyle.BINARY
