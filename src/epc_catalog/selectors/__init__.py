"""Cascading selectors and the hierarchy graphs built from them."""

from .selector import CascadingSelector, SelectorState
from .graph import SelectorGraph, HierarchyFlow, FLOW_LEVELS, LEVEL_LABELS

__all__ = [
    "CascadingSelector",
    "SelectorState",
    "SelectorGraph",
    "HierarchyFlow",
    "FLOW_LEVELS",
    "LEVEL_LABELS",
]
