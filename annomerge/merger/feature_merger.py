"""
Feature merging for the annotation merger.

Combines the feature maps of a group of equivalent annotations into the feature
map of the single merged annotation, under one of the FeatureMergeMode policies.
"""

import logging
from typing import Any, Callable, Dict, List

from .core import (
    AnnotationGroup,
    FeatureMergeMode,
    UnknownMergeModeError,
    freeze_value,
)
from .key_builder import KeyBuilder

logger = logging.getLogger(__name__)


class FeatureMerger:
    """
    Merges group member features into one feature map.

    MERGE: identity features keep their single shared value; every other
    feature becomes a set of the values observed across the group (a
    single-element set when only one value was seen).

    SELECT_ONE: every feature keeps the first value observed.

    Members are visited in ascending annotation identifier order, so the
    "first" value of SELECT_ONE is the one of the lowest identifier.
    """

    def __init__(self, mode: Any, key_builder: KeyBuilder):
        """
        Args:
            mode: FeatureMergeMode or any name accepted by FeatureMergeMode.from_name
            key_builder: KeyBuilder that built the group keys

        Raises:
            UnknownMergeModeError: if the mode is not recognized
        """
        self.mode = FeatureMergeMode.from_name(mode)
        self.key_builder = key_builder
        self._strategies: Dict[FeatureMergeMode, Callable] = {
            FeatureMergeMode.MERGE: self._merge_features,
            FeatureMergeMode.SELECT_ONE: self._select_one,
        }

    def merge(self, group: AnnotationGroup) -> Dict[str, Any]:
        """
        Compute the merged feature map of a group.

        Args:
            group: AnnotationGroup with at least one member

        Returns:
            New feature dictionary for the merged annotation
        """
        strategy = self._strategies.get(self.mode)
        if strategy is None:
            raise UnknownMergeModeError(
                f"Unknown option {self.mode} for FeatureMergeMode."
            )
        merged = strategy(group.ordered_members())
        logger.debug(
            "Merged %s annotations at %s-%s into %s features",
            len(group),
            group.key.start,
            group.key.end,
            len(merged),
        )
        return merged

    def _merge_features(self, members: List[Any]) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for annotation in members:
            for name, value in (annotation.features or {}).items():
                if self.key_builder.is_identity_feature(name):
                    # Equal across the group by construction of the key
                    if name not in merged:
                        merged[name] = value
                elif name in merged:
                    merged[name].add(freeze_value(value))
                else:
                    merged[name] = {freeze_value(value)}
        return merged

    @staticmethod
    def _select_one(members: List[Any]) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for annotation in members:
            for name, value in (annotation.features or {}).items():
                if name not in merged:
                    merged[name] = value
        return merged
