"""
Equivalence key construction for the annotation merger.

Derives, per annotation, the structural key deciding which annotations are
considered the same annotation: span, comparison name and identity features.
"""

import logging
from typing import Any, Dict, Iterable

from .core import DEFAULT_ANNOTATION_COMPARE_NAME, EquivalenceKey

logger = logging.getLogger(__name__)


class KeyBuilder:
    """
    Builds equivalence keys from annotations.

    The comparison name is the annotation type when merging by type, otherwise a
    shared sentinel so that annotations of different types can merge. The
    identity features are either all features of the annotation or the
    configured subset that the annotation actually carries.
    """

    def __init__(
        self,
        merge_by_type: bool = True,
        use_all_features_as_key: bool = False,
        identity_feature_names: Iterable[str] = (),
    ):
        self.merge_by_type = merge_by_type
        self.use_all_features_as_key = use_all_features_as_key
        self.identity_feature_names = frozenset(identity_feature_names)

    def is_identity_feature(self, name: Any) -> bool:
        """True if the feature takes part in the equivalence key."""
        return self.use_all_features_as_key or name in self.identity_feature_names

    def identity_features(self, annotation: Any) -> Dict[str, Any]:
        """
        Copy the identity features of an annotation.

        Configured names missing from the annotation are skipped, not defaulted.
        """
        features = annotation.features or {}
        if self.use_all_features_as_key:
            return dict(features)
        return {
            name: features[name]
            for name in self.identity_feature_names
            if name in features
        }

    def comparison_name(self, annotation: Any) -> str:
        if self.merge_by_type:
            return annotation.type
        return DEFAULT_ANNOTATION_COMPARE_NAME

    def build_key(self, annotation: Any) -> EquivalenceKey:
        """
        Build the equivalence key of an annotation.

        Args:
            annotation: Object with ``type``, ``start``, ``end`` and ``features``

        Returns:
            EquivalenceKey equal to that of every annotation it should merge with
        """
        return EquivalenceKey.create(
            annotation.start,
            annotation.end,
            self.comparison_name(annotation),
            self.identity_features(annotation),
        )
