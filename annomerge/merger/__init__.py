"""
Annotation merger package - modular annotation merging components.

This package provides the annotation merging pipeline, broken down into
focused modules:

- core: Core data structures (MergeConfig, EquivalenceKey, AnnotationGroup, errors)
- key_builder: Equivalence key construction
- group_collector: Type filtering and grouping by key
- feature_merger: Feature combination under MERGE or SELECT_ONE
- emitter: Output annotation creation
- annotation_merger: Main merger orchestrating the full pipeline
"""

from .annotation_merger import AnnotationMerger
from .core import (
    DEFAULT_ANNOTATION_COMPARE_NAME,
    DEFAULT_OUTPUT_ANNOTATION_NAME,
    AnnotationGroup,
    AnnotationMergeError,
    EquivalenceKey,
    FeatureMergeMode,
    InvalidOffsetError,
    MergeConfig,
    MissingInputError,
    UnknownMergeModeError,
    extract_merge_config,
)
from .emitter import Emitter
from .feature_merger import FeatureMerger
from .group_collector import GroupCollector
from .key_builder import KeyBuilder

__all__ = [
    "DEFAULT_ANNOTATION_COMPARE_NAME",
    "DEFAULT_OUTPUT_ANNOTATION_NAME",
    "AnnotationGroup",
    "AnnotationMergeError",
    "EquivalenceKey",
    "FeatureMergeMode",
    "InvalidOffsetError",
    "MergeConfig",
    "MissingInputError",
    "UnknownMergeModeError",
    "extract_merge_config",
    "KeyBuilder",
    "GroupCollector",
    "FeatureMerger",
    "Emitter",
    "AnnotationMerger",
]
