"""
Main annotation merger implementation.

This module provides the AnnotationMerger class that orchestrates the complete
merge pipeline over one document:

1. Key building (equivalence key per annotation)
2. Group collection (type filter, grouping by key)
3. Feature merging (MERGE or SELECT_ONE)
4. Emission of one merged annotation per group
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .core import (
    AnnotationGroup,
    EquivalenceKey,
    MissingInputError,
    extract_merge_config,
)
from .emitter import Emitter
from .feature_merger import FeatureMerger
from .group_collector import GroupCollector
from .key_builder import KeyBuilder

logger = logging.getLogger(__name__)


class AnnotationMerger:
    """
    Merges equivalent annotations of a document into new annotations.

    The document is only touched through ``get_annotations(name)`` and the
    ``add`` operation of the output annotation set.
    """

    def __init__(self, config: Any = None, **overrides: Any):
        """
        Initialize the merger.

        Args:
            config: MergeConfig, parsed configuration Root, dictionary or None
                for the defaults
            overrides: MergeConfig field values overriding ``config``
        """
        self.reinit(config, **overrides)

    def reinit(self, config: Any = None, **overrides: Any) -> None:
        """Rebuild all components from a new configuration."""
        self.config = extract_merge_config(config, **overrides)

        self.key_builder = KeyBuilder(
            merge_by_type=self.config.merge_by_type,
            use_all_features_as_key=self.config.use_all_features_as_key,
            identity_feature_names=self.config.identity_feature_names,
        )
        self.group_collector = GroupCollector(self.key_builder, self.config.input_types)
        self.feature_merger = FeatureMerger(self.config.merge_mode, self.key_builder)
        self.emitter = Emitter(self.config.output_annotation_name)

    def _input_sets(self, document: Any) -> List[Any]:
        if not self.config.input_set_names:
            return [document.get_annotations()]
        return [
            document.get_annotations(name or None)
            for name in self.config.input_set_names
        ]

    def _merge_groups(
        self,
        groups: List[AnnotationGroup],
        progress_callback: Optional[Callable[[str, int, int], None]],
    ) -> Iterator[Tuple[EquivalenceKey, Dict[str, Any]]]:
        """Merge groups one at a time as the emitter consumes them."""
        for index, group in enumerate(groups):
            if progress_callback:
                progress_callback("merging", index, len(groups))
            yield group.key, self.feature_merger.merge(group)

    def execute(
        self,
        document: Any,
        progress_callback: Optional[Callable[[str, int, int], None]] = None,
    ) -> List[Any]:
        """
        Merge the annotations of one document.

        Args:
            document: Object with ``get_annotations(name=None)``
            progress_callback: Optional callback function(stage_name, current, total)

        Returns:
            Identifiers of the emitted annotations, in emission order

        Raises:
            MissingInputError: if no document is given
            InvalidOffsetError: if a merged span cannot be added; annotations
                emitted before the failure remain in the output set
        """
        if document is None:
            raise MissingInputError("No document to process!")

        sources = self._input_sets(document)
        if progress_callback:
            progress_callback("collecting", 0, len(sources))

        groups = self.group_collector.collect(sources)

        if progress_callback:
            progress_callback("collecting", len(sources), len(sources))

        # Malformed spans must fail as offset errors, not while ordering
        for key in groups:
            self.emitter.validate_span(key.start, key.end)

        output_set = document.get_annotations(self.config.output_set_name or None)

        ordered_groups = sorted(
            groups.values(),
            key=lambda g: (g.key.start, g.key.end, g.first_id()),
        )

        emitted = self.emitter.emit_all(
            self._merge_groups(ordered_groups, progress_callback), output_set
        )

        if progress_callback:
            progress_callback("complete", len(emitted), len(ordered_groups))

        logger.info(
            "Emitted %s %s annotations (mode %s)",
            len(emitted),
            self.emitter.output_annotation_name,
            self.feature_merger.mode,
        )
        return emitted
