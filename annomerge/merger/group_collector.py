"""
Group collection for the annotation merger.

Scans the eligible annotation population once and accumulates annotations into
groups indexed by their equivalence key.
"""

import logging
from typing import Any, Dict, Iterable

from .core import AnnotationGroup, EquivalenceKey
from .key_builder import KeyBuilder

logger = logging.getLogger(__name__)


class GroupCollector:
    """
    Partitions annotations into groups of equivalent annotations.

    Annotations whose type fails the type filter are dropped entirely. An empty
    filter accepts every type.
    """

    def __init__(self, key_builder: KeyBuilder, type_filter: Iterable[str] = ()):
        self.key_builder = key_builder
        self.type_filter = frozenset(type_filter)

    def accepts(self, annotation: Any) -> bool:
        return not self.type_filter or annotation.type in self.type_filter

    def collect(
        self, sources: Iterable[Iterable[Any]]
    ) -> Dict[EquivalenceKey, AnnotationGroup]:
        """
        Group the annotations of all sources by equivalence key.

        Args:
            sources: Iterable of annotation collections. The same annotation
                seen twice (e.g. a set named twice) is only grouped once.

        Returns:
            Mapping from key to group, in first-seen order
        """
        groups: Dict[EquivalenceKey, AnnotationGroup] = {}
        scanned = 0
        filtered = 0

        for source in sources:
            for annotation in source:
                scanned += 1
                if not self.accepts(annotation):
                    filtered += 1
                    continue
                key = self.key_builder.build_key(annotation)
                group = groups.get(key)
                if group is None:
                    group = AnnotationGroup(key)
                    groups[key] = group
                group.add(annotation)

        logger.info(
            "Collected %s groups from %s annotations (%s filtered out by type)",
            len(groups),
            scanned,
            filtered,
        )
        return groups
