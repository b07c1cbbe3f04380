"""
In-memory document and annotation sets.

A minimal host for the annotation merger: documents hold text content and named
annotation sets, annotation sets hand out annotations in identifier order and
validate offsets when annotations are added.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from annomerge.merger.core import InvalidOffsetError, is_offset

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Annotation:
    """A typed span over the document content with a feature map."""

    id: int
    type: str
    start: int
    end: int
    features: Dict[str, Any] = field(default_factory=dict)


class AnnotationSet:
    """Annotations of one named set of a document."""

    def __init__(self, document: "Document", name: str = ""):
        self.document = document
        self.name = name
        self._annotations: Dict[int, Annotation] = {}

    def __iter__(self) -> Iterator[Annotation]:
        return iter([self._annotations[i] for i in sorted(self._annotations)])

    def __len__(self) -> int:
        return len(self._annotations)

    def __contains__(self, annotation: Any) -> bool:
        return getattr(annotation, "id", None) in self._annotations

    def add(
        self,
        start: int,
        end: int,
        annotation_type: str,
        features: Optional[Dict[str, Any]] = None,
    ) -> int:
        """
        Add a new annotation and return its identifier.

        Raises:
            InvalidOffsetError: if the span is not within the document content
        """
        length = len(self.document.content)
        if (
            not is_offset(start)
            or not is_offset(end)
            or start < 0
            or start > end
            or end > length
        ):
            raise InvalidOffsetError(
                f"Invalid offsets {start}-{end} for document of length {length}"
            )
        ann_id = self.document.next_annotation_id()
        self._annotations[ann_id] = Annotation(
            ann_id, annotation_type, start, end, dict(features or {})
        )
        logger.debug("Added %s %s at %s-%s", annotation_type, ann_id, start, end)
        return ann_id

    def get(self, annotation_type: Optional[str] = None) -> List[Annotation]:
        """Annotations of the given type, or all annotations."""
        return [
            ann for ann in self if annotation_type is None or ann.type == annotation_type
        ]

    def get_by_id(self, ann_id: int) -> Optional[Annotation]:
        return self._annotations.get(ann_id)


class Document:
    """Text content plus its annotation sets; "" names the default set."""

    def __init__(self, content: str = ""):
        self.content = content
        self._sets: Dict[str, AnnotationSet] = {}
        self._next_id = 0

    def next_annotation_id(self) -> int:
        ann_id = self._next_id
        self._next_id += 1
        return ann_id

    def get_annotations(self, name: Optional[str] = None) -> AnnotationSet:
        """Return the named annotation set, creating it if needed."""
        name = name or ""
        if name not in self._sets:
            self._sets[name] = AnnotationSet(self, name)
        return self._sets[name]

    @property
    def annotation_set_names(self) -> List[str]:
        return [name for name in self._sets if name]
