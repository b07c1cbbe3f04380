"""
Emission of merged annotations.

Writes one new annotation per group into the output annotation set.
"""

import logging
from typing import Any, Dict, Iterable, List, Tuple

from .core import (
    DEFAULT_OUTPUT_ANNOTATION_NAME,
    EquivalenceKey,
    InvalidOffsetError,
    is_offset,
)

logger = logging.getLogger(__name__)


class Emitter:
    """Adds merged annotations to an annotation sink."""

    def __init__(self, output_annotation_name: str = DEFAULT_OUTPUT_ANNOTATION_NAME):
        self.output_annotation_name = (
            output_annotation_name or DEFAULT_OUTPUT_ANNOTATION_NAME
        )

    @staticmethod
    def validate_span(start: Any, end: Any) -> None:
        """
        Check that a span is a non-negative, well-ordered pair of integers.

        Bounds against the document content are checked by the sink.
        """
        if not is_offset(start) or not is_offset(end):
            raise InvalidOffsetError(f"Offsets must be integers: {start!r}-{end!r}")
        if start < 0 or end < 0:
            raise InvalidOffsetError(f"Offsets must be non-negative: {start}-{end}")
        if start > end:
            raise InvalidOffsetError(f"Start offset {start} is after end offset {end}")

    def emit(self, key: EquivalenceKey, features: Dict[str, Any], sink: Any) -> Any:
        """
        Add one merged annotation spanning the key's offsets.

        Args:
            key: EquivalenceKey of the group
            features: Merged feature map
            sink: Object with ``add(start, end, type, features)``

        Returns:
            Identifier of the new annotation

        Raises:
            InvalidOffsetError: if the span is malformed or out of bounds
        """
        try:
            self.validate_span(key.start, key.end)
            return sink.add(key.start, key.end, self.output_annotation_name, features)
        except InvalidOffsetError:
            logger.error(
                "Cannot emit %s at %s-%s", self.output_annotation_name, key.start, key.end
            )
            raise

    def emit_all(
        self, merged: Iterable[Tuple[EquivalenceKey, Dict[str, Any]]], sink: Any
    ) -> List[Any]:
        """Emit every (key, features) pair, stopping at the first failure."""
        return [self.emit(key, features, sink) for key, features in merged]
