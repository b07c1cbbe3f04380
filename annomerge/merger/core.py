"""
Core data structures for the annotation merger.

Contains the merge configuration, the equivalence key and group types, and the
error taxonomy shared by the merger components.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

DEFAULT_OUTPUT_ANNOTATION_NAME = "MyAnnotationMerged"

# Shared comparison name used when annotations of different types may merge
DEFAULT_ANNOTATION_COMPARE_NAME = "DEFAULT_ANNOTATION_COMPARE_NAME"


class AnnotationMergeError(RuntimeError):
    """Base class for failures raised while merging a document."""


class MissingInputError(AnnotationMergeError):
    """No document was supplied to the merger."""


class InvalidOffsetError(AnnotationMergeError, ValueError):
    """An annotation span is malformed or outside the document content."""


class UnknownMergeModeError(AnnotationMergeError, ValueError):
    """The configured feature merge mode is not recognized."""


class FeatureMergeMode(Enum):
    """How the features of a group of equivalent annotations are combined."""

    MERGE = "Merge"
    SELECT_ONE = "SelectOne"

    def __str__(self):
        return self.value

    @classmethod
    def from_name(cls, name: Any) -> "FeatureMergeMode":
        """
        Resolve a merge mode from a member, member name or display name.

        Accepts ``MERGE``, ``Merge``, ``merge``, ``SELECT_ONE``, ``SelectOne``
        and ``select-one`` (case-insensitive).

        Raises:
            UnknownMergeModeError: if the name does not denote a mode
        """
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            normalized = name.strip().replace("-", "").replace("_", "").lower()
            for mode in cls:
                if normalized in (
                    mode.name.replace("_", "").lower(),
                    mode.value.lower(),
                ):
                    return mode
        raise UnknownMergeModeError(f"Unknown option {name} for FeatureMergeMode.")


@dataclass(frozen=True)
class MergeConfig:
    """Runtime options of the annotation merger."""

    input_set_names: Tuple[Optional[str], ...] = ()
    input_types: FrozenSet[str] = frozenset()
    merge_by_type: bool = True
    use_all_features_as_key: bool = False
    identity_feature_names: FrozenSet[str] = frozenset()
    merge_mode: FeatureMergeMode = FeatureMergeMode.MERGE
    output_set_name: str = ""
    output_annotation_name: str = DEFAULT_OUTPUT_ANNOTATION_NAME


# Host option names accepted in dictionary configurations
_CONFIG_ALIASES = {
    "inputSetNames": "input_set_names",
    "inputASNames": "input_set_names",
    "inputTypes": "input_types",
    "inputAnnotNames": "input_types",
    "mergeByType": "merge_by_type",
    "useAllFeaturesAsKey": "use_all_features_as_key",
    "identityFeatureNames": "identity_feature_names",
    "mergeMode": "merge_mode",
    "outputSetName": "output_set_name",
    "outputAnnotationName": "output_annotation_name",
}


def _as_names(value: Any) -> Tuple[Any, ...]:
    """Normalize a name collection; a single string is one name."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _normalize_config(config: MergeConfig) -> MergeConfig:
    output_name = config.output_annotation_name or DEFAULT_OUTPUT_ANNOTATION_NAME
    return dataclasses.replace(
        config,
        input_set_names=_as_names(config.input_set_names),
        input_types=frozenset(_as_names(config.input_types)),
        merge_by_type=bool(config.merge_by_type),
        use_all_features_as_key=bool(config.use_all_features_as_key),
        identity_feature_names=frozenset(_as_names(config.identity_feature_names)),
        merge_mode=FeatureMergeMode.from_name(config.merge_mode),
        output_set_name=config.output_set_name or "",
        output_annotation_name=output_name,
    )


def extract_merge_config(config: Any = None, **overrides: Any) -> MergeConfig:
    """
    Build a normalized MergeConfig from any supported configuration form.

    Args:
        config: None, a MergeConfig, a parsed configuration Root (anything with
            a ``config`` attribute) or a dictionary keyed by field names or
            host option names
        overrides: Field values that replace those of ``config``

    Returns:
        MergeConfig with collections normalized and the merge mode resolved

    Raises:
        ValueError: for unknown configuration keys
        UnknownMergeModeError: for an unrecognized merge mode
    """
    if config is None:
        config = MergeConfig()
    elif hasattr(config, "config"):  # It's a parsed configuration Root
        config = config.config

    if isinstance(config, dict):
        values = {}
        for key, value in config.items():
            values[_CONFIG_ALIASES.get(key, key)] = value
        config = MergeConfig()
        overrides = {**values, **overrides}

    if not isinstance(config, MergeConfig):
        raise ValueError(f"Unsupported merge configuration: {config!r}")

    known = {f.name for f in dataclasses.fields(MergeConfig)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown merge configuration options: {sorted(unknown)}")

    return _normalize_config(dataclasses.replace(config, **overrides))


def is_offset(value: Any) -> bool:
    """True for an integer offset; booleans are not offsets."""
    return isinstance(value, int) and not isinstance(value, bool)


def freeze_value(value: Any) -> Any:
    """
    Convert a feature value into an equal, hashable form.

    Equality is Python equality, so ``True``, ``1`` and ``1.0`` freeze to equal
    values and compare equal in keys and merged sets.
    """
    if isinstance(value, dict):
        return frozenset((k, freeze_value(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(freeze_value(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze_value(v) for v in value)
    return value


@dataclass(frozen=True)
class EquivalenceKey:
    """Structural key deciding whether two annotations are the same annotation."""

    start: int
    end: int
    comparison_name: str
    key_features: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def create(
        cls, start: int, end: int, comparison_name: str, features: Dict[str, Any]
    ) -> "EquivalenceKey":
        """Create a key with the identity features in canonical order."""
        key_features = tuple(
            sorted(
                ((name, freeze_value(value)) for name, value in features.items()),
                key=lambda item: str(item[0]),
            )
        )
        return cls(start, end, comparison_name, key_features)


@dataclass
class AnnotationGroup:
    """
    Annotations sharing one equivalence key.

    Members are held by object identity, so distinct annotations that happen to
    share an identifier (e.g. from different sets) are all kept, while adding
    the same annotation twice is a no-op.
    """

    key: EquivalenceKey
    members: Dict[int, Any] = field(default_factory=dict)

    def add(self, annotation: Any) -> None:
        self.members.setdefault(id(annotation), annotation)

    def ordered_members(self) -> List[Any]:
        """Members by ascending identifier, then insertion order."""
        indexed = list(enumerate(self.members.values()))
        indexed.sort(key=lambda item: (item[1].id, item[0]))
        return [annotation for _, annotation in indexed]

    def first_id(self) -> Any:
        return min(annotation.id for annotation in self.members.values())

    def __len__(self) -> int:
        return len(self.members)
