"""
Tests for merging the features of a group of equivalent annotations.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from annomerge.document import Annotation
from annomerge.merger import (
    AnnotationGroup,
    FeatureMergeMode,
    FeatureMerger,
    GroupCollector,
    KeyBuilder,
    UnknownMergeModeError,
)


def _single_group(annotations, key_builder):
    groups = GroupCollector(key_builder).collect([annotations])
    assert len(groups) == 1
    return next(iter(groups.values()))


class TestMergeMode:
    """MERGE mode collects non-identity values into sets."""

    def test_merge_wraps_values_in_sets(self):
        builder = KeyBuilder()
        group = _single_group(
            [
                Annotation(0, "Person", 0, 5, {"name": "Bob"}),
                Annotation(1, "Person", 0, 5, {"name": "Bob", "age": 30}),
            ],
            builder,
        )
        merged = FeatureMerger(FeatureMergeMode.MERGE, builder).merge(group)
        assert merged == {"name": {"Bob"}, "age": {30}}

    def test_merge_collects_distinct_values(self):
        builder = KeyBuilder()
        group = _single_group(
            [
                Annotation(0, "T", 0, 5, {"color": "red"}),
                Annotation(1, "T", 0, 5, {"color": "blue"}),
                Annotation(2, "T", 0, 5, {"color": "red"}),
            ],
            builder,
        )
        merged = FeatureMerger("Merge", builder).merge(group)
        assert merged == {"color": {"red", "blue"}}

    def test_identity_features_stay_scalar(self):
        builder = KeyBuilder(identity_feature_names={"id"})
        group = _single_group(
            [
                Annotation(0, "T", 0, 5, {"id": 7, "color": "red"}),
                Annotation(1, "T", 0, 5, {"id": 7, "color": "blue"}),
            ],
            builder,
        )
        merged = FeatureMerger(FeatureMergeMode.MERGE, builder).merge(group)
        assert merged["id"] == 7
        assert merged["color"] == {"red", "blue"}

    def test_all_features_as_key_keeps_every_value_scalar(self):
        builder = KeyBuilder(use_all_features_as_key=True)
        group = _single_group(
            [
                Annotation(0, "T", 0, 5, {"id": 7, "color": "red"}),
                Annotation(1, "T", 0, 5, {"color": "red", "id": 7}),
            ],
            builder,
        )
        merged = FeatureMerger(FeatureMergeMode.MERGE, builder).merge(group)
        assert merged == {"id": 7, "color": "red"}

    def test_singleton_group(self):
        builder = KeyBuilder(identity_feature_names={"id"})
        group = _single_group(
            [Annotation(0, "T", 0, 5, {"id": 1, "score": 0.5})], builder
        )
        merged = FeatureMerger(FeatureMergeMode.MERGE, builder).merge(group)
        assert merged == {"id": 1, "score": {0.5}}

    def test_unhashable_values_are_frozen(self):
        builder = KeyBuilder()
        group = _single_group(
            [
                Annotation(0, "T", 0, 5, {"tags": ["a", "b"]}),
                Annotation(1, "T", 0, 5, {"tags": ["a", "b"]}),
            ],
            builder,
        )
        merged = FeatureMerger(FeatureMergeMode.MERGE, builder).merge(group)
        assert merged == {"tags": {("a", "b")}}

    def test_merge_does_not_mutate_inputs(self):
        builder = KeyBuilder()
        features = {"name": "Bob"}
        group = _single_group([Annotation(0, "T", 0, 5, features)], builder)
        FeatureMerger(FeatureMergeMode.MERGE, builder).merge(group)
        assert features == {"name": "Bob"}


class TestSelectOneMode:
    """SELECT_ONE mode keeps the first value seen per feature."""

    def test_select_one_keeps_scalars(self):
        builder = KeyBuilder()
        group = _single_group(
            [
                Annotation(0, "Person", 0, 5, {"name": "Bob"}),
                Annotation(1, "Person", 0, 5, {"name": "Bob", "age": 30}),
            ],
            builder,
        )
        merged = FeatureMerger(FeatureMergeMode.SELECT_ONE, builder).merge(group)
        assert merged == {"name": "Bob", "age": 30}

    def test_select_one_prefers_lowest_identifier(self):
        builder = KeyBuilder()
        group = AnnotationGroup(builder.build_key(Annotation(5, "T", 0, 5)))
        # Added out of identifier order
        group.add(Annotation(9, "T", 0, 5, {"color": "blue"}))
        group.add(Annotation(5, "T", 0, 5, {"color": "red"}))
        merged = FeatureMerger("select-one", builder).merge(group)
        assert merged == {"color": "red"}

    def test_select_one_is_repeatable(self):
        builder = KeyBuilder()
        annotations = [
            Annotation(3, "T", 0, 5, {"a": 1, "b": "x"}),
            Annotation(1, "T", 0, 5, {"a": 2}),
            Annotation(2, "T", 0, 5, {"b": "y", "c": None}),
        ]
        merger = FeatureMerger(FeatureMergeMode.SELECT_ONE, builder)
        first = merger.merge(_single_group(annotations, builder))
        second = merger.merge(_single_group(list(reversed(annotations)), builder))
        assert first == second == {"a": 2, "b": "y", "c": None}


class TestModeValidation:
    """Merge modes are validated when the merger is built."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("MERGE", FeatureMergeMode.MERGE),
            ("Merge", FeatureMergeMode.MERGE),
            ("merge", FeatureMergeMode.MERGE),
            ("SELECT_ONE", FeatureMergeMode.SELECT_ONE),
            ("SelectOne", FeatureMergeMode.SELECT_ONE),
            ("select-one", FeatureMergeMode.SELECT_ONE),
            (FeatureMergeMode.SELECT_ONE, FeatureMergeMode.SELECT_ONE),
        ],
    )
    def test_known_modes(self, name, expected):
        assert FeatureMerger(name, KeyBuilder()).mode is expected

    @pytest.mark.parametrize("name", ["union", "", None, 3])
    def test_unknown_mode_is_rejected(self, name):
        with pytest.raises(UnknownMergeModeError):
            FeatureMerger(name, KeyBuilder())

    def test_mode_display_names(self):
        assert str(FeatureMergeMode.MERGE) == "Merge"
        assert str(FeatureMergeMode.SELECT_ONE) == "SelectOne"


class TestSharedIdentifiers:
    """Annotations from different sets may reuse identifiers."""

    def test_merge_keeps_values_of_every_annotation(self):
        builder = KeyBuilder()
        groups = GroupCollector(builder).collect(
            [
                [Annotation(0, "Person", 0, 5, {"name": "Bob"})],
                [Annotation(0, "Person", 0, 5, {"name": "Robert"})],
            ]
        )
        (group,) = groups.values()
        merged = FeatureMerger(FeatureMergeMode.MERGE, builder).merge(group)
        assert merged == {"name": {"Bob", "Robert"}}

    def test_select_one_prefers_first_inserted_on_equal_identifiers(self):
        builder = KeyBuilder()
        groups = GroupCollector(builder).collect(
            [
                [Annotation(0, "Person", 0, 5, {"name": "Bob"})],
                [Annotation(0, "Person", 0, 5, {"name": "Robert"})],
            ]
        )
        (group,) = groups.values()
        merged = FeatureMerger(FeatureMergeMode.SELECT_ONE, builder).merge(group)
        assert merged == {"name": "Bob"}


class TestValueEquality:
    """Feature values compare with Python equality."""

    def test_true_and_one_share_a_key_and_a_set_element(self):
        builder = KeyBuilder(identity_feature_names={"flag"})
        true_key = builder.build_key(Annotation(0, "T", 0, 5, {"flag": True}))
        one_key = builder.build_key(Annotation(1, "T", 0, 5, {"flag": 1}))
        assert true_key == one_key

        group = _single_group(
            [
                Annotation(0, "T", 0, 5, {"score": True}),
                Annotation(1, "T", 0, 5, {"score": 1}),
            ],
            KeyBuilder(),
        )
        merged = FeatureMerger(FeatureMergeMode.MERGE, KeyBuilder()).merge(group)
        assert merged == {"score": {1}}
