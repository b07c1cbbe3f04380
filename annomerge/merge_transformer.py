"""
Merge configuration transformer.

This module provides the ConfigTransformer class that converts Lark parse trees
of the merger configuration language into a Root holding a MergeConfig. Each
statement yields the options it sets; later statements override earlier ones.
"""

from typing import Optional

from lark import Transformer, v_args

from annomerge import merge_ast as ast
from annomerge.merger.core import FeatureMergeMode, extract_merge_config


@v_args(inline=True)
class ConfigTransformer(Transformer):
    """Transformer that converts configuration parse trees into a Root."""

    def __init__(self, config_file_path: Optional[str] = None):
        super().__init__()
        self.config_file_path = config_file_path

    def root(self, version, *statements):
        """Fold the statement options into one MergeConfig."""
        options = {}
        for statement in statements:
            options.update(statement)
        return ast.Root(
            version=version,
            config=extract_merge_config(None, **options),
            config_file_path=self.config_file_path,
        )

    def version_stmt(self, version_token):
        return ast.Version(value=str(version_token))

    def input_sets_stmt(self, names):
        return {"input_set_names": tuple(names)}

    def input_types_stmt(self, names):
        return {"input_types": frozenset(names)}

    def merge_by_type(self):
        return {"merge_by_type": True}

    def merge_across_types(self):
        return {"merge_by_type": False}

    def key_all_features(self):
        return {"use_all_features_as_key": True, "identity_feature_names": frozenset()}

    def key_features(self, names):
        return {
            "use_all_features_as_key": False,
            "identity_feature_names": frozenset(names),
        }

    def key_none(self):
        return {"use_all_features_as_key": False, "identity_feature_names": frozenset()}

    def mode_stmt(self, name):
        """Resolve the merge mode; unknown modes fail while parsing."""
        return {"merge_mode": FeatureMergeMode.from_name(name)}

    def output_set_stmt(self, name):
        return {"output_set_name": name}

    def output_type_stmt(self, name):
        return {"output_annotation_name": name}

    def name_list(self, *names):
        return list(names)

    def name(self, token):
        """Transform identifier or quoted string, stripping quotes."""
        if token.type == "STRING":
            return token.value[1:-1].replace('\\"', '"').replace("\\\\", "\\")
        return str(token)
