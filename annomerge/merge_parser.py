from pathlib import Path
from typing import Optional

from lark import Lark
from lark.exceptions import VisitError

from annomerge.merge_ast import Root
from annomerge.merge_transformer import ConfigTransformer

# Merger configuration language version.
# Configurations declaring any other version are rejected.
MERGE_DSL_VERSION = "1.0"

GRAMMAR_PATH = Path(__file__).parent / "merge_grammar.lark"
with open(GRAMMAR_PATH, "r", encoding="utf-8") as f:
    MERGE_GRAMMAR = f.read()

config_parser = Lark(MERGE_GRAMMAR, start="root", parser="lalr", propagate_positions=True)


def parse_string(
    code: str, *, unwrap: bool = True, config_file_path: Optional[str] = None
) -> Root:
    tree = config_parser.parse(code)
    try:
        transformer = ConfigTransformer(config_file_path=config_file_path)
        root = transformer.transform(tree)
    except VisitError as ve:
        if unwrap:
            raise ve.orig_exc from ve
        raise

    # Make sure the version matches the expected configuration version
    if root.version.value != MERGE_DSL_VERSION:
        raise ValueError(
            f"Unsupported merge configuration version: {root.version.value}. "
            f"Expected {MERGE_DSL_VERSION}."
        )
    return root


def parse_file(path, *, unwrap: bool = True) -> Root:
    with open(path, "r", encoding="utf-8") as file:
        return parse_string(file.read(), unwrap=unwrap, config_file_path=str(path))
