from dataclasses import dataclass
from typing import Optional

from annomerge.merger.core import MergeConfig


@dataclass(frozen=True)
class Version:
    """Represents the configuration language version."""

    value: str


@dataclass(frozen=True)
class Root:
    """Represents a parsed merger configuration."""

    version: Version
    config: MergeConfig
    config_file_path: Optional[str] = None
