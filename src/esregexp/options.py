"""Parser configuration."""

from dataclasses import dataclass
from typing import Union

from .ecma_versions import EcmaVersion, LATEST_ECMA_VERSION, resolve_ecma_version


DEFAULT_MAX_DEPTH = 64


@dataclass(frozen=True)
class ParserOptions:
    """
    Options shared by every parse call.

    Args:
        ecma_version: Edition whose grammar is accepted (5, 2015..2025)
        strict: Disable the Annex B (web compatibility) grammar
        max_depth: Deepest allowed nesting of groups and classes
    """
    ecma_version: Union[int, EcmaVersion] = LATEST_ECMA_VERSION
    strict: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self):
        object.__setattr__(self, "ecma_version", resolve_ecma_version(self.ecma_version))
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
