"""
ECMAScript editions understood by the parser.

Grammar differences between editions are kept as data: each entry of
FEATURES names a construct and the first edition that accepts it.  The
parser asks ``supports(version, feature)`` at every decision point instead
of branching on year literals.
"""

from enum import IntEnum
from typing import Union


class EcmaVersion(IntEnum):
    """Supported ECMAScript editions (``5`` and the yearly releases)."""

    ES5 = 5
    ES2015 = 2015
    ES2016 = 2016
    ES2017 = 2017
    ES2018 = 2018
    ES2019 = 2019
    ES2020 = 2020
    ES2021 = 2021
    ES2022 = 2022
    ES2023 = 2023
    ES2024 = 2024
    ES2025 = 2025


LATEST_ECMA_VERSION = EcmaVersion.ES2025


# feature name -> first edition accepting it
FEATURES = {
    # flags
    "flag_y": EcmaVersion.ES2015,
    "flag_u": EcmaVersion.ES2015,
    "flag_s": EcmaVersion.ES2018,
    "flag_d": EcmaVersion.ES2022,
    "flag_v": EcmaVersion.ES2024,
    # pattern grammar
    "lookbehind": EcmaVersion.ES2018,
    "named_groups": EcmaVersion.ES2018,
    "property_escapes": EcmaVersion.ES2018,
    "unicode_group_names": EcmaVersion.ES2020,
    "strict_named_references": EcmaVersion.ES2023,
    "properties_of_strings": EcmaVersion.ES2024,
    "duplicate_named_groups": EcmaVersion.ES2025,
    "modifiers": EcmaVersion.ES2025,
}


def resolve_ecma_version(value: Union[int, EcmaVersion, None]) -> EcmaVersion:
    """Coerce a year (or None for the latest edition) to an EcmaVersion.

    Raises ValueError for editions this package does not know about.
    """
    if value is None:
        return LATEST_ECMA_VERSION
    if isinstance(value, bool):
        raise ValueError(f"'{value}' is not a valid ECMA version")
    try:
        return EcmaVersion(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid ECMA version") from None


def supports(version: EcmaVersion, feature: str) -> bool:
    """Return True if ``feature`` is part of the grammar of ``version``."""
    return version >= FEATURES[feature]
