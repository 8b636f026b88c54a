"""Regular expression flag parsing."""

from dataclasses import dataclass
from typing import Optional

from .ecma_versions import EcmaVersion, supports
from .errors import RegExpSyntaxError, INVALID_FLAGS, duplicated_flag, invalid_flag


# flag character -> RegExpFlags attribute
FLAG_ATTRIBUTES = {
    'd': 'has_indices',
    'g': 'global_',
    'i': 'ignore_case',
    'm': 'multiline',
    's': 'dot_all',
    'u': 'unicode',
    'v': 'unicode_sets',
    'y': 'sticky',
}

# flag character -> feature gating it
FLAG_FEATURES = {
    'y': 'flag_y',
    'u': 'flag_u',
    's': 'flag_s',
    'd': 'flag_d',
    'v': 'flag_v',
}


@dataclass(frozen=True)
class RegExpFlags:
    """Validated flag set."""
    has_indices: bool = False
    global_: bool = False
    ignore_case: bool = False
    multiline: bool = False
    dot_all: bool = False
    unicode: bool = False
    unicode_sets: bool = False
    sticky: bool = False

    @property
    def unicode_mode(self) -> bool:
        """True when either ``u`` or ``v`` selects the unicode grammar."""
        return self.unicode or self.unicode_sets


def read_flags(
    flags: str,
    ecma_version: EcmaVersion,
    offset: int = 0,
    context: Optional[str] = None,
) -> RegExpFlags:
    """
    Validate a flag string.

    Args:
        flags: The flag characters, e.g. ``"gu"``
        ecma_version: Edition whose flags are accepted
        offset: Code unit offset of the first flag, used for error indexes
        context: Source text quoted in error messages

    Returns:
        The RegExpFlags for ``flags``

    Raises:
        RegExpSyntaxError: for an unknown, unsupported, repeated or
        conflicting flag
    """
    seen = {}
    values = {}
    index = offset

    for ch in flags:
        if ch in seen:
            raise RegExpSyntaxError(duplicated_flag(ch), index, context)
        seen[ch] = index

        attribute = FLAG_ATTRIBUTES.get(ch)
        feature = FLAG_FEATURES.get(ch)
        if attribute is None or (feature is not None and not supports(ecma_version, feature)):
            raise RegExpSyntaxError(invalid_flag(ch), index, context)
        values[attribute] = True

        index += 2 if ord(ch) > 0xFFFF else 1

    if 'u' in seen and 'v' in seen:
        raise RegExpSyntaxError(INVALID_FLAGS, max(seen['u'], seen['v']), context)

    return RegExpFlags(**values)
