"""
UTF-16 code unit reader.

Positions reported by the parser are offsets in UTF-16 code units, the way
JavaScript strings are indexed.  The reader keeps the source as a list of
code units and decodes surrogate pairs only in unicode mode, where a pair
reads as one character of width 2.
"""

from typing import List, Optional

from .unicode import is_lead_surrogate, is_trail_surrogate, combine_surrogate_pair


def to_code_units(source: str) -> List[int]:
    """Encode a Python string (lone surrogates allowed) as UTF-16 code units."""
    data = source.encode('utf-16-le', 'surrogatepass')
    return [data[i] | (data[i + 1] << 8) for i in range(0, len(data), 2)]


def from_code_units(units: List[int]) -> str:
    """Decode UTF-16 code units back to a Python string."""
    data = b''.join(unit.to_bytes(2, 'little') for unit in units)
    return data.decode('utf-16-le', 'surrogatepass')


class Reader:
    """Cursor over a slice of code units with up to four characters of lookahead."""

    def __init__(self):
        self.units: List[int] = []
        self.unicode = False
        self.start = 0
        self.end = 0
        self._i = 0
        self._chars: List[Optional[str]] = [None] * 4
        self._widths: List[int] = [1] * 4

    def reset(self, units: List[int], start: int, end: int, unicode: bool) -> None:
        self.units = units
        self.unicode = unicode
        self.start = start
        self.end = end
        self.rewind(start)

    @property
    def index(self) -> int:
        return self._i

    @property
    def current(self) -> Optional[str]:
        return self._chars[0]

    @property
    def next(self) -> Optional[str]:
        return self._chars[1]

    @property
    def next2(self) -> Optional[str]:
        return self._chars[2]

    @property
    def next3(self) -> Optional[str]:
        return self._chars[3]

    def _at(self, i: int) -> Optional[str]:
        if i >= self.end:
            return None
        unit = self.units[i]
        if self.unicode and is_lead_surrogate(unit) and i + 1 < self.end:
            trail = self.units[i + 1]
            if is_trail_surrogate(trail):
                return chr(combine_surrogate_pair(unit, trail))
        return chr(unit)

    def rewind(self, index: int) -> None:
        """Move the cursor to ``index`` and refill the lookahead window."""
        self._i = index
        i = index
        for slot in range(4):
            ch = self._at(i)
            self._chars[slot] = ch
            width = 2 if ch is not None and ord(ch) > 0xFFFF else 1
            self._widths[slot] = width
            i += width

    def advance(self) -> None:
        if self._chars[0] is not None:
            self.rewind(self._i + self._widths[0])

    def eat(self, ch: str) -> bool:
        if self._chars[0] == ch:
            self.advance()
            return True
        return False

    def eat2(self, ch1: str, ch2: str) -> bool:
        if self._chars[0] == ch1 and self._chars[1] == ch2:
            self.advance()
            self.advance()
            return True
        return False

    def eat3(self, ch1: str, ch2: str, ch3: str) -> bool:
        if self._chars[0] == ch1 and self._chars[1] == ch2 and self._chars[2] == ch3:
            self.advance()
            self.advance()
            self.advance()
            return True
        return False

    def text(self, start: int, end: int) -> str:
        """Source text between two code unit offsets."""
        return from_code_units(self.units[start:end])
