"""Capture group name registry."""

from typing import Dict, List, Tuple

# (disjunction serial, alternative index) pairs from the pattern root down
BranchPath = Tuple[Tuple[int, int], ...]


def _separated(a: BranchPath, b: BranchPath) -> bool:
    """True if two branch paths sit in different alternatives of one disjunction."""
    for step_a, step_b in zip(a, b):
        if step_a != step_b:
            return step_a[0] == step_b[0]
    return False


class GroupSpecifiers:
    """
    Named groups declared in a pattern.

    Before ES2025 a name may be declared once per pattern.  From ES2025 the
    same name may be reused when the declarations can never both participate
    in a match, i.e. they sit in different alternatives of the same
    disjunction.
    """

    def __init__(self, allow_separated_duplicates: bool = False):
        self.allow_separated_duplicates = allow_separated_duplicates
        self.clear()

    def clear(self) -> None:
        self._names: Dict[str, List[Tuple[BranchPath, int]]] = {}
        self._path: List[Tuple[int, int]] = []
        self._disjunctions = 0

    def is_empty(self) -> bool:
        return not self._names

    def enter_disjunction(self) -> None:
        self._disjunctions += 1
        self._path.append((self._disjunctions, 0))

    def enter_alternative(self, index: int) -> None:
        self._path[-1] = (self._path[-1][0], index)

    def leave_disjunction(self) -> None:
        self._path.pop()

    def has_in_pattern(self, name: str) -> bool:
        return name in self._names

    def has_in_scope(self, name: str) -> bool:
        declarations = self._names.get(name)
        if not declarations:
            return False
        if not self.allow_separated_duplicates:
            return True
        here = tuple(self._path)
        return any(not _separated(path, here) for path, _ in declarations)

    def add_to_scope(self, name: str, group_index: int) -> None:
        self._names.setdefault(name, []).append((tuple(self._path), group_index))

    def indexes(self, name: str) -> List[int]:
        """Capture indexes declared under ``name``, in source order."""
        return [index for _, index in self._names.get(name, [])]
