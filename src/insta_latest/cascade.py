"""Ordered first-match-wins search over candidate patterns.

The target's markup rotates obfuscated class names and its embedded state
has moved between nesting paths over time. Every lookup in the strategies is
expressed as an ordered candidate list handed to :func:`first_match`, so the
"which pattern works today" question lives in data, not control flow.
"""
from dataclasses import dataclass
from typing import Any, Callable, Iterable, TypeVar

C = TypeVar("C")


@dataclass(frozen=True)
class CascadeHit:
    """The winning candidate and the value its probe produced."""
    index: int
    candidate: Any
    value: Any


def _is_miss(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict, set)) and not value:
        return True
    return False


def first_match(candidates: Iterable[C], probe: Callable[[C], Any]) -> CascadeHit | None:
    """Return the first candidate whose probe yields a usable value.

    A probe result of ``None`` or an empty str/container is a miss. Candidates
    after the winner are never probed. Probe exceptions propagate.
    """
    for i, candidate in enumerate(candidates):
        value = probe(candidate)
        if not _is_miss(value):
            return CascadeHit(index=i, candidate=candidate, value=value)
    return None
