"""The outcome of mapping a local (wall clock) reading onto the timeline.

A local reading can map to no instant at all (it is skipped by a
"spring forward" transition), to exactly one, or to two (it is repeated
by a "fall back" transition). The three classes below model exactly these
cases. The rule-based timezones produce them with plain offsets in seconds,
the public providers with :class:`~civiltime.FixedOffset` and
:class:`~civiltime.Instant` values.
"""

from __future__ import annotations

from typing import Callable, Generic, Iterator, TypeVar, Union

NS_PER_SEC = 1_000_000_000
SECS_PER_DAY = 86_400
NS_PER_DAY = SECS_PER_DAY * NS_PER_SEC
# The nanosecond field of a leap second lies in [1e9, 2e9)
LEAP_NANOS_MAX = 2 * NS_PER_SEC
# Offsets are strictly within a day in either direction
MAX_OFFSET_SECS = SECS_PER_DAY

_T = TypeVar("_T")
_U = TypeVar("_U")


class SkippedTime(ValueError):
    """A local date and time is skipped in a timezone, e.g. because of DST"""


class RepeatedTime(ValueError):
    """A local date and time is repeated in a timezone, e.g. because of DST"""


class Skipped:
    """The local reading doesn't exist: it falls in a gap
    (e.g. clocks moving forward for DST)."""

    __slots__ = ()

    def single(self) -> None:
        return None

    def earliest(self) -> None:
        return None

    def latest(self) -> None:
        return None

    def map(self, f: Callable[[object], object], /) -> Skipped:
        return self

    def unwrap(self) -> object:
        raise SkippedTime("The local time is skipped in this timezone")

    def __iter__(self) -> Iterator[object]:
        return iter(())

    def __bool__(self) -> bool:
        return False

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Skipped):
            return True
        return NotImplemented

    def __hash__(self) -> int:
        return hash(Skipped)

    def __repr__(self) -> str:
        return "Skipped()"


class Single(Generic[_T]):
    """The local reading maps to exactly one value."""

    __slots__ = ("value",)

    value: _T

    def __init__(self, value: _T):
        self.value = value

    def single(self) -> _T:
        return self.value

    def earliest(self) -> _T:
        return self.value

    def latest(self) -> _T:
        return self.value

    def map(self, f: Callable[[_T], _U], /) -> Single[_U]:
        return Single(f(self.value))

    def unwrap(self) -> _T:
        return self.value

    def __iter__(self) -> Iterator[_T]:
        yield self.value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Single):
            return bool(self.value == other.value)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Single, self.value))

    def __repr__(self) -> str:
        return f"Single({self.value!r})"


class Ambiguous(Generic[_T]):
    """The local reading occurs twice (e.g. clocks moving back for DST).

    ``earlier`` is the candidate that occurs first on the timeline,
    ``later`` the one that occurs second.
    """

    __slots__ = ("earlier", "later")

    earlier: _T
    later: _T

    def __init__(self, earlier: _T, later: _T):
        self.earlier = earlier
        self.later = later

    def single(self) -> None:
        return None

    def earliest(self) -> _T:
        return self.earlier

    def latest(self) -> _T:
        return self.later

    def map(self, f: Callable[[_T], _U], /) -> Ambiguous[_U]:
        return Ambiguous(f(self.earlier), f(self.later))

    def unwrap(self) -> _T:
        raise RepeatedTime("The local time is repeated in this timezone")

    def __iter__(self) -> Iterator[_T]:
        yield self.earlier
        yield self.later

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Ambiguous):
            return bool(
                self.earlier == other.earlier and self.later == other.later
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Ambiguous, self.earlier, self.later))

    def __repr__(self) -> str:
        return f"Ambiguous({self.earlier!r}, {self.later!r})"


Resolution = Union[Skipped, Single[_T], Ambiguous[_T]]
