import re
from dataclasses import dataclass

# a single `first-last` or `-suffix` range, nothing else
_RANGE_RE = re.compile(r"bytes=(\d*)-(\d*)", re.ASCII)


@dataclass(frozen=True)
class RangeSpec:
    """Inclusive byte interval that fits inside the object it was parsed against."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class NoRange:
    pass


@dataclass(frozen=True)
class MalformedRange:
    header: str


@dataclass(frozen=True)
class UnsatisfiableRange:
    header: str


def _offset(digits: str, total: int) -> int | None:
    """The value of `digits`, or None when it is at least `total`."""
    digits = digits.lstrip("0") or "0"
    # int() refuses very long strings, and anything longer than `total` is out of bounds
    if len(digits) > len(str(total)):
        return None
    value = int(digits)
    return value if value < total else None


ParseResult = RangeSpec | NoRange | MalformedRange | UnsatisfiableRange


def parse_range(header: str | None, total: int) -> ParseResult:
    if header is None:
        return NoRange()
    if total == 0:
        # there is no byte to point at
        return UnsatisfiableRange(header)
    match = _RANGE_RE.fullmatch(header.strip())
    if match is None:
        return MalformedRange(header)
    first, last = match.groups()
    if not first and not last:
        return MalformedRange(header)
    if not first:
        suffix = _offset(last, total)
        if suffix == 0:
            return UnsatisfiableRange(header)
        if suffix is None:
            return RangeSpec(start=0, end=total - 1)
        return RangeSpec(start=total - suffix, end=total - 1)
    start = _offset(first, total)
    end = _offset(last, total) if last else total - 1
    if start is None or end is None or start > end:
        return UnsatisfiableRange(header)
    return RangeSpec(start=start, end=end)
