import pytest

from reel.ranges import MalformedRange, NoRange, RangeSpec, UnsatisfiableRange, parse_range


def test_no_header() -> None:
    assert parse_range(None, 1000) == NoRange()


@pytest.mark.parametrize(
    "header, expected",
    [
        ("bytes=500-599", RangeSpec(500, 599)),
        ("bytes=0-0", RangeSpec(0, 0)),
        ("bytes=999-999", RangeSpec(999, 999)),
        ("bytes=0-999", RangeSpec(0, 999)),
        ("bytes=900-", RangeSpec(900, 999)),
        ("bytes=0-", RangeSpec(0, 999)),
        ("bytes=-100", RangeSpec(900, 999)),
        ("bytes=-5000", RangeSpec(0, 999)),
        (" bytes=10-20 ", RangeSpec(10, 20)),
    ],
)
def test_satisfiable(header: str, expected: RangeSpec) -> None:
    assert parse_range(header, 1000) == expected


@pytest.mark.parametrize(
    "header",
    [
        "items=0-10",
        "0-10",
        "bytes=",
        "bytes=-",
        "bytes=a-b",
        "bytes=1-2,5-6",
        "bytes=+1-2",
        "bytes=1-2-3",
        "bytes=١-٢",
    ],
)
def test_malformed(header: str) -> None:
    assert parse_range(header, 1000) == MalformedRange(header)


@pytest.mark.parametrize(
    "header",
    [
        "bytes=1000-1010",
        "bytes=1000-",
        "bytes=5000-",
        "bytes=0-1000",
        "bytes=600-500",
        "bytes=-0",
    ],
)
def test_unsatisfiable(header: str) -> None:
    assert parse_range(header, 1000) == UnsatisfiableRange(header)


@pytest.mark.parametrize("header", ["bytes=0-0", "bytes=0-", "bytes=-1", "garbage"])
def test_empty_object_is_never_satisfiable(header: str) -> None:
    assert parse_range(header, 0) == UnsatisfiableRange(header)


def test_range_length() -> None:
    assert len(RangeSpec(500, 599)) == 100
    assert len(RangeSpec(7, 7)) == 1


@pytest.mark.parametrize(
    "header",
    [
        "bytes=" + "9" * 5000 + "-",
        "bytes=0-" + "9" * 5000,
        "bytes=" + "9" * 5000 + "-" + "9" * 5001,
    ],
)
def test_huge_offsets_are_unsatisfiable(header: str) -> None:
    assert parse_range(header, 1000) == UnsatisfiableRange(header)


def test_huge_suffix_selects_the_whole_object() -> None:
    assert parse_range("bytes=-" + "9" * 5000, 1000) == RangeSpec(0, 999)


def test_leading_zeros() -> None:
    assert parse_range("bytes=" + "0" * 5000 + "5-0010", 1000) == RangeSpec(5, 10)
    assert parse_range("bytes=-" + "0" * 5000 + "1", 1000) == RangeSpec(999, 999)
