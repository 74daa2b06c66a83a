"""Turning a parsed `Range` header into what the response will contain.

Everything here is pure: the same parse result and length always give the same
plan, and the same plan always gives the same status and headers.
"""

from dataclasses import dataclass

from reel.ranges import MalformedRange, NoRange, ParseResult, RangeSpec, UnsatisfiableRange


@dataclass(frozen=True)
class FullContent:
    total: int


@dataclass(frozen=True)
class PartialContent:
    range: RangeSpec
    total: int


@dataclass(frozen=True)
class Unsatisfiable:
    total: int


TransferPlan = FullContent | PartialContent | Unsatisfiable


def plan_transfer(result: ParseResult, total: int) -> TransferPlan:
    """Malformed headers are ignored and the whole object is sent."""
    if isinstance(result, RangeSpec):
        return PartialContent(result, total)
    if isinstance(result, UnsatisfiableRange):
        return Unsatisfiable(total)
    if isinstance(result, (NoRange, MalformedRange)):
        return FullContent(total)
    raise TypeError(f"Unexpected parse result {result!r}")


def response_status(plan: TransferPlan) -> int:
    if isinstance(plan, PartialContent):
        return 206
    if isinstance(plan, Unsatisfiable):
        return 416
    return 200


def body_interval(plan: TransferPlan) -> tuple[int, int]:
    """Offset of the first body byte and the number of body bytes."""
    if isinstance(plan, PartialContent):
        return plan.range.start, len(plan.range)
    if isinstance(plan, FullContent):
        return 0, plan.total
    return 0, 0


def response_headers(plan: TransferPlan, media_type: str) -> dict[str, str]:
    if isinstance(plan, Unsatisfiable):
        return {"Content-Range": f"bytes */{plan.total}", "Content-Length": "0"}
    headers = {
        "Content-Type": media_type,
        "Accept-Ranges": "bytes",
        "Content-Length": str(body_interval(plan)[1]),
    }
    if isinstance(plan, PartialContent):
        headers["Content-Range"] = f"bytes {plan.range.start}-{plan.range.end}/{plan.total}"
    return headers
