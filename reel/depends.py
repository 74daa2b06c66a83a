from functools import cache
from typing import Annotated, Any, Callable, TypeVar

from fastapi import Depends, FastAPI

T = TypeVar("T")


@cache
def provider(tp: type) -> Callable[[], Any]:
    # placeholder dependency, replaced per app by bind()
    def unbound() -> Any:
        raise LookupError(f"No value bound for {tp.__name__}")

    return unbound


def bind(app: FastAPI, tp: type[T], value: T) -> None:
    app.dependency_overrides[provider(tp)] = lambda: value


class Injected:
    """`Injected[Config]` resolves to whatever was bound for `Config` on the app."""

    def __class_getitem__(cls, tp: type) -> Any:
        return Annotated[tp, Depends(provider(tp))]
