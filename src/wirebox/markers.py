from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, TypeVar

from wirebox.exceptions import WireboxInvalidMarkerError

F = TypeVar("F", bound=Callable[..., Any])

INJECT_MARKER_ATTR = "__wirebox_inject__"


def inject(member: F) -> F:
    """Mark a constructor or method for injection.

    Marking ``__init__`` (or a classmethod acting as an alternative
    constructor) selects it as the constructor the injector calls, resolving
    every annotated parameter. Marking a regular method makes the injector call
    it right after construction with resolved arguments.

    Examples:
        .. code-block:: python

            class ConsoleWriter:
                @inject
                def __init__(self, formatter: MessageFormatter) -> None:
                    self.formatter = formatter

                @inject
                def set_clock(self, clock: Clock) -> None:
                    self.clock = clock

    """
    if isinstance(member, classmethod):
        setattr(member.__func__, INJECT_MARKER_ATTR, True)
        return member
    if inspect.isfunction(member):
        setattr(member, INJECT_MARKER_ATTR, True)
        return member
    raise WireboxInvalidMarkerError(member)


def is_injectable(member: Any) -> bool:
    """Return whether a function, bound method or classmethod carries the ``@inject`` mark."""
    if isinstance(member, classmethod | staticmethod):
        member = member.__func__
    member = getattr(member, "__func__", member)
    return getattr(member, INJECT_MARKER_ATTR, False) is True
