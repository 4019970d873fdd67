"""Declarative exception handling for agents.

Agents declare rescue handlers on methods::

    class SupportAgent(Agent):
        @rescue_from(TimeoutError)
        def on_timeout(self, exception):
            return "The model timed out, please retry."

Handlers are collected when the class is defined and inherited by
subclasses. When an exception escapes :meth:`Rescuable.process` or
:meth:`Rescuable.handle_exceptions`, the handler registered for the most
specific class in the exception's MRO runs and its return value replaces
the failed result. Exceptions without a handler propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, TypeVar

from agentry.util.logging import format_traceback_entries, get_logger

F = TypeVar("F", bound=Callable[..., Any])

Predicate = Callable[[BaseException], bool]
Handler = str | Callable[[Any, BaseException], Any]

BACKTRACE_LIMIT = 10
_RESCUE_ATTR = "__rescue_from__"


@dataclass(frozen=True)
class RescueHandler:
    """A registered exception handler.

    Attributes:
        exception_type: Exception class the handler is registered for.
        handler: Method name on the agent, or a callable ``(agent, exception)``.
        when: Optional predicate that must accept the exception.
    """

    exception_type: type[BaseException]
    handler: Handler
    when: Predicate | None = None

    def matches(self, exception: BaseException) -> bool:
        return self.when is None or bool(self.when(exception))


def rescue_from(
    *exception_types: type[BaseException],
    when: Predicate | None = None,
) -> Callable[[F], F]:
    """Mark a method as the rescue handler for ``exception_types``.

    The decorated method receives the exception and its return value becomes
    the result of the guarded call.

    Raises:
        TypeError: If no exception classes are given or one is not an
            exception class.
    """

    _check_exception_types(exception_types)

    def decorator(func: F) -> F:
        specs = getattr(func, _RESCUE_ATTR, ())
        setattr(func, _RESCUE_ATTR, specs + tuple((exc, when) for exc in exception_types))
        return func

    return decorator


class Rescuable:
    """Mixin that dispatches exceptions to declared rescue handlers."""

    # Handlers declared on this exact class; see rescue_handlers().
    _declared_rescue_handlers: ClassVar[tuple[RescueHandler, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        declared: list[RescueHandler] = []
        for name, member in vars(cls).items():
            specs = getattr(member, _RESCUE_ATTR, ()) if callable(member) else ()
            for exception_type, when in specs:
                declared.append(RescueHandler(exception_type, name, when))
        cls._declared_rescue_handlers = tuple(declared)

    @classmethod
    def rescue_handlers(cls) -> tuple[RescueHandler, ...]:
        """Return every handler visible to this class, base classes first."""

        handlers: list[RescueHandler] = []
        for klass in reversed(cls.__mro__):
            handlers.extend(vars(klass).get("_declared_rescue_handlers", ()))
        return tuple(handlers)

    @classmethod
    def register_rescue(
        cls,
        *exception_types: type[BaseException],
        handler: Handler,
        when: Predicate | None = None,
    ) -> None:
        """Register a handler without the decorator.

        Subclasses see the handler even when they were defined earlier.
        """

        _check_exception_types(exception_types)
        cls._declared_rescue_handlers = vars(cls).get("_declared_rescue_handlers", ()) + tuple(
            RescueHandler(exception_type, handler, when) for exception_type in exception_types
        )

    @classmethod
    def handler_for_rescue(cls, exception: BaseException) -> RescueHandler | None:
        """Return the handler for the most specific matching exception class.

        Within one exception class the most recently registered handler wins.
        """

        handlers = cls.rescue_handlers()
        for klass in type(exception).__mro__:
            for entry in reversed(handlers):
                if entry.exception_type is klass and entry.matches(exception):
                    return entry
        return None

    @classmethod
    def handle_exception(cls, exception: BaseException) -> None:
        """Log an exception that reached a job with no agent instance.

        This is the last stop for the exception: it is logged and dropped.
        """

        logger = get_logger(cls.__module__)
        logger.error("[%s] %s: %s", cls.__name__, type(exception).__name__, exception)
        entries = format_traceback_entries(exception, limit=BACKTRACE_LIMIT)
        if entries:
            logger.error("\n".join(entries))

    def rescue_with_handler(self, exception: BaseException) -> tuple[bool, Any]:
        """Run the handler for ``exception`` or for one of its causes.

        Returns:
            ``(True, result)`` when a handler ran, ``(False, None)`` otherwise.
        """

        seen: set[int] = set()
        current: BaseException | None = exception
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            entry = self.handler_for_rescue(current)
            if entry is not None:
                get_logger(type(self).__module__).debug(
                    "Rescued %s with %s.", type(current).__name__, _describe(entry.handler)
                )
                return True, self._invoke_rescue(entry, current)
            current = _underlying(current)
        return False, None

    def handle_exceptions(self, action: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Call ``action`` and rescue what it raises.

        Raises:
            Exception: The original exception when no handler matches.
        """

        try:
            return action(*args, **kwargs)
        except Exception as exception:
            handled, result = self.rescue_with_handler(exception)
            if not handled:
                raise
            return result

    def process(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return super().process(*args, **kwargs)  # type: ignore[misc]
        except Exception as exception:
            handled, result = self.rescue_with_handler(exception)
            if not handled:
                raise
            return result

    def exception_handler(self) -> Callable[[BaseException], tuple[bool, Any]]:
        """Return a callable that rescues exceptions with this agent's handlers."""

        return self.rescue_with_handler

    def _invoke_rescue(self, entry: RescueHandler, exception: BaseException) -> Any:
        if isinstance(entry.handler, str):
            return getattr(self, entry.handler)(exception)
        return entry.handler(self, exception)


def _check_exception_types(exception_types: tuple[Any, ...]) -> None:
    if not exception_types:
        raise TypeError("At least one exception class is required.")
    for exception_type in exception_types:
        if not (isinstance(exception_type, type) and issubclass(exception_type, BaseException)):
            raise TypeError(f"{exception_type!r} is not an exception class.")


def _underlying(exception: BaseException) -> BaseException | None:
    # Explicit ``raise ... from`` first, then the exception being handled
    # when this one was raised, unless ``from None`` suppressed it.
    if exception.__cause__ is not None:
        return exception.__cause__
    if exception.__suppress_context__:
        return None
    return exception.__context__


def _describe(handler: Handler) -> str:
    if isinstance(handler, str):
        return handler
    return getattr(handler, "__name__", repr(handler))
