from __future__ import annotations

import logging
from typing import Any

import pytest

from agentry.agents.rescue import Rescuable, rescue_from


class BaseProblem(Exception):
    pass


class SpecificProblem(BaseProblem):
    pass


class RescuingAgent(Rescuable):
    def __init__(self) -> None:
        self.rescued: list[BaseException] = []

    @rescue_from(BaseProblem)
    def on_problem(self, exception: BaseException) -> str:
        self.rescued.append(exception)
        return "recovered"

    @rescue_from(KeyError, when=lambda exc: exc.args == ("special",))
    def on_special_key(self, exception: BaseException) -> str:
        return "special"


def _raise(exception: BaseException) -> Any:
    raise exception


def test_subclass_exception_uses_parent_handler() -> None:
    agent = RescuingAgent()
    error = SpecificProblem("boom")

    result = agent.handle_exceptions(_raise, error)

    assert result == "recovered"
    assert agent.rescued == [error]


def test_successful_action_returns_its_result() -> None:
    agent = RescuingAgent()

    assert agent.handle_exceptions(lambda a, b=0: a + b, 1, b=2) == 3
    assert agent.rescued == []


def test_unhandled_exception_propagates_unchanged() -> None:
    agent = RescuingAgent()
    error = ValueError("nope")

    with pytest.raises(ValueError) as excinfo:
        agent.handle_exceptions(_raise, error)

    assert excinfo.value is error
    assert str(excinfo.value) == "nope"


def test_predicate_limits_matching() -> None:
    agent = RescuingAgent()

    assert agent.handle_exceptions(_raise, KeyError("special")) == "special"
    with pytest.raises(KeyError):
        agent.handle_exceptions(_raise, KeyError("other"))


def test_most_specific_handler_wins_regardless_of_order() -> None:
    class OrderedAgent(Rescuable):
        @rescue_from(SpecificProblem)
        def on_specific(self, exception: BaseException) -> str:
            return "specific"

        @rescue_from(BaseProblem)
        def on_base(self, exception: BaseException) -> str:
            return "base"

    agent = OrderedAgent()

    assert agent.handle_exceptions(_raise, SpecificProblem()) == "specific"
    assert agent.handle_exceptions(_raise, BaseProblem()) == "base"


def test_later_registration_wins_for_same_class() -> None:
    class Parent(Rescuable):
        @rescue_from(BaseProblem)
        def first(self, exception: BaseException) -> str:
            return "first"

    class Child(Parent):
        @rescue_from(BaseProblem)
        def second(self, exception: BaseException) -> str:
            return "second"

    assert Parent().handle_exceptions(_raise, BaseProblem()) == "first"
    assert Child().handle_exceptions(_raise, BaseProblem()) == "second"


def test_handlers_are_inherited() -> None:
    class Child(RescuingAgent):
        pass

    agent = Child()

    assert agent.handle_exceptions(_raise, SpecificProblem()) == "recovered"
    assert Child.rescue_handlers() == RescuingAgent.rescue_handlers()


def test_overridden_handler_method_is_used() -> None:
    class Child(RescuingAgent):
        def on_problem(self, exception: BaseException) -> str:
            return "child"

    assert Child().handle_exceptions(_raise, BaseProblem()) == "child"


def test_register_rescue_accepts_callables() -> None:
    class Registered(Rescuable):
        pass

    Registered.register_rescue(
        LookupError, handler=lambda agent, exc: f"{type(agent).__name__}:{exc.args[0]}"
    )

    assert Registered().handle_exceptions(_raise, IndexError("i")) == "Registered:i"


def test_rescue_from_requires_exception_classes() -> None:
    with pytest.raises(TypeError):
        rescue_from()
    with pytest.raises(TypeError):
        rescue_from(str)  # type: ignore[arg-type]


def test_cause_is_rescued_when_wrapper_has_no_handler() -> None:
    agent = RescuingAgent()
    cause = SpecificProblem("root")

    def action() -> None:
        try:
            raise cause
        except SpecificProblem as exc:
            raise RuntimeError("wrapped") from exc

    assert agent.handle_exceptions(action) == "recovered"
    assert agent.rescued == [cause]


def test_exception_raised_while_handling_rescues_the_original() -> None:
    agent = RescuingAgent()
    original = SpecificProblem("root")

    def action() -> None:
        try:
            raise original
        except SpecificProblem:
            raise RuntimeError("raised while handling")

    assert agent.handle_exceptions(action) == "recovered"
    assert agent.rescued == [original]


def test_suppressed_context_is_not_rescued() -> None:
    agent = RescuingAgent()

    def action() -> None:
        try:
            raise SpecificProblem("hidden")
        except SpecificProblem:
            raise RuntimeError("replaced") from None

    with pytest.raises(RuntimeError, match="replaced"):
        agent.handle_exceptions(action)
    assert agent.rescued == []


def test_handler_registered_on_parent_later_reaches_subclass() -> None:
    class Parent(Rescuable):
        pass

    class Child(Parent):
        pass

    Parent.register_rescue(ValueError, handler=lambda agent, exc: "late")

    assert Child().handle_exceptions(_raise, ValueError()) == "late"
    assert Child.rescue_handlers() == Parent.rescue_handlers()


def test_subclass_registration_does_not_leak_to_parent() -> None:
    class Parent(Rescuable):
        pass

    class Child(Parent):
        pass

    Child.register_rescue(ValueError, handler=lambda agent, exc: "child only")

    assert Child().handle_exceptions(_raise, ValueError()) == "child only"
    with pytest.raises(ValueError):
        Parent().handle_exceptions(_raise, ValueError())


def test_exception_handler_reports_whether_handled() -> None:
    handler = RescuingAgent().exception_handler()

    assert handler(BaseProblem()) == (True, "recovered")
    assert handler(ValueError()) == (False, None)


def test_keyboard_interrupt_is_not_intercepted() -> None:
    class Greedy(Rescuable):
        @rescue_from(BaseException)
        def on_anything(self, exception: BaseException) -> str:
            return "caught"

    with pytest.raises(KeyboardInterrupt):
        Greedy().handle_exceptions(_raise, KeyboardInterrupt())


def test_handle_exception_logs_type_message_and_frames(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger=__name__)

    try:
        raise SpecificProblem("went wrong")
    except SpecificProblem as exc:
        result = RescuingAgent.handle_exception(exc)

    assert result is None
    messages = [record.getMessage() for record in caplog.records]
    assert messages[0] == "[RescuingAgent] SpecificProblem: went wrong"
    assert len(messages) == 2
    assert "test_handle_exception_logs_type_message_and_frames" in messages[1]
    assert all(record.levelno == logging.ERROR for record in caplog.records)


def test_handle_exception_without_traceback_logs_one_line(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.ERROR, logger=__name__)

    RescuingAgent.handle_exception(ValueError("never raised"))

    assert [record.getMessage() for record in caplog.records] == [
        "[RescuingAgent] ValueError: never raised"
    ]


def test_handle_exception_logs_innermost_ten_frames(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger=__name__)

    def recurse(depth: int) -> None:
        if depth == 0:
            raise BaseProblem("deep")
        recurse(depth - 1)

    try:
        recurse(20)
    except BaseProblem as exc:
        RescuingAgent.handle_exception(exc)

    frames = caplog.records[-1].getMessage().split("\n")
    entries = [line for line in frames if line.startswith('File "')]
    assert len(entries) == 10
    assert 'raise BaseProblem("deep")' in frames[1]
    assert all(entry.endswith("in recurse") for entry in entries)
    assert not any("repeated" in line for line in frames)
