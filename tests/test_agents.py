from __future__ import annotations

import pytest

from agentry.agents import Agent, rescue_from
from agentry.errors import AgentActionError, LLMClientError
from agentry.llm.client import LLMClient


class FakeLLM(LLMClient):
    def __init__(self, responses: list[str | Exception]) -> None:
        self._responses = list(responses)
        self.calls: list[list[dict[str, str]]] = []

    def complete_chat(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> str:
        self.calls.append(messages)
        if not self._responses:
            raise AssertionError("No more fake responses available")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class SummaryAgent(Agent):
    def summarize(self, text: str) -> str:
        return self.prompt(f"Summarize: {text}", system="Be brief.")

    def shout(self, text: str) -> str:
        return text.upper()

    @rescue_from(LLMClientError)
    def on_llm_error(self, exception: BaseException) -> str:
        return f"unavailable: {exception}"


def test_process_runs_named_action() -> None:
    llm = FakeLLM(["short"])
    agent = SummaryAgent(llm)

    result = agent.process("summarize", "a long text")

    assert result == "short"
    assert llm.calls == [
        [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Summarize: a long text"},
        ]
    ]


def test_action_methods_exclude_framework_and_handlers() -> None:
    assert SummaryAgent.action_methods() == frozenset({"summarize", "shout"})


def test_unknown_action_raises() -> None:
    agent = SummaryAgent(FakeLLM([]))

    with pytest.raises(AgentActionError):
        agent.process("generate", [])


def test_llm_failure_inside_process_is_rescued() -> None:
    agent = SummaryAgent(FakeLLM([LLMClientError("status 503")]))

    assert agent.process("summarize", "text") == "unavailable: status 503"


def test_unrescued_error_in_process_propagates() -> None:
    error = AssertionError("No more fake responses available")
    agent = SummaryAgent(FakeLLM([error]))

    with pytest.raises(AssertionError) as excinfo:
        agent.process("summarize", "text")

    assert excinfo.value is error


def test_agent_id_defaults_to_snake_case_class_name() -> None:
    assert SummaryAgent(FakeLLM([])).agent_id == "summary_agent"
    assert SummaryAgent(FakeLLM([]), agent_id="custom").agent_id == "custom"
