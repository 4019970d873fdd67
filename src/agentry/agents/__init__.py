"""Agent framework package."""

from agentry.agents.base import Agent, BaseAgent
from agentry.agents.rescue import RescueHandler, Rescuable, rescue_from

__all__ = [
    "Agent",
    "BaseAgent",
    "RescueHandler",
    "Rescuable",
    "rescue_from",
]
