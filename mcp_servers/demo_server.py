"""
Demo MCP Server

Provides tools for:
- Adding two numbers (operands truncated toward zero before summing)
- Telling a random dad joke
"""

import random
from typing import Any, Mapping, Optional

from error_handling import InvalidParametersError
from mcp_servers.base import BaseMCPServer, ToolDescriptor, ToolParameter, ToolRegistry, ToolResult


DAD_JOKES = (
    "Why don't scientists trust atoms? Because they make up everything!",
    "What do you call a fake noodle? An impasta!",
    "Why did the scarecrow win an award? He was outstanding in his field!",
    "I used to hate facial hair, but then it grew on me.",
    "Why don't eggs tell jokes? They'd crack each other up!",
    "What do you call a bear with no teeth? A gummy bear!",
    "Why couldn't the bicycle stand up by itself? It was two tired!",
    "What did the ocean say to the beach? Nothing, it just waved!",
    "Why do fathers take an extra pair of socks to golf? In case they get a hole in one!",
    "How does a penguin build its house? Igloos it together!",
    "What did the janitor say when he jumped out of the closet? Supplies!",
    "Why did the math book look so sad? Because it had too many problems.",
    "What do you call cheese that isn't yours? Nacho cheese!",
    "Why can't you hear a psychiatrist using the bathroom? Because the 'p' is silent.",
    "What's the best thing about Switzerland? I don't know, but the flag is a big plus!",
    "Did you hear about the restaurant on the moon? Great food, no atmosphere.",
    "Why do chicken coops only have two doors? Because if they had four, they'd be chicken sedans!",
    "What do you call a fish wearing a bowtie? Sofishticated!",
    "How do you organize a space party? You planet!",
    "Why don't skeletons fight each other? They don't have the guts!",
)

ADD_TOOL = ToolDescriptor(
    name="add",
    description="Add two integers: { a: int, b: int }",
    parameters=(
        ToolParameter("a", "number", "First integer"),
        ToolParameter("b", "number", "Second integer"),
    ),
)

DAD_JOKE_TOOL = ToolDescriptor(
    name="dad_joke",
    description="Get a random dad joke to brighten your day",
)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but not a JSON number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def add(a: Any, b: Any) -> int:
    """Sum of a and b, each truncated toward zero first."""
    if not (_is_number(a) and _is_number(b)):
        raise InvalidParametersError(
            "Invalid parameters: a and b must be numbers",
            details={"a": repr(a), "b": repr(b)},
        )
    try:
        return int(a) + int(b)
    except (OverflowError, ValueError) as e:
        # inf / nan
        raise InvalidParametersError(f"Invalid parameters: {e}") from e


def pick_joke(rng: random.Random) -> str:
    return rng.choice(DAD_JOKES)


class DemoMCPServer(BaseMCPServer):
    """MCP Server exposing the `add` and `dad_joke` tools."""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: random source for joke selection; a fresh time-seeded
                generator when omitted
        """
        self.rng = rng or random.Random()
        super().__init__()

    @property
    def name(self) -> str:
        return "demo"

    def register_tools(self, registry: ToolRegistry) -> None:
        registry.register(ADD_TOOL, self._add)
        registry.register(DAD_JOKE_TOOL, self._dad_joke)

    def random_joke(self) -> str:
        return pick_joke(self.rng)

    def _add(self, arguments: Mapping[str, Any]) -> ToolResult:
        total = add(arguments.get("a"), arguments.get("b"))
        return ToolResult.text(str(total))

    def _dad_joke(self, arguments: Mapping[str, Any]) -> ToolResult:
        return ToolResult.text(self.random_joke())
