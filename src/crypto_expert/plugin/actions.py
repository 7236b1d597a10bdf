"""Chat-plugin actions.

Each action answers a chat message through a callback and returns a
ToolResult; failures are reported to the user and returned, never raised.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from crypto_expert.errors import CryptoExpertError
from crypto_expert.results import ToolResult
from crypto_expert.services import MarketDataService

logger = logging.getLogger(__name__)

CATEGORY_PREVIEW = 10


@dataclass(frozen=True)
class ActionMessage:
    """Incoming chat message."""

    text: str
    user: str = "user"


@dataclass(frozen=True)
class ActionContent:
    """Content sent back to the chat."""

    text: str
    actions: list[str] = field(default_factory=list)
    source: str | None = None


ActionCallback = Callable[[ActionContent], Awaitable[None]]
ActionHandler = Callable[[ActionMessage, ActionCallback | None], Awaitable[ToolResult]]


@dataclass(frozen=True)
class Action:
    """A named chat action.

    Attributes:
        name: Upper-case action name, e.g. GET_COIN_CATEGORIES
        description: What the action does
        similes: Alternative names that resolve to this action
        examples: (user text, agent text) pairs shown to the host
        handler: Coroutine answering a message
    """

    name: str
    description: str
    handler: ActionHandler
    similes: tuple[str, ...] = ()
    examples: tuple[tuple[str, str], ...] = ()

    async def validate(self, message: ActionMessage) -> bool:
        return True

    def answers_to(self, name: str) -> bool:
        key = name.strip().upper()
        return key == self.name or key in self.similes

    async def run(self, message: ActionMessage, callback: ActionCallback | None = None) -> ToolResult:
        return await self.handler(message, callback)


async def _send(callback: ActionCallback | None, content: ActionContent) -> None:
    if callback is not None:
        await callback(content)


def _reply(text: str, action: str) -> ActionContent:
    return ActionContent(text=text, actions=[action], source="coingecko")


def build_actions(market: MarketDataService) -> list[Action]:
    """The plugin's actions, bound to the market data service."""

    async def get_coin_categories(message: ActionMessage, callback: ActionCallback | None) -> ToolResult:
        await _send(
            callback,
            _reply(
                "I am fetching the list of categories from CoinGecko. This may take a few seconds...",
                "GET_COIN_CATEGORIES",
            ),
        )
        try:
            categories = await market.fetch_categories()
        except CryptoExpertError as e:
            logger.error("GET_COIN_CATEGORIES failed: %s", e.message)
            content = _reply(
                "I encountered an error while fetching cryptocurrency categories. Please try again.",
                "GET_COIN_CATEGORIES",
            )
            await _send(callback, content)
            return ToolResult.from_error(e, data=content)

        lines = [f"- {c.name} (ID: {c.category_id})" for c in categories[:CATEGORY_PREVIEW]]
        text = (
            f"Here are the first {len(lines)} cryptocurrency categories:\n"
            + "\n".join(lines)
            + f"\n\nTotal categories available: {len(categories)}"
        )
        content = _reply(text, "GET_COIN_CATEGORIES")
        await _send(callback, content)
        return ToolResult.success(content)

    async def get_specific_category(message: ActionMessage, callback: ActionCallback | None) -> ToolResult:
        # The whole message text is the search term
        needle = message.text.strip().lower()
        try:
            categories = await market.fetch_categories()
        except CryptoExpertError as e:
            logger.error("GET_SPECIFIC_CATEGORY failed: %s", e.message)
            content = _reply(
                "I encountered an error while searching for the category. Please try again.",
                "GET_SPECIFIC_CATEGORY",
            )
            await _send(callback, content)
            return ToolResult.from_error(e, data=content)

        match = next((c for c in categories if needle and c.matches(needle)), None)
        if match is None:
            text = (
                f'I couldn\'t find any category matching "{message.text.strip()}". '
                "Would you like to see the full list of available categories?"
            )
        else:
            text = (
                "I found the category you're looking for:\n"
                f"Name: {match.name}\n"
                f"ID: {match.category_id}"
            )
        content = _reply(text, "GET_SPECIFIC_CATEGORY")
        await _send(callback, content)
        return ToolResult.success(content)

    async def hello_world(message: ActionMessage, callback: ActionCallback | None) -> ToolResult:
        content = ActionContent(text="hello world!", actions=["HELLO_WORLD"])
        await _send(callback, content)
        return ToolResult.success(content)

    async def test_action(message: ActionMessage, callback: ActionCallback | None) -> ToolResult:
        content = ActionContent(
            text="This is a test response from the TEST_ACTION. If you see this, the action system is working!",
            actions=["TEST_ACTION"],
        )
        await _send(callback, content)
        return ToolResult.success(content)

    return [
        Action(
            name="GET_COIN_CATEGORIES",
            description="Get the list of all cryptocurrency categories from CoinGecko",
            handler=get_coin_categories,
            similes=(
                "LIST_CATEGORIES",
                "SHOW_CATEGORIES",
                "GET_ALL_CATEGORIES",
                "VIEW_CATEGORIES",
                "COIN_CATEGORIES",
                "CRYPTO_CATEGORIES",
                "CATEGORIES_LIST",
                "SHOW_ALL_CATEGORIES",
                "GET_CATEGORIES",
                "LIST_ALL_CATEGORIES",
            ),
            examples=(
                ("Show me all cryptocurrency categories", "I am fetching the list of categories from CoinGecko."),
            ),
        ),
        Action(
            name="GET_SPECIFIC_CATEGORY",
            description="Find a specific cryptocurrency category by name or id",
            handler=get_specific_category,
            similes=(
                "FIND_CATEGORY",
                "SEARCH_CATEGORY",
                "LOOKUP_CATEGORY",
                "GET_CATEGORY_INFO",
                "SPECIFIC_CATEGORY",
                "CATEGORY_INFO",
                "FIND_SPECIFIC_CATEGORY",
                "SEARCH_SPECIFIC_CATEGORY",
                "LOOKUP_SPECIFIC_CATEGORY",
                "GET_CATEGORY_DETAILS",
            ),
            examples=(("layer-1", "I found the category you're looking for:"),),
        ),
        Action(
            name="TEST_ACTION",
            description="Simple action used to check that actions are executed",
            handler=test_action,
            similes=("TEST", "SIMPLE_TEST", "BASIC_TEST"),
        ),
        Action(
            name="HELLO_WORLD",
            description="Responds with a simple hello world message",
            handler=hello_world,
            similes=("GREET", "SAY_HELLO"),
            examples=(("hello", "hello world!"),),
        ),
    ]
