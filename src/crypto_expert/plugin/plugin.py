"""CoinGecko chat plugin: action lookup, dispatch and debug routes."""

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from crypto_expert.results import ToolResult
from crypto_expert.services import MarketDataService

from .actions import Action, ActionContent, ActionMessage, build_actions

logger = logging.getLogger(__name__)

PLUGIN_NAME = "plugin-coingecko"


class ActionRequest(BaseModel):
    """Body for POST /actions/{name}."""

    text: str = Field("", description="Chat message text passed to the action")


class MessageBusService:
    """Reports the state of the message bus the plugin listens on."""

    service_type = "message-bus"

    def get_status(self) -> dict[str, Any]:
        return {
            "serviceType": self.service_type,
            "status": "active",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class CoinGeckoPlugin:
    """Chat-plugin variant of the agent.

    Example:
        ```python
        plugin = CoinGeckoPlugin(MarketDataService(client))
        result, contents = await plugin.dispatch("LIST_CATEGORIES", "show categories")
        app.include_router(router)
        ```
    """

    def __init__(self, market: MarketDataService, actions: list[Action] | None = None) -> None:
        self.name = PLUGIN_NAME
        self.actions = actions if actions is not None else build_actions(market)
        self.message_bus = MessageBusService()

    def find_action(self, name: str) -> Action | None:
        """Resolve an action by name or simile."""
        return next((action for action in self.actions if action.answers_to(name)), None)

    async def dispatch(self, name: str, text: str) -> tuple[ToolResult, list[ActionContent]]:
        """Run an action and collect everything it sent back.

        Returns:
            (ToolResult, list of ActionContent sent through the callback)

        Raises:
            KeyError: If no action answers to ``name``
        """
        action = self.find_action(name)
        if action is None:
            raise KeyError(name)

        message = ActionMessage(text=text)
        if not await action.validate(message):
            raise KeyError(name)

        sent: list[ActionContent] = []

        async def collect(content: ActionContent) -> None:
            logger.info("[%s] %s", action.name, content.text)
            sent.append(content)

        logger.info("Executing action %s", action.name)
        result = await action.run(message, collect)
        return result, sent


def get_plugin(request: Request) -> CoinGeckoPlugin:
    """Dependency injection for CoinGeckoPlugin from app.state."""
    plugin = getattr(request.app.state, "plugin", None)
    if plugin is None:
        raise RuntimeError("CoinGeckoPlugin not initialized. Check lifespan setup.")
    return plugin


PluginDep = Annotated[CoinGeckoPlugin, Depends(get_plugin)]

router = APIRouter(tags=["plugin"])


@router.get("/helloworld")
async def hello_world() -> dict[str, str]:
    return {"message": "Hello World!"}


@router.get("/messagebus-status")
async def messagebus_status(plugin: PluginDep) -> dict[str, Any]:
    logger.debug("Message bus status: %s", plugin.message_bus.get_status())
    return {
        "message": "Message bus status",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": "active",
        "info": "Use this endpoint to check message bus status. Check logs for detailed message flow.",
    }


@router.get("/debug-actions")
async def debug_actions(plugin: PluginDep) -> dict[str, Any]:
    return {
        "message": "Available actions for debugging",
        "actions": [action.name for action in plugin.actions],
        "info": "These actions are available in the plugin. Check logs for execution details.",
    }


@router.post("/actions/{name}")
async def run_action(name: str, body: ActionRequest, plugin: PluginDep) -> dict[str, Any]:
    """Dispatch an action by name or simile and return what it sent."""
    action = plugin.find_action(name)
    if action is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown action: {name}",
        )

    result, sent = await plugin.dispatch(action.name, body.text)
    return {
        "action": action.name,
        "ok": result.ok,
        "error": asdict(result.error) if result.error else None,
        "contents": [asdict(content) for content in sent],
    }
