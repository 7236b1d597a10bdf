"""
Command line entry point.

Usage:
    # One-shot question
    crypto-expert ask "What are the top 5 DeFi coins by market cap?"

    # Same, with the trace of cache and tool steps
    crypto-expert ask "Which coins run on Solana?" --verbose

    # Call one tool directly, cache tools included (no OpenAI key needed)
    crypto-expert tool check_existing_content '{"topic": "defi"}'
    crypto-expert tool upsert_content '{"content": "...", "topic": "defi"}'

    # HTTP server (POST /query, GET /health, plugin routes)
    crypto-expert serve --port 3000
"""

import argparse
import asyncio
import json
import logging
import sys

import uvicorn

from crypto_expert.api import create_app
from crypto_expert.api.dependencies import build_stack
from crypto_expert.config import Settings, configure_logging, get_settings
from crypto_expert.errors import CryptoExpertError

logger = logging.getLogger(__name__)


async def _ask(settings: Settings, query: str, verbose: bool) -> int:
    stack = build_stack(settings)
    try:
        result = await stack.workflow.run(query)
    except CryptoExpertError as e:
        logger.error("Query failed: %s", e.message)
        return 1
    finally:
        await stack.aclose()

    print(result.answer)
    if verbose:
        print()
        print(f"topic:  {result.topic}")
        print(f"source: {result.source}")
        print(f"states: {' -> '.join(state.value for state in result.states)}")
        for call in result.tool_calls:
            print(f"tool:   {call.name} {call.arguments}")
        if result.hits:
            print(f"best cache score: {result.hits[0].score:.3f}")
        print(f"stored: {result.stored} ({result.entry_id})")
    return 0


async def _tool(settings: Settings, name: str, arguments: dict) -> int:
    stack = build_stack(settings, with_workflow=False)
    try:
        result = await stack.registry.invoke(name, arguments)
    finally:
        await stack.aclose()

    print(result.to_payload())
    return 0 if result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crypto-expert",
        description="Cryptocurrency expert agent backed by CoinGecko and a semantic content cache",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    ask = sub.add_parser("ask", help="Answer a single question and exit")
    ask.add_argument("query", help="Free-text question")
    ask.add_argument("--verbose", "-v", action="store_true", help="Print the workflow trace")

    tool = sub.add_parser("tool", help="Invoke one tool by name and print its JSON result")
    tool.add_argument("name", help="Tool name, e.g. check_existing_content")
    tool.add_argument("arguments", nargs="?", default="{}", help="Tool arguments as a JSON object")

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None, help="Override API_HOST")
    serve.add_argument("--port", type=int, default=None, help="Override API_PORT")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    if args.command == "ask":
        if not args.query.strip():
            logger.error("Query is required")
            return 2
        return asyncio.run(_ask(settings, args.query, args.verbose))

    if args.command == "tool":
        try:
            arguments = json.loads(args.arguments)
        except json.JSONDecodeError as e:
            logger.error("Tool arguments are not valid JSON: %s", e)
            return 2
        if not isinstance(arguments, dict):
            logger.error("Tool arguments must be a JSON object")
            return 2
        return asyncio.run(_tool(settings, args.name, arguments))

    uvicorn.run(
        create_app(settings),
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
