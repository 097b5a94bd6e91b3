# -*- coding: utf-8 -*-
"""
Command line client for a running diet tracker server.

Usage:
    python -m diettracker.cli login <email> <password>
    python -m diettracker.cli chat "I had 2 eggs and toast"
    python -m diettracker.cli search "chicken breast"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx

from .chat.client import DietChatClient, RelayRequestError
from .config import settings


def _client(args: argparse.Namespace) -> DietChatClient:
    return DietChatClient(base_url=args.base_url, token=args.token or "")


def _error_message(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return resp.text.strip() or f"HTTP {resp.status_code}"
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return resp.text.strip()


def cmd_login(args: argparse.Namespace) -> int:
    """Print a bearer token for DIET_API_TOKEN."""
    resp = httpx.post(
        f"{args.base_url.rstrip('/')}/api/auth/login",
        json={"email": args.email, "password": args.password},
        timeout=30,
    )
    if resp.status_code != 200:
        print(f"Error: {_error_message(resp)}")
        return 1
    print(resp.json()["access_token"])
    return 0


async def _chat(args: argparse.Namespace) -> int:
    def render(delta: str, _accumulated: str) -> None:
        sys.stdout.write(delta)
        sys.stdout.flush()

    async with _client(args) as client:
        await client.load_history()
        result = await client.send(args.message, on_delta=render)
    print()
    if result.saved_meal:
        meal = result.saved_meal
        print(f"Logged meal: {meal['meal_name']} ({meal.get('calories') or 0:g} kcal) on {meal['meal_date']}")
    return 0


async def _search(args: argparse.Namespace) -> int:
    async with _client(args) as client:
        foods = await client.search_foods(args.query)
        for i, food in enumerate(foods, 1):
            print(
                f"{i}. {food.name}: {food.calories:g} kcal per {food.serving_size} {food.serving_unit} "
                f"(P {food.protein:g}g, C {food.carbs:g}g, F {food.fat:g}g)"
            )
        if args.add is not None:
            if not 1 <= args.add <= len(foods):
                print(f"Error: --add must be between 1 and {len(foods)}")
                return 1
            meal = await client.add_food(foods[args.add - 1], servings=args.servings, meal_type=args.meal_type)
            print(f"Logged meal: {meal['meal_name']} ({meal.get('calories') or 0:g} kcal)")
    return 0


def cmd_chat(args: argparse.Namespace) -> int:
    """Send one chat message and stream the reply."""
    return asyncio.run(_chat(args))


def cmd_search(args: argparse.Namespace) -> int:
    """Look up foods and optionally log one of them."""
    return asyncio.run(_search(args))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Diet tracker client")
    parser.add_argument("--base-url", default=settings.api_base_url, help="Server URL")
    parser.add_argument("--token", default=settings.api_token, help="Bearer token (DIET_API_TOKEN)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    login_parser = subparsers.add_parser("login", help="Obtain a bearer token")
    login_parser.add_argument("email")
    login_parser.add_argument("password")

    chat_parser = subparsers.add_parser("chat", help="Chat with the nutrition assistant")
    chat_parser.add_argument("message", help="What you ate or want to ask")

    search_parser = subparsers.add_parser("search", help="Search foods")
    search_parser.add_argument("query", help="Food to look up")
    search_parser.add_argument("--add", type=int, help="Log result number N as a meal")
    search_parser.add_argument("--servings", type=float, default=1.0, help="Serving multiplier")
    search_parser.add_argument(
        "--meal-type", default="snack", choices=["breakfast", "lunch", "dinner", "snack"]
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {"login": cmd_login, "chat": cmd_chat, "search": cmd_search}
    if args.command not in commands:
        parser.print_help()
        return 1
    if args.command != "login" and not args.token:
        print("Error: no token; run 'login' and set DIET_API_TOKEN")
        return 1
    try:
        return commands[args.command](args)
    except RelayRequestError as exc:
        print(f"\nError ({exc.status_code}): {exc.message}")
        return 1
    except httpx.HTTPError as exc:
        print(f"\nError: request to {args.base_url} failed: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
