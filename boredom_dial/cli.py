"""
Command-line interface tools for the Boredom Dial service.
"""

import asyncio
import json
from collections.abc import Coroutine
from typing import Any
from urllib.parse import urlencode

import httpx
import typer
from pydantic import ValidationError
from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed

from .models import CreateRoomResponse, RoomStats, WelcomeMessage

DEFAULT_BASE_URL = "http://localhost:3001"

app = typer.Typer(help="Boredom Dial CLI tools")


# MARK: - CLI Entry Points


def cli_serve() -> None:
    """Entry point for the boredom-dial-serve command."""
    from .server import main

    main()


def cli_watch() -> None:
    """Entry point for the boredom-dial-watch command."""
    typer.run(watch)


# MARK: - Commands


@app.command()
def serve() -> None:
    """Run the Boredom Dial server (host and port come from HOST/PORT)."""
    cli_serve()


@app.command()
def health(
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Boredom Dial service"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Show server health: room count and live users in the global room."""

    async def _health() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{base_url}/health")
            response.raise_for_status()
            result = response.json()

            if json_output:
                print(json.dumps(result, indent=2))
                return

            print(
                f"{result['status']}: {result['rooms']} rooms, "
                f"{result['globalUsers']} users in the global room"
            )

    _run_with_error_handling(_health(), base_url)


@app.command()
def create_room(
    name: str | None = typer.Argument(None, help="Display name of the new room"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Boredom Dial service"
    ),
) -> None:
    """Create a new room and print its code."""

    async def _create_room() -> None:
        payload = {"name": name} if name else {}
        async with httpx.AsyncClient() as client:
            response = await client.post(f"{base_url}/api/rooms", json=payload)
            response.raise_for_status()
            room = CreateRoomResponse.model_validate(response.json())
            print(f"{room.room_id}  {room.room_name}")

    _run_with_error_handling(_create_room(), base_url)


@app.command()
def room_stats(
    room_id: str = typer.Argument(..., help="Room code, or 'global'"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Boredom Dial service"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Show the current stats of a room."""

    async def _room_stats() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{base_url}/api/rooms/{room_id}")
            if response.status_code == 404:
                print("Room not found")
                raise typer.Exit(1)
            response.raise_for_status()

            if json_output:
                print(json.dumps(response.json(), indent=2))
                return

            print(_format_stats(RoomStats.model_validate(response.json())))

    _run_with_error_handling(_room_stats(), base_url)


@app.command()
def watch(
    room: str | None = typer.Option(None, "--room", "-r", help="Room code to join"),
    name: str | None = typer.Option(None, "--name", "-n", help="Display name"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Boredom Dial service"
    ),
) -> None:
    """Join a room and print stats updates in real-time."""

    async def _watch() -> None:
        params = {k: v for k, v in {"room": room, "name": name}.items() if v}
        query = urlencode(params)
        ws_url = f"{_to_ws_url(base_url).rstrip('/')}/ws" + (f"?{query}" if query else "")
        print(f"Watching {ws_url}... (Ctrl+C to stop)")

        async with connect(ws_url) as websocket:
            async for raw in websocket:
                _handle_message(raw)

    _run_with_error_handling(_watch(), base_url)


# MARK: - Private Helpers


def _to_ws_url(base_url: str) -> str:
    if base_url.startswith("https://"):
        return "wss://" + base_url.removeprefix("https://")
    if base_url.startswith("http://"):
        return "ws://" + base_url.removeprefix("http://")
    return base_url


def _format_stats(stats: RoomStats) -> str:
    """Format a stats snapshot as a header line plus one line per participant."""
    lines = [f"{stats.room_name} [{stats.room_id}] avg {stats.average} ({stats.count} users)"]
    for individual in stats.individuals:
        label = individual.name or individual.id
        marker = " (bot)" if individual.is_bot else ""
        lines.append(f"  {individual.boredom:>3}  {label}{marker}")
    return "\n".join(lines)


def _handle_message(raw: str | bytes) -> None:
    """Handle a single message from the server."""
    try:
        data = json.loads(raw)
        if data.get("type") == "welcome":
            welcome = WelcomeMessage.model_validate(data)
            print(f"Joined as {welcome.user_id}")
            print(_format_stats(welcome))
        elif data.get("type") == "stats":
            print(_format_stats(RoomStats.model_validate(data)))

    except json.JSONDecodeError as e:
        print(f"Warning: Could not parse message: {raw!r} - {e}")
    except ValidationError as e:
        print(f"Warning: Unexpected message shape: {e}")


def _run_with_error_handling(coro: Coroutine[Any, Any, Any], base_url: str) -> None:
    """Run an async coroutine with standardized error handling."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except (httpx.ConnectError, ConnectionRefusedError):
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        print(f"Error: HTTP {e.response.status_code}")
        raise typer.Exit(1)
    except ConnectionClosed as e:
        print(f"Connection closed: {e}")
        raise typer.Exit(0)
    except typer.Exit:
        raise
    except Exception as e:
        error_msg = str(e) if str(e) else f"Unknown error of type {type(e).__name__}"
        print(f"Error: {error_msg}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
