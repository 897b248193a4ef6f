from __future__ import annotations

import argparse
import asyncio
import json
import logging
from http import HTTPStatus
from typing import Any, Dict, Optional

import websockets
from websockets.asyncio.server import ServerConnection, serve

from holdem.errors import PokerError
from holdem.game import GameSession
from holdem.models import Difficulty, SessionConfig

LOGGER = logging.getLogger("practice_host")

# One connection = one human player against the house AI. All poker rules live
# in GameSession; this module only moves JSON and paces the AI.


class PracticeServerError(Exception):
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


def _config_payload(config: SessionConfig) -> Dict[str, Any]:
    return {
        "player_stack": config.player_stack,
        "ai_stack": config.ai_stack,
        "ai_delay_ms": config.ai_delay_ms,
    }


async def _send_error(websocket: ServerConnection, code: str, msg: str) -> None:
    await websocket.send(json.dumps({"type": "error", "code": code, "msg": msg}))


def _parse_difficulty(raw: Any) -> Difficulty:
    if raw is None:
        return Difficulty.EASY
    if not isinstance(raw, str):
        raise PracticeServerError("BAD_DIFFICULTY", "difficulty must be a string")
    try:
        return Difficulty(raw.strip().upper())
    except ValueError:
        raise PracticeServerError("BAD_DIFFICULTY", "Use EASY, MEDIUM or HARD") from None


class PracticeSession:
    """Plays hands for one connected client until the chips run out."""

    def __init__(
        self,
        websocket: ServerConnection,
        difficulty: Difficulty,
        config: SessionConfig,
        tick_ms: int = 50,
    ) -> None:
        self.websocket = websocket
        self.difficulty = difficulty
        self.config = config
        self.tick_ms = tick_ms
        self.session = GameSession(config)
        self.ai_task: Optional[asyncio.Task] = None

    async def send_json(self, payload: Dict[str, Any]) -> None:
        await self.websocket.send(json.dumps({"v": 1, **payload}))

    async def run(self) -> None:
        await self.send_json({"type": "welcome", "difficulty": self.difficulty.value, "config": _config_payload(self.config)})
        await self.start_hand()
        try:
            while True:
                raw = await self.websocket.recv()
                await self.handle_message(raw)
        except websockets.ConnectionClosed:
            LOGGER.info("Client left after %s hands", self.session.hand_counter)
        finally:
            if self.ai_task and not self.ai_task.done():
                self.ai_task.cancel()
                try:
                    await self.ai_task
                except (asyncio.CancelledError, websockets.ConnectionClosed):
                    pass

    async def start_hand(self) -> None:
        self.session.start_hand(self.difficulty)
        await self.send_state()

    async def send_state(self) -> None:
        await self.send_json({"type": "state", **self.session.snapshot().to_payload()})

    async def handle_message(self, raw: str) -> None:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            await _send_error(self.websocket, "BAD_JSON", "Message is not valid JSON")
            return
        if not isinstance(message, dict):
            await _send_error(self.websocket, "BAD_MESSAGE", "Expected a JSON object")
            return

        msg_type = message.get("type")
        try:
            if msg_type == "action":
                await self._handle_action(message)
            elif msg_type == "next_hand":
                await self._handle_next_hand()
            elif msg_type == "state":
                await self.send_state()
            else:
                await _send_error(self.websocket, "UNKNOWN_TYPE", f"Unsupported message type {msg_type!r}")
        except PokerError as exc:
            await _send_error(self.websocket, exc.code, exc.msg)

    async def _handle_action(self, message: Dict[str, Any]) -> None:
        action = message.get("action")
        if not isinstance(action, str):
            await _send_error(self.websocket, "BAD_ACTION", "action must be BET, CHECK or FOLD")
            return

        result = self.session.submit_player_action(action)
        await self.send_json({"type": "result", **result.to_payload()})
        if not result.ok:
            await self.send_state()
            return
        if self.session.waiting_for_ai:
            self.ai_task = asyncio.create_task(self._drive_ai())
            self.ai_task.add_done_callback(self._on_ai_done)
        else:
            await self._after_update()

    async def _handle_next_hand(self) -> None:
        ctx = self.session.hand
        if ctx is not None and not ctx.hand_over:
            await _send_error(self.websocket, "HAND_IN_PROGRESS", "Finish the current hand first")
            return
        await self.start_hand()

    async def _drive_ai(self) -> None:
        # Player input stays gated by waiting_for_ai while this counts down.
        try:
            while self.session.waiting_for_ai:
                await asyncio.sleep(self.tick_ms / 1000)
                result = self.session.tick(self.tick_ms)
                if result is not None:
                    await self.send_json({"type": "result", **result.to_payload()})
        except PokerError as exc:
            # The session has already dropped the hand; tell the client.
            await _send_error(self.websocket, exc.code, exc.msg)
        await self._after_update()

    def _on_ai_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if isinstance(exc, websockets.ConnectionClosed):
            LOGGER.info("Client left while the AI was acting")
        elif exc is not None:
            LOGGER.error("AI task failed: %s", exc, exc_info=exc)

    async def _after_update(self) -> None:
        await self.send_state()
        ctx = self.session.hand
        if self.session.game_over and (ctx is None or ctx.hand_over):
            stacks = self.session.stacks
            winner = "PLAYER" if stacks.player > 0 else "AI"
            await self.send_json(
                {
                    "type": "game_over",
                    "winner": winner,
                    "player_stack": stacks.player,
                    "ai_stack": stacks.ai,
                    "hands": self.session.hand_counter,
                }
            )


async def handle_connection(websocket: ServerConnection, config: SessionConfig, tick_ms: int = 50) -> None:
    hello_raw = await websocket.recv()
    try:
        hello = json.loads(hello_raw)
    except json.JSONDecodeError:
        hello = None
    if not isinstance(hello, dict) or hello.get("type") != "hello":
        await _send_error(websocket, "BAD_HELLO", "Expected hello")
        return

    try:
        difficulty = _parse_difficulty(hello.get("difficulty"))
    except PracticeServerError as exc:
        await _send_error(websocket, exc.code, exc.msg)
        return

    LOGGER.info("New practice game at %s difficulty", difficulty.value)
    session = PracticeSession(websocket, difficulty, config, tick_ms=tick_ms)
    try:
        await session.run()
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Practice session crashed: %s", exc)


def _process_request(connection: ServerConnection, request):
    """Return a simple HTTP response for health checks."""

    upgrade_header = request.headers.get("Upgrade", "").lower()
    if upgrade_header == "websocket":
        return None  # let the WebSocket handshake continue

    if request.path in {"/", "/health", "/healthz"}:
        return connection.respond(HTTPStatus.OK, "practice server running\n")
    return connection.respond(HTTPStatus.NOT_FOUND, "not found\n")


async def run_server(host: str, port: int, config: SessionConfig, tick_ms: int = 50) -> None:
    async def _handler(ws: ServerConnection) -> None:
        await handle_connection(ws, config, tick_ms=tick_ms)

    async with serve(_handler, host, port, process_request=_process_request):
        LOGGER.info("Practice server listening on %s:%s", host, port)
        await asyncio.Future()


def main() -> None:
    parser = argparse.ArgumentParser(description="Heads-up hold'em practice server (you vs the house AI)")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=9876)
    parser.add_argument("--player-stack", type=int, default=200)
    parser.add_argument("--ai-stack", type=int, default=100)
    parser.add_argument("--ai-delay", type=int, default=500, help="AI thinking time in milliseconds")
    parser.add_argument("--tick-ms", type=int, default=50, help="How often the AI countdown is advanced")
    args = parser.parse_args()

    config = SessionConfig(player_stack=args.player_stack, ai_stack=args.ai_stack, ai_delay_ms=args.ai_delay)
    asyncio.run(run_server(args.host, args.port, config, tick_ms=args.tick_ms))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
