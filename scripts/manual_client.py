#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import websockets
from websockets.asyncio.client import ClientConnection, connect

logging.basicConfig(level=logging.INFO)

# ManualClient is the terminal front end for the practice server.

ACTION_KEYS = {"B": "BET", "C": "CHECK", "F": "FOLD"}


@dataclass
class TableView:
    hand_id: Optional[str] = None
    phase: str = "PRE_FLOP"
    pot: int = 0
    bet_amount: int = 0
    community: list[str] = field(default_factory=list)
    hole: list[str] = field(default_factory=list)
    ai_hole: Optional[list[str]] = None
    player_stack: int = 0
    ai_stack: int = 0
    legal: list[str] = field(default_factory=list)
    hand_over: bool = False
    game_over: bool = False


class ManualClient:
    def __init__(self, url: str, difficulty: str) -> None:
        self.url = url
        self.difficulty = difficulty
        self.websocket: Optional[ClientConnection] = None
        self.view = TableView()
        self.recent_events: deque[str] = deque(maxlen=6)

    async def run(self) -> None:
        async with connect(self.url) as ws:
            self.websocket = ws
            await self._send({"type": "hello", "v": 1, "difficulty": self.difficulty})
            await self._loop()

    async def _loop(self) -> None:
        assert self.websocket is not None
        while True:
            raw = await self.websocket.recv()
            msg = json.loads(raw)
            msg_type = msg.get("type")
            self._print_message(msg)

            if msg_type == "game_over":
                print("Game over. Bye!")
                break
            if msg_type == "state":
                await self._maybe_prompt()

    async def _maybe_prompt(self) -> None:
        view = self.view
        if view.game_over and view.hand_over:
            return
        if view.hand_over:
            choice = await asyncio.to_thread(input, "Hand over. Enter for next hand, q to quit: ")
            if choice.strip().lower() == "q":
                raise KeyboardInterrupt
            await self._send({"type": "next_hand"})
            return
        if not view.legal:
            return
        while True:
            payload = await asyncio.to_thread(self._prompt_action)
            if payload is not None:
                await self._send(payload)
                return

    def _prompt_action(self) -> Optional[Dict[str, Any]]:
        legal = self.view.legal
        prompt = "Action [" + "/".join(legal) + "] (b/c/f, h=help): "
        choice = input(prompt).strip().upper()
        if not choice:
            choice = "BET"
            print("Using default: BET")
        if choice == "H":
            self._print_help()
            return None
        choice = ACTION_KEYS.get(choice, choice)
        if choice not in legal:
            print("Illegal selection. Try again.")
            return None
        return {"type": "action", "v": 1, "action": choice}

    def _print_message(self, msg: Dict[str, Any]) -> None:
        msg_type = msg.get("type")
        print(f"\n>>> {str(msg_type).upper()}")
        if msg_type == "welcome":
            print(f"Difficulty: {msg['difficulty']}, config: {json.dumps(msg['config'])}")
        elif msg_type == "state":
            self._sync_view(msg)
            self._render_view(msg)
        elif msg_type == "result":
            for event in msg.get("events", []):
                self.recent_events.append(self._summarize_event(event))
            if not msg.get("ok"):
                print(f"Rejected ({msg.get('error')}): {msg.get('message')}")
        elif msg_type == "error":
            print(f"Error {msg.get('code')}: {msg.get('msg')}")
        elif msg_type == "game_over":
            print(
                f"Winner: {msg.get('winner')} after {msg.get('hands')} hands | "
                f"you={msg.get('player_stack')} ai={msg.get('ai_stack')}"
            )
        else:
            print(json.dumps(msg, indent=2))

    def _summarize_event(self, event: Dict[str, Any]) -> str:
        ev = event.get("ev")
        side = event.get("side")
        if ev == "BET":
            return f"{side} bet {event.get('amount')}"
        if ev in {"CHECK", "FOLD"}:
            return f"{side} {ev.lower()}"
        if ev == "FLOP":
            return f"Flop: {' '.join(event.get('cards', []))}"
        if ev in {"TURN", "RIVER"}:
            return f"{ev.title()}: {event.get('card')}"
        if ev == "SHOWDOWN":
            return f"{side} shows {' '.join(event.get('hand', []))} ({event.get('rank')})"
        if ev == "POT_AWARD":
            return f"{side} collects {event.get('amount')}"
        if ev == "GAME_OVER":
            return f"{event.get('loser')} is out of chips"
        return str(event)

    def _sync_view(self, msg: Dict[str, Any]) -> None:
        you = msg.get("you", {})
        ai = msg.get("ai", {})
        self.view = TableView(
            hand_id=msg.get("hand_id"),
            phase=msg.get("phase", "PRE_FLOP"),
            pot=msg.get("pot", 0),
            bet_amount=msg.get("bet_amount", 0),
            community=list(msg.get("community", [])),
            hole=list(you.get("hole", [])),
            ai_hole=ai.get("hole"),
            player_stack=you.get("stack", 0),
            ai_stack=ai.get("stack", 0),
            legal=list(msg.get("legal", [])),
            hand_over=bool(msg.get("hand_over")),
            game_over=bool(msg.get("game_over")),
        )

    def _render_view(self, msg: Dict[str, Any]) -> None:
        view = self.view
        board = " ".join(view.community) if view.community else "--"
        ai_hole = " ".join(view.ai_hole) if view.ai_hole else "?? ??"
        print(f"Hand {view.hand_id} | Phase {view.phase} | Board {board} | Pot={view.pot} | Bet size={view.bet_amount}")
        print(f"You: {' '.join(view.hole)} stack={view.player_stack}")
        print(f"AI:  {ai_hole} stack={view.ai_stack}")
        if msg.get("message"):
            print(msg["message"])
        if self.recent_events:
            print("Recent:")
            for entry in reversed(self.recent_events):
                print(f"  {entry}")

    def _print_help(self) -> None:
        print("Options:")
        for opt in self.view.legal:
            if opt == "BET":
                print(f"  BET   → put {self.view.bet_amount} chips in the pot")
            elif opt == "CHECK":
                print("  CHECK → pass this round (once per hand)")
            elif opt == "FOLD":
                print("  FOLD  → give the pot to the AI (once per hand)")

    async def _send(self, payload: Dict[str, Any]) -> None:
        assert self.websocket is not None
        await self.websocket.send(json.dumps(payload))


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Hold'em practice client")
    parser.add_argument("--url", default="ws://127.0.0.1:9876/ws")
    parser.add_argument("--difficulty", default="EASY", choices=["EASY", "MEDIUM", "HARD"], type=str.upper)
    return parser.parse_args(argv)


def main(argv: list[str]) -> None:
    args = parse_args(argv)
    client = ManualClient(url=args.url, difficulty=args.difficulty)
    try:
        asyncio.run(client.run())
    except KeyboardInterrupt:
        print("\nSession closed")
    except websockets.ConnectionClosed:
        print("\nServer closed the connection")


if __name__ == "__main__":
    main(sys.argv[1:])
