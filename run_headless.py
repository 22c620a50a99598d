#!/usr/bin/env python3
"""Run a headless Lawnline episode with a naive auto-player and report.

The auto-player collects every pickup it can see and plants along a
fixed build order (a sunflower column, then peashooter columns, then a
wallnut screen).  Frames are fed to the LoopDriver as fast as the host
allows, so a run of several simulated minutes finishes in seconds.

Usage:
    python3 run_headless.py --seconds 120 --speed 4 --seed 7
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

# Ensure src/ is on path when run from a checkout
sys.path.insert(0, str(Path(__file__).parent / "src"))

from loguru import logger

from lawnline.comms.event_bus import EventBus
from lawnline.simulation import CollectOutcome, Game, LoopDriver, PlaceOutcome, TICK_DT

BUILD_ORDER: list[tuple[int, str]] = [
    (0, "sunflower"),
    (1, "peashooter"),
    (2, "peashooter"),
    (6, "wallnut"),
    (3, "peashooter"),
]


class AutoPlayer:
    """Collects pickups and plants along BUILD_ORDER, one cell at a time."""

    def __init__(self, game: Game):
        self._game = game
        self._plan = [
            (row, col, type_id)
            for col, type_id in BUILD_ORDER
            for row in range(game.grid.rows)
        ]
        self.placed = 0
        self.collected = 0

    def act(self) -> None:
        game = self._game
        for pickup in list(game.pickups):
            if game.collect_pickup(pickup.id) is CollectOutcome.COLLECTED:
                self.collected += 1
        for row, col, type_id in self._plan:
            if game.grid.get(row, col) is not None:
                continue
            outcome = game.place_defender(row, col, type_id)
            if outcome is PlaceOutcome.PLACED:
                self.placed += 1
            # One build step per frame; wait for resource otherwise
            break


def run(seconds: float, speed: int = 1, seed: int | None = None) -> dict:
    """Play until *seconds* of simulated time pass or the game ends."""
    event_bus = EventBus()
    game = Game(event_bus, seed=seed)
    if not game.set_speed(speed):
        raise ValueError(f"Unsupported speed multiplier: {speed}")
    player = AutoPlayer(game)
    driver = LoopDriver(game)

    frame_dt = TICK_DT
    t0 = time.time()
    while game.now < seconds and not game.game_over:
        player.act()
        driver.frame(frame_dt)
    elapsed = time.time() - t0

    state = game.get_game_state()
    return {
        "simulated_seconds": round(game.now, 3),
        "ticks": game.ticks,
        "frames": driver.frames,
        "wall_seconds": round(elapsed, 3),
        "game_over": state["game_over"],
        "level": state["level"],
        "wave_count": state["wave_count"],
        "kills": state["kills"],
        "resource": state["resource"],
        "defenders": len(game.defenders),
        "placed": player.placed,
        "pickups_collected": player.collected,
        "sweepers_used": sum(1 for s in game.sweepers if s.used),
    }


def main():
    parser = argparse.ArgumentParser(description="Headless Lawnline auto-player")
    parser.add_argument("--seconds", type=float, default=120.0, help="Simulated seconds to play")
    parser.add_argument("--speed", type=int, default=1, choices=(1, 2, 4, 8), help="Speed multiplier")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for wave lanes")
    parser.add_argument("--verbose", action="store_true", help="Show engine debug logging")
    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")

    summary = run(args.seconds, speed=args.speed, seed=args.seed)

    print(f"\n{'='*60}")
    print("  HEADLESS RUN")
    print(f"{'='*60}")
    for key, value in summary.items():
        print(f"  {key:20s} {value}")


if __name__ == "__main__":
    main()
