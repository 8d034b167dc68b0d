"""
Headless Runs
=============

Runs the simulation without a display over a list of seeds, with either the
Autopilot or a never-jumping baseline, and summarises the results.

Usage:
    python -m dino_runner.evaluation.run_headless --seeds 1 2 3 --difficulty hard
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from dino_runner.runner_core.autopilot import Autopilot
from dino_runner.runner_core.config_loader import (
    DIFFICULTY_MULTIPLIERS,
    GameConfig,
    PlayerSettings,
    load_config,
)
from dino_runner.runner_core.driver import FrameDriver, Policy
from dino_runner.runner_core.game import SessionController
from dino_runner.runner_core.reporting import NullReporter

DEFAULT_SEEDS = [0, 1, 2, 3, 4, 5, 6, 7]


@dataclass
class EvalResult:
    """Result for a single seed."""
    seed: int
    final_score: int
    obstacles_avoided: int
    ticks: int
    duration_seconds: int
    peak_speed: float
    game_over: bool
    elapsed_time: float


@dataclass
class EvalSummary:
    """Summary across all seeds."""
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    mean_avoided: float
    total_time: float
    results: List[EvalResult]


class _TickClock:
    """Session clock that advances with simulated frames instead of wall time."""

    def __init__(self, fps: float):
        self.fps = fps
        self.ticks = 0

    def __call__(self) -> float:
        return self.ticks / self.fps


def run_single_seed(
    seed: int,
    policy: Optional[Policy] = None,
    config: Optional[GameConfig] = None,
    settings: Optional[PlayerSettings] = None,
    max_ticks: int = 100_000,
    fps: float = 60.0,
    verbose: bool = False
) -> EvalResult:
    """
    Play one session headless.

    Args:
        seed: Obstacle seed.
        policy: Jump policy. Never jumps if None.
        config: Game configuration. Uses default if None.
        settings: Player settings (difficulty preference).
        max_ticks: Tick cap for runaway sessions.
        fps: Simulated frame rate, used for the session duration.
        verbose: If True, print the result.

    Returns:
        EvalResult for this seed.
    """
    clock = _TickClock(fps)
    reporter = NullReporter()
    controller = SessionController(
        config=config,
        settings=settings,
        reporter=reporter,
        seed=seed,
        clock=clock
    )

    def advance_clock(_snapshot) -> None:
        clock.ticks += 1

    driver = FrameDriver(controller, on_frame=advance_clock)

    start_time = time.time()
    run = driver.run(max_ticks, policy=policy)
    elapsed = time.time() - start_time

    summary = controller.last_summary
    result = EvalResult(
        seed=seed,
        final_score=run.score,
        obstacles_avoided=run.obstacles_avoided,
        ticks=run.ticks,
        duration_seconds=summary.duration_seconds if summary else int(run.ticks / fps),
        peak_speed=controller.peak_speed,
        game_over=controller.is_over,
        elapsed_time=elapsed
    )

    if verbose:
        print(f"  Seed {seed}: score={result.final_score}, "
              f"avoided={result.obstacles_avoided}, ticks={result.ticks}, "
              f"peak={result.peak_speed:.1f}")

    return result


def evaluate_policy(
    seeds: Optional[List[int]] = None,
    policy: Optional[Policy] = None,
    config: Optional[GameConfig] = None,
    settings: Optional[PlayerSettings] = None,
    max_ticks: int = 100_000,
    verbose: bool = True
) -> EvalSummary:
    """
    Run a policy on every seed.

    Args:
        seeds: Seeds to run. DEFAULT_SEEDS if None.
        policy: Jump policy. Never jumps if None.
        config: Game configuration.
        settings: Player settings.
        max_ticks: Tick cap per session.
        verbose: If True, print progress and the summary table.

    Returns:
        EvalSummary with aggregate statistics.
    """
    if seeds is None:
        seeds = DEFAULT_SEEDS
    if config is None:
        config = load_config()

    if verbose:
        print(f"Running {len(seeds)} seeds...")

    results: List[EvalResult] = []
    total_start = time.time()

    for seed in seeds:
        results.append(run_single_seed(
            seed,
            policy=policy,
            config=config,
            settings=settings,
            max_ticks=max_ticks,
            verbose=verbose
        ))

    total_time = time.time() - total_start

    scores = [r.final_score for r in results]
    avoided = [r.obstacles_avoided for r in results]

    summary = EvalSummary(
        mean_score=float(np.mean(scores)),
        std_score=float(np.std(scores)),
        min_score=int(min(scores)),
        max_score=int(max(scores)),
        median_score=float(np.median(scores)),
        mean_avoided=float(np.mean(avoided)),
        total_time=total_time,
        results=results
    )

    if verbose:
        print()
        print("=" * 50)
        print("HEADLESS RUN SUMMARY")
        print("=" * 50)
        print(f"Seeds run:       {len(seeds)}")
        print(f"Mean score:      {summary.mean_score:.2f}")
        print(f"Std deviation:   {summary.std_score:.2f}")
        print(f"Min score:       {summary.min_score}")
        print(f"Max score:       {summary.max_score}")
        print(f"Median score:    {summary.median_score:.2f}")
        print(f"Mean avoided:    {summary.mean_avoided:.2f}")
        print(f"Total time:      {total_time:.2f}s")
        print("=" * 50)

    return summary


def save_results(summary: EvalSummary, label: str, output_path: str) -> None:
    """Save run results to JSON."""
    data = {
        "policy": label,
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "mean_score": summary.mean_score,
        "std_score": summary.std_score,
        "min_score": summary.min_score,
        "max_score": summary.max_score,
        "median_score": summary.median_score,
        "mean_avoided": summary.mean_avoided,
        "total_time": summary.total_time,
        "results": [
            {
                "seed": r.seed,
                "final_score": r.final_score,
                "obstacles_avoided": r.obstacles_avoided,
                "ticks": r.ticks,
                "duration_seconds": r.duration_seconds,
                "peak_speed": r.peak_speed,
                "game_over": r.game_over,
            }
            for r in summary.results
        ]
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run Dino Runner headless")
    parser.add_argument(
        "--seeds",
        type=int,
        nargs="+",
        default=None,
        help="Seeds to run (default: 0-7)"
    )
    parser.add_argument(
        "--policy",
        choices=["autopilot", "idle"],
        default="autopilot",
        help="Scripted player: autopilot jumps, idle never does"
    )
    parser.add_argument(
        "--difficulty",
        choices=sorted(DIFFICULTY_MULTIPLIERS),
        default="normal",
        help="Difficulty preference (base speed multiplier)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a game_config.yaml"
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=100_000,
        help="Tick cap per session"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to save results JSON"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce output verbosity"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ...)"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    config = load_config(args.config)
    settings = PlayerSettings(difficulty_preference=args.difficulty)
    policy = Autopilot() if args.policy == "autopilot" else None

    summary = evaluate_policy(
        seeds=args.seeds,
        policy=policy,
        config=config,
        settings=settings,
        max_ticks=args.max_ticks,
        verbose=not args.quiet
    )

    if args.output:
        save_results(summary, f"{args.policy}/{args.difficulty}", args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
