"""
Evaluation Package
==================

Headless multi-seed runs of the simulation with a scripted player.
"""

from dino_runner.evaluation.run_headless import evaluate_policy, run_single_seed

__all__ = ["evaluate_policy", "run_single_seed"]
