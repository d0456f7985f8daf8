"""
Evaluation Package
==================

Runs a wind tape against the configured drop-count targets and summarises results.
"""

from rockfall.evaluation.run_sim import simulate_targets, save_results

__all__ = ["simulate_targets", "save_results"]
