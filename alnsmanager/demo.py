#!/usr/bin/env python3
"""
demo.py

Démonstration du moteur ALNS sur un problème jouet : une solution est un
simple prix, le destroy l'augmente d'un tirage U[0, 1), le repair le
diminue d'un tirage U[0, 1). L'acceptation est un record-to-record travel
linéaire, le visiteur affiche la meilleure solution toutes les N itérations.

Usage (exemples):
    python -m alnsmanager.demo --iterations 10000 --print-every 100
    python -m alnsmanager.demo --params params.json --seed 42

Le fichier --params peut contenir les sections "scores" (AlgorithmParams)
et "acceptance" (LinearRecordToRecordTravel) ; les clés absentes prennent
leur valeur par défaut.
"""

import argparse
from typing import List, Optional

import numpy as np

from alnsmanager.acceptance import LinearRecordToRecordTravel, MainTerminationCriterion
from alnsmanager.operators import DestroyMethod, RepairMethod
from alnsmanager.params import AlgorithmParams
from alnsmanager.solver import ALNSSolver
from alnsmanager.status import AlgorithmStatus
from alnsmanager.visitors import AlgorithmVisitor


class PriceSolution:
    """Solution jouet : un prix à minimiser."""

    def __init__(self, price: float):
        self.price = price

    def cost(self) -> float:
        return self.price

    def copy(self) -> 'PriceSolution':
        return PriceSolution(self.price)


class RaisePrice(DestroyMethod):
    def __init__(self, seed: Optional[int] = None):
        self.rng = np.random.default_rng(seed)

    def __call__(self, solution: PriceSolution) -> None:
        solution.price += self.rng.random()


class LowerPrice(RepairMethod):
    def __init__(self, seed: Optional[int] = None):
        self.rng = np.random.default_rng(seed)

    def __call__(self, solution: PriceSolution) -> None:
        solution.price -= self.rng.random()


class PrintingVisitor(AlgorithmVisitor):
    """Affiche itération et meilleur coût toutes les `every` itérations."""

    def __init__(self, iterations: int, every: int):
        self.iterations = iterations
        self.every = every

    def on_iteration_end(self, status: AlgorithmStatus) -> bool:
        iteration = status.iteration_number
        if iteration % self.every == 0:
            print(f"{iteration}\t{status.best_solution.cost():.4f}")
        return iteration < self.iterations


def build_solver(args: argparse.Namespace) -> ALNSSolver:
    if args.params:
        params = AlgorithmParams.from_json(args.params)
        acceptance = LinearRecordToRecordTravel.from_json(args.params)
    else:
        params = AlgorithmParams()
        acceptance = LinearRecordToRecordTravel(
            main_termination_criterion=MainTerminationCriterion.ITERATIONS,
            iterations_limit=args.iterations,
            start_threshold=0.05,
            end_threshold=0.0
        )

    # Graines dérivées pour que chaque opérateur ait son propre flux
    op_seeds = [None, None] if args.seed is None else [args.seed + 1, args.seed + 2]

    solver = ALNSSolver(params, PriceSolution(args.initial_cost), seed=args.seed)
    solver.set_acceptance(acceptance)
    solver.set_visitor(PrintingVisitor(args.iterations, args.print_every))
    solver.register_destroy(RaisePrice(op_seeds[0]))
    solver.register_repair(LowerPrice(op_seeds[1]))
    return solver


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run the ALNS engine on a toy price-minimisation problem.")
    p.add_argument("--params", type=str, default=None, help="JSON parameter file")
    p.add_argument("--iterations", type=int, default=10000, help="Stop at this iteration")
    p.add_argument("--initial-cost", type=float, default=100.0, help="Initial price")
    p.add_argument("--seed", type=int, default=None, help="Random seed (omit for OS entropy)")
    p.add_argument("--print-every", type=int, default=100, help="Print every N iterations")
    args = p.parse_args(argv)

    if args.print_every < 1:
        p.error("--print-every must be >= 1")
    if args.iterations < 0:
        p.error("--iterations must be >= 0")
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    solver = build_solver(args)
    best = solver.solve()

    stats = solver.get_statistics()
    print(f"Best cost: {best.cost():.4f} "
          f"(initial: {stats['initial_cost']:.4f}, accepted: {stats['accepted_moves']}, "
          f"rejected: {stats['rejected_moves']})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
