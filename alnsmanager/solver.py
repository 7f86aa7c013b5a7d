"""
ALNSSolver - Adaptive Large Neighbourhood Search générique

Moteur ALNS indépendant du problème : la solution, ses opérateurs
destroy/repair, le critère d'acceptation et le visiteur sont fournis par
l'utilisateur.

Principe (une itération):
1. Sélectionne un opérateur destroy et un repair par roulette sur leurs scores
2. Copie la solution courante dans la candidate
3. Applique destroy puis repair sur la candidate (sur place)
4. Consulte le critère d'acceptation
5. Si acceptée :
   - meilleure que la meilleure  -> nouvelle meilleure, récompense new_best
   - meilleure que la courante   -> récompense new_improving
   - sinon                       -> récompense new_accepted
   puis la candidate devient la courante
6. Appelle le visiteur : False = arrêt
7. Met à jour le temps écoulé et incrémente l'itération

Si la candidate est rejetée, les scores ne bougent pas.

Les exceptions levées par les opérateurs, le critère ou le visiteur
remontent telles quelles ; courante et meilleure ne sont modifiées
qu'après acceptation.

Référence:
Ropke, S., & Pisinger, D. (2006). An Adaptive Large Neighborhood Search
Heuristic for the Pickup and Delivery Problem with Time Windows.

Usage:
    solver = ALNSSolver(AlgorithmParams(), initial_solution, seed=42)
    solver.register_destroy(RandomRemoval())
    solver.register_repair(GreedyInsert())
    solver.set_acceptance(LinearRecordToRecordTravel(iterations_limit=10000))
    solver.set_visitor(SolverVisitor(VisitorConfig(max_iterations=10000)))
    best = solver.solve()
"""

from typing import Any, Callable, Dict, Optional
import time

import numpy as np

from alnsmanager.acceptance import AcceptAll
from alnsmanager.errors import PreconditionError
from alnsmanager.params import AlgorithmParams
from alnsmanager.status import AlgorithmStatus, clone_solution
from alnsmanager.visitors import DefaultVisitor


AcceptanceFn = Callable[[AlgorithmStatus], bool]
VisitorFn = Callable[[AlgorithmStatus], bool]


class ALNSSolver:
    """
    Solver ALNS.

    L'état de l'exécution (AlgorithmStatus) est conservé après solve() :
    un nouvel appel à solve() reprend la recherche à l'itération suivante,
    avec les mêmes solutions et scores. Pour repartir de zéro, appeler reset().
    """

    def __init__(self,
                 params: Optional[AlgorithmParams],
                 initial_solution: Any,
                 acceptance: Optional[AcceptanceFn] = None,
                 visitor: Optional[VisitorFn] = None,
                 seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None,
                 verbose: bool = False):
        """
        Initialise le solver.

        Args:
            params: Paramètres d'adaptation des scores (None = défauts)
            initial_solution: Solution de départ
            acceptance: Critère d'acceptation (None = AcceptAll)
            visitor: Visiteur de fin d'itération (None = DefaultVisitor)
            seed: Graine du générateur de la roulette (None = entropie système)
            rng: Générateur numpy à utiliser directement (prioritaire sur seed)
            verbose: Si True, affiche un résumé au début et à la fin de solve()
        """
        self.params = params or AlgorithmParams()
        self.acceptance: AcceptanceFn = acceptance or AcceptAll()
        self.visitor: VisitorFn = visitor or DefaultVisitor()
        self.verbose = verbose
        self.status = AlgorithmStatus(initial_solution, seed=seed, rng=rng)

    # ========================================================================
    # Construction
    # ========================================================================

    def register_destroy(self, operator: Callable[[Any], None]) -> int:
        """
        Ajoute un opérateur destroy au pool.

        Returns:
            Indice de l'opérateur dans status.destroy_methods
        """
        return self.status.destroy_pool.register(operator)

    def register_repair(self, operator: Callable[[Any], None]) -> int:
        """
        Ajoute un opérateur repair au pool.

        Returns:
            Indice de l'opérateur dans status.repair_methods
        """
        return self.status.repair_pool.register(operator)

    def set_acceptance(self, acceptance: AcceptanceFn):
        self.acceptance = acceptance

    def set_visitor(self, visitor: VisitorFn):
        self.visitor = visitor

    def set_params(self, params: AlgorithmParams):
        """Les nouveaux paramètres s'appliquent dès le prochain solve()."""
        self.params = params

    def reset(self, initial_solution: Any):
        """
        Repart de zéro avec une nouvelle solution initiale.

        Remet à zéro itérations, temps et statistiques, remet tous les
        scores à 1.0 ; courante et meilleure deviennent la nouvelle
        solution. Les opérateurs restent enregistrés.
        """
        self.status.reset(initial_solution)

    # ========================================================================
    # Résolution
    # ========================================================================

    def solve(self) -> Any:
        """
        Lance (ou reprend) la recherche jusqu'à ce que le visiteur retourne False.

        Returns:
            Meilleure solution trouvée (status.best_solution)

        Raises:
            PreconditionError: si aucun opérateur destroy ou repair n'est enregistré
        """
        status = self.status
        if status.destroy_pool.is_empty():
            raise PreconditionError("At least one destroy operator must be registered before solve()")
        if status.repair_pool.is_empty():
            raise PreconditionError("At least one repair operator must be registered before solve()")

        # Reprise après un arrêt : l'itération d'arrêt n'avait pas été comptée
        if status.stopped:
            status.iteration_number += 1
            status.stopped = False

        # Les paramètres sont figés pour toute la durée de l'appel
        params = self.params
        start_time = time.perf_counter()
        elapsed_before = status.elapsed_time_sec

        if self.verbose:
            self._print_header()

        while True:
            destroy = status.select_destroy()
            repair = status.select_repair()

            status.new_solution = clone_solution(status.current_solution)
            destroy(status.new_solution)
            repair(status.new_solution)

            if self.acceptance(status):
                self._commit(status, params)
            else:
                status.rejected_moves += 1

            if not self.visitor(status):
                status.stopped = True
                break

            status.elapsed_time_sec = elapsed_before + (time.perf_counter() - start_time)
            status.iteration_number += 1

        if self.verbose:
            self._print_footer()

        return status.best_solution

    def _commit(self, status: AlgorithmStatus, params: AlgorithmParams):
        """Candidate acceptée : récompense les opérateurs et remplace la courante."""
        new_cost = status.new_solution.cost()

        if new_cost < status.current_solution.cost():
            if new_cost < status.best_solution.cost():
                status.best_solution = clone_solution(status.new_solution)
                status.update_latest_scores(params.new_best_multiplier, params.score_decay)
                status.new_best_count += 1
            else:
                status.update_latest_scores(params.new_improving_multiplier, params.score_decay)
                status.improving_count += 1
        else:
            status.update_latest_scores(params.new_accepted_multiplier, params.score_decay)

        status.current_solution = clone_solution(status.new_solution)
        status.accepted_moves += 1

    # ========================================================================
    # Méthodes publiques
    # ========================================================================

    def get_statistics(self) -> Dict[str, Any]:
        """
        Retourne les statistiques de l'exécution courante.

        Returns:
            Dictionnaire avec métriques
        """
        status = self.status
        initial_cost = status.initial_solution.cost()
        best_cost = status.best_solution.cost()
        # Nombre d'itérations terminées (le compteur n'est pas incrémenté à l'arrêt)
        n_moves = status.accepted_moves + status.rejected_moves
        elapsed = status.elapsed_time_sec

        improvement = initial_cost - best_cost
        return {
            'solver_name': self.__class__.__name__,
            'initial_cost': initial_cost,
            'final_cost': best_cost,
            'improvement': improvement,
            'improvement_pct': improvement / initial_cost * 100 if initial_cost != 0 else 0.0,
            'iterations': n_moves,
            'time_seconds': elapsed,
            'accepted_moves': status.accepted_moves,
            'rejected_moves': status.rejected_moves,
            'new_best_count': status.new_best_count,
            'improving_count': status.improving_count,
            'acceptance_rate': status.accepted_moves / max(n_moves, 1),
            'iterations_per_second': n_moves / max(elapsed, 0.001),
            'destroy_operators': status.destroy_pool.get_statistics(),
            'repair_operators': status.repair_pool.get_statistics(),
        }

    def get_solution(self) -> Any:
        """Retourne la meilleure solution trouvée."""
        return self.status.best_solution

    def _print_header(self):
        status = self.status
        print("\n" + "=" * 70)
        print("ALNS SOLVER - Starting optimization")
        print("=" * 70)
        print(f"Iteration: {status.iteration_number}")
        print(f"Current cost: {status.current_solution.cost():.2f}")
        print(f"Best cost: {status.best_solution.cost():.2f}")
        print(f"Destroy operators: {len(status.destroy_pool)}")
        print(f"Repair operators: {len(status.repair_pool)}")
        print(f"Score decay: {self.params.score_decay}")
        print("=" * 70 + "\n")

    def _print_footer(self):
        stats = self.get_statistics()
        print(f"\n[{self.__class__.__name__}] Solving finished")
        print(f"  Final cost: {stats['final_cost']:.2f}")
        print(f"  Iterations: {stats['iterations']}")
        print(f"  Time: {stats['time_seconds']:.2f}s")
        print(f"  Accepted moves: {stats['accepted_moves']}")
        print(f"  Rejected moves: {stats['rejected_moves']}")
        print(f"  Acceptance rate: {stats['acceptance_rate'] * 100:.1f}%")

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}("
                f"destroy={len(self.status.destroy_pool)}, "
                f"repair={len(self.status.repair_pool)}, "
                f"initial_cost={self.status.initial_solution.cost():.2f})")
