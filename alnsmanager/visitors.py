"""
Visiteurs ALNS - Suivi et arrêt de la recherche

Le visiteur est appelé une fois à la fin de chaque itération avec l'état
complet de l'algorithme. Il retourne True pour continuer, False pour
arrêter. C'est le seul moyen d'arrêter la boucle : sans visiteur
"réel", la recherche ne s'arrête jamais.

Le visiteur peut aussi modifier l'état (appliquer une recherche locale
sur la solution courante, collecter des statistiques, afficher, ...).

Visiteurs disponibles:
- DefaultVisitor : ne fait rien, continue toujours
- SolverVisitor : critères d'arrêt (itérations, temps, stagnation),
  historique de convergence, affichage, recherche locale optionnelle

Usage:
    config = VisitorConfig(max_iterations=10000, verbose=True)
    solver.set_visitor(SolverVisitor(config))
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, List, Optional

from alnsmanager.status import AlgorithmStatus, clone_solution


class AlgorithmVisitor(ABC):
    """
    Classe de base (optionnelle) des visiteurs.

    Les classes filles implémentent on_iteration_end(). Un simple callable
    `visitor(status) -> bool` est aussi accepté par le solver.
    """

    @abstractmethod
    def on_iteration_end(self, status: AlgorithmStatus) -> bool:
        """
        Appelé à la fin de chaque itération.

        Returns:
            False si l'algorithme doit s'arrêter
        """
        pass

    def __call__(self, status: AlgorithmStatus) -> bool:
        return self.on_iteration_end(status)


class DefaultVisitor(AlgorithmVisitor):
    """Ne fait rien et ne s'arrête jamais."""

    def on_iteration_end(self, status: AlgorithmStatus) -> bool:
        return True


@dataclass
class VisitorConfig:
    """
    Configuration d'un SolverVisitor.

    Critères d'arrêt (None = désactivé):
        max_time: Temps max en secondes
        max_iterations: Nombre max d'itérations terminées
        max_iterations_no_improvement: Arrêt si la meilleure ne s'améliore plus

    Suivi:
        record_convergence: Si True, enregistre l'historique de convergence
        convergence_interval: Enregistre toutes les N itérations
        verbose: Si True, affiche la progression
        print_interval: Affiche l'état toutes les N itérations (si verbose)

    Recherche locale:
        local_search_interval: Applique la recherche locale toutes les N itérations
    """
    max_time: Optional[float] = None
    max_iterations: Optional[int] = None
    max_iterations_no_improvement: Optional[int] = None

    record_convergence: bool = True
    convergence_interval: int = 1
    verbose: bool = False
    print_interval: int = 1000

    local_search_interval: int = 1

    def __post_init__(self):
        """Valide les paramètres."""
        for name in ('max_iterations', 'max_iterations_no_improvement'):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ValueError(f"{name} must be >= 1 or None, got {value}")
        if self.max_time is not None and self.max_time < 0:
            raise ValueError(f"max_time must be >= 0 or None, got {self.max_time}")
        for name in ('convergence_interval', 'print_interval', 'local_search_interval'):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")


@dataclass
class ConvergencePoint:
    """Point dans l'historique de convergence (coût de la meilleure solution)."""
    iteration: int
    time_elapsed: float
    cost: float

    def to_dict(self) -> Dict[str, Any]:
        """Convertit le point en dictionnaire."""
        return asdict(self)


class SolverVisitor(AlgorithmVisitor):
    """
    Visiteur "complet" : arrêt, convergence, affichage, recherche locale.

    Les critères d'arrêt sont évalués à chaque appel, après l'itération
    numéro status.iteration_number. max_iterations=N arrête donc la
    recherche après exactement N itérations terminées (le compteur de
    l'état vaut alors N - 1, l'incrément n'ayant pas lieu à l'arrêt).
    """

    def __init__(self,
                 config: Optional[VisitorConfig] = None,
                 local_search: Optional[Callable[[Any], None]] = None):
        """
        Args:
            config: Configuration du visiteur
            local_search: Callable optionnel qui améliore une solution sur place,
                          appliqué à la solution courante
        """
        self.config = config or VisitorConfig()
        self.local_search = local_search
        self.reset()

    def reset(self):
        """Oublie l'historique (à appeler avant une nouvelle exécution)."""
        self.convergence_history: List[ConvergencePoint] = []
        self.iterations_no_improvement = 0
        self.last_best_cost: Optional[float] = None
        self.stop_reason: Optional[str] = None

    def on_iteration_end(self, status: AlgorithmStatus) -> bool:
        iteration = status.iteration_number

        if self.local_search is not None and iteration % self.config.local_search_interval == 0:
            self._apply_local_search(status)

        self._track_best(status)

        if self.config.record_convergence and iteration % self.config.convergence_interval == 0:
            self._record_convergence(status)

        if self.config.verbose and iteration % self.config.print_interval == 0:
            print(f"  [Iter {iteration:6d}] "
                  f"Current={status.current_solution.cost():.2f}, "
                  f"Best={status.best_solution.cost():.2f}, "
                  f"Time={status.elapsed_time_sec:.1f}s")

        return not self._should_stop(status)

    def _apply_local_search(self, status: AlgorithmStatus):
        """Recherche locale sur la courante ; met à jour la meilleure si besoin."""
        self.local_search(status.current_solution)
        if status.current_solution.cost() < status.best_solution.cost():
            status.best_solution = clone_solution(status.current_solution)

    def _track_best(self, status: AlgorithmStatus):
        best_cost = status.best_solution.cost()

        if self.last_best_cost is None or best_cost < self.last_best_cost:
            if self.config.verbose and self.last_best_cost is not None:
                print(f"  [Iter {status.iteration_number:6d}] New best: {best_cost:.2f} "
                      f"(time: {status.elapsed_time_sec:.1f}s)")
            self.last_best_cost = best_cost
            self.iterations_no_improvement = 0
        else:
            self.iterations_no_improvement += 1

    def _record_convergence(self, status: AlgorithmStatus):
        """Enregistre un point dans l'historique de convergence."""
        self.convergence_history.append(ConvergencePoint(
            iteration=status.iteration_number,
            time_elapsed=status.elapsed_time_sec,
            cost=status.best_solution.cost()
        ))

    def _should_stop(self, status: AlgorithmStatus) -> bool:
        """
        Vérifie si la recherche doit s'arrêter.

        Returns:
            True si un critère d'arrêt est atteint
        """
        # Critère d'itérations
        if self.config.max_iterations is not None:
            completed = status.iteration_number + 1
            if completed >= self.config.max_iterations:
                return self._stop(f"Iteration limit reached: {completed}")

        # Critère de temps
        if self.config.max_time is not None:
            if status.elapsed_time_sec >= self.config.max_time:
                return self._stop(f"Time limit reached: {status.elapsed_time_sec:.2f}s")

        # Critère de stagnation
        if self.config.max_iterations_no_improvement is not None:
            if self.iterations_no_improvement >= self.config.max_iterations_no_improvement:
                return self._stop(f"No improvement for {self.iterations_no_improvement} iterations")

        return False

    def _stop(self, reason: str) -> bool:
        self.stop_reason = reason
        if self.config.verbose:
            print(f"\n[Stop] {reason}")
        return True

    def get_convergence_history(self) -> List[ConvergencePoint]:
        """Retourne l'historique de convergence."""
        return self.convergence_history
