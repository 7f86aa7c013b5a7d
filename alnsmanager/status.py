"""
AlgorithmStatus - État courant d'une exécution ALNS

Regroupe tout ce que la boucle de recherche modifie, pour pouvoir le passer
au critère d'acceptation et au visiteur :
- compteur d'itérations et temps écoulé
- les trois solutions : best_solution, current_solution, new_solution (candidate)
- les pools d'opérateurs destroy/repair et leurs scores
- le générateur aléatoire utilisé pour la roulette
- les indices des derniers opérateurs utilisés
- des compteurs de statistiques (mouvements acceptés, rejetés, ...)

Contrat de Solution (fourni par l'utilisateur):
- solution.cost() -> float  (plus petit = meilleur)
- solution.copy() -> copie profonde indépendante (sinon copy.deepcopy est utilisé ;
  le .copy() superficiel hérité de dict/list/set est ignoré)
"""

from typing import Any, Callable, List, Optional
import copy

import numpy as np

from alnsmanager.operators import OperatorPool


def _defines_own_copy(solution: Any) -> bool:
    """True si .copy() vient d'une classe utilisateur et non d'un type natif (dict, list, ...)."""
    for klass in type(solution).__mro__:
        if 'copy' in vars(klass):
            return klass.__module__ != 'builtins' and callable(vars(klass)['copy'])
    return False


def clone_solution(solution: Any) -> Any:
    """
    Copie indépendante d'une solution.

    La méthode .copy() de la classe est utilisée si elle est définie par
    l'utilisateur ; elle doit alors retourner une copie profonde. Le .copy()
    hérité d'un type natif (dict, list, set) est superficiel : dans ce cas,
    comme en l'absence de .copy(), copy.deepcopy est utilisé.
    """
    if _defines_own_copy(solution):
        return solution.copy()
    return copy.deepcopy(solution)


class AlgorithmStatus:
    """
    État mutable de l'algorithme.

    Attributs accessibles (et modifiables) par le visiteur:
        best_solution: Meilleure solution rencontrée
        current_solution: Solution courante
        new_solution: Candidate produite à l'itération en cours
        destroy_methods / repair_methods: Listes des opérateurs

    Attributs en lecture seule pour le visiteur (modifiés par le solver):
        iteration_number, elapsed_time_sec, destroy_scores, repair_scores,
        latest_destroy_id, latest_repair_id
    """

    def __init__(self,
                 initial_solution: Any,
                 seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None):
        """
        Args:
            initial_solution: Solution de départ (copiée trois fois)
            seed: Graine du générateur (None = entropie du système)
            rng: Générateur déjà construit (prioritaire sur seed)
        """
        self.rng: np.random.Generator = rng if rng is not None else np.random.default_rng(seed)

        self.destroy_pool = OperatorPool("destroy")
        self.repair_pool = OperatorPool("repair")

        self._init_run(initial_solution)

    def _init_run(self, initial_solution: Any):
        self.iteration_number: int = 0
        self.elapsed_time_sec: float = 0.0

        self.initial_solution = clone_solution(initial_solution)
        self.best_solution = clone_solution(initial_solution)
        self.current_solution = clone_solution(initial_solution)
        self.new_solution = clone_solution(initial_solution)

        self.latest_destroy_id: Optional[int] = None
        self.latest_repair_id: Optional[int] = None

        # True si le dernier solve() a été arrêté par le visiteur
        self.stopped = False

        # Statistiques
        self.accepted_moves = 0
        self.rejected_moves = 0
        self.new_best_count = 0
        self.improving_count = 0

    def reset(self, initial_solution: Any):
        """
        Repart de zéro avec une nouvelle solution initiale.

        Itérations, temps, scores et statistiques sont remis à zéro.
        Les opérateurs restent enregistrés et le générateur aléatoire
        continue sa séquence (il n'est pas ré-ensemencé).
        """
        self._init_run(initial_solution)
        self.destroy_pool.reset_scores()
        self.repair_pool.reset_scores()

    # ========================================================================
    # Accès
    # ========================================================================

    @property
    def destroy_methods(self) -> List[Callable[[Any], None]]:
        return self.destroy_pool.operators

    @property
    def repair_methods(self) -> List[Callable[[Any], None]]:
        return self.repair_pool.operators

    @property
    def destroy_scores(self) -> List[float]:
        """Copie des scores destroy (indices identiques à destroy_methods)."""
        return list(self.destroy_pool.scores)

    @property
    def repair_scores(self) -> List[float]:
        """Copie des scores repair (indices identiques à repair_methods)."""
        return list(self.repair_pool.scores)

    # ========================================================================
    # Utilisé par le solver
    # ========================================================================

    def select_destroy(self) -> Callable[[Any], None]:
        """Roulette sur les destroy, mémorise l'indice choisi."""
        self.latest_destroy_id = self.destroy_pool.select(self.rng)
        return self.destroy_pool.get_operator(self.latest_destroy_id)

    def select_repair(self) -> Callable[[Any], None]:
        """Roulette sur les repair, mémorise l'indice choisi."""
        self.latest_repair_id = self.repair_pool.select(self.rng)
        return self.repair_pool.get_operator(self.latest_repair_id)

    def update_latest_scores(self, multiplier: float, decay: float):
        """Récompense le couple destroy/repair de l'itération en cours."""
        self.destroy_pool.update_score(self.latest_destroy_id, multiplier, decay)
        self.repair_pool.update_score(self.latest_repair_id, multiplier, decay)

    def __repr__(self) -> str:
        return (f"AlgorithmStatus(iteration={self.iteration_number}, "
                f"elapsed={self.elapsed_time_sec:.2f}s, "
                f"best={self.best_solution.cost():.2f}, "
                f"current={self.current_solution.cost():.2f})")
