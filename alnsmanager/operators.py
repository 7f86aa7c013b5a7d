"""
Opérateurs destroy/repair et pool à scores adaptatifs

Un opérateur est n'importe quel callable `op(solution) -> None` qui modifie
la solution sur place. Les classes DestroyMethod / RepairMethod sont fournies
pour ceux qui préfèrent hériter, mais elles ne sont pas obligatoires.

Mécanisme adaptatif:
- Chaque opérateur a un score (1.0 à l'enregistrement)
- Sélection par roulette : probabilité proportionnelle au score
- Mise à jour par moyenne mobile exponentielle :
      score = score * decay + (1 - decay) * multiplier

Usage:
    pool = OperatorPool("destroy")
    idx = pool.register(RandomRemoval())
    chosen = pool.select(rng)
    pool.update_score(chosen, multiplier=10.0, decay=0.9)
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Sequence

import numpy as np


INITIAL_SCORE = 1.0


class DestroyMethod(ABC):
    """
    Classe de base (optionnelle) des opérateurs de destruction.

    Les classes filles implémentent __call__ et détruisent la solution sur place.
    """

    @abstractmethod
    def __call__(self, solution: Any) -> None:
        pass


class RepairMethod(ABC):
    """
    Classe de base (optionnelle) des opérateurs de réparation.

    Les classes filles implémentent __call__ et réparent la solution sur place.
    """

    @abstractmethod
    def __call__(self, solution: Any) -> None:
        pass


def roulette_wheel(scores: Sequence[float], rng: np.random.Generator) -> int:
    """
    Sélection par roulette.

    Tire r uniformément dans [0, sum(scores)) et retourne le premier indice
    dont la somme cumulée est >= r. Le dernier indice sert de repli si les
    arrondis flottants ne sélectionnent aucun indice. Si tous les scores sont
    nuls, le tirage est uniforme.

    Args:
        scores: Scores non négatifs (au moins un)
        rng: Générateur aléatoire numpy (consommé à chaque appel)

    Returns:
        Indice dans [0, len(scores))
    """
    n = len(scores)
    if n == 0:
        raise ValueError("Cannot select from an empty score vector")

    cumulative = np.cumsum(np.asarray(scores, dtype=float))
    total = cumulative[-1]

    if not total > 0.0:
        return int(rng.integers(n))

    draw = rng.uniform(0.0, total)
    index = int(np.searchsorted(cumulative, draw, side='left'))
    return min(index, n - 1)


class OperatorPool:
    """
    Ensemble d'opérateurs d'un même type avec leurs scores.

    Les indices sont stables : l'opérateur i garde l'indice i tant que le
    pool existe. `scores[i]` est toujours le score de `operators[i]`.
    """

    def __init__(self, kind: str = "operator"):
        """
        Args:
            kind: Nom du type d'opérateur ("destroy" ou "repair"), pour les messages
        """
        self.kind = kind
        self.operators: List[Callable[[Any], None]] = []
        self.scores: List[float] = []
        self.usage_count: List[int] = []

    def register(self, operator: Callable[[Any], None]) -> int:
        """
        Ajoute un opérateur avec un score initial de 1.0.

        Returns:
            Indice de l'opérateur dans le pool
        """
        if not callable(operator):
            raise TypeError(f"{self.kind} operator must be callable, got {type(operator).__name__}")

        self.operators.append(operator)
        self.scores.append(INITIAL_SCORE)
        self.usage_count.append(0)
        return len(self.operators) - 1

    def select(self, rng: np.random.Generator) -> int:
        """Choisit un indice par roulette sur les scores courants."""
        index = roulette_wheel(self.scores, rng)
        self.usage_count[index] += 1
        return index

    def update_score(self, index: int, multiplier: float, decay: float):
        """
        Met à jour le score d'un opérateur (moyenne mobile exponentielle).

        Args:
            index: Indice de l'opérateur
            multiplier: Récompense de l'itération
            decay: Poids de l'historique (0 < decay < 1)
        """
        self.scores[index] = self.scores[index] * decay + (1.0 - decay) * multiplier

    def reset_scores(self):
        """Remet tous les scores à 1.0 (les opérateurs restent enregistrés)."""
        self.scores = [INITIAL_SCORE] * len(self.operators)
        self.usage_count = [0] * len(self.operators)

    def get_operator(self, index: int) -> Callable[[Any], None]:
        return self.operators[index]

    def get_statistics(self) -> List[dict]:
        """Retourne nom, score et nombre d'utilisations de chaque opérateur."""
        return [
            {
                'index': i,
                'name': _operator_name(op),
                'score': self.scores[i],
                'usage_count': self.usage_count[i],
            }
            for i, op in enumerate(self.operators)
        ]

    def is_empty(self) -> bool:
        return len(self.operators) == 0

    def __len__(self) -> int:
        return len(self.operators)

    def __repr__(self) -> str:
        return f"OperatorPool(kind={self.kind!r}, n_operators={len(self)})"


def _operator_name(operator: Callable[[Any], None]) -> str:
    return getattr(operator, '__name__', type(operator).__name__)
