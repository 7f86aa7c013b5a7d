"""
Critères d'acceptation ALNS

Un critère d'acceptation est un callable `criterion(status) -> bool` qui
décide si la candidate (status.new_solution) remplace la solution courante.
Convention de minimisation partout : coût plus petit = meilleur.

Critères disponibles:
- AcceptAll : accepte tout (critère par défaut)
- HillClimbing : accepte si la candidate ne dégrade pas la courante
- LinearRecordToRecordTravel : accepte si l'écart relatif à la meilleure
  solution est sous un seuil qui décroît linéairement
- SimulatedAnnealing : critère de Metropolis avec refroidissement géométrique

Usage:
    acceptance = LinearRecordToRecordTravel(
        main_termination_criterion=MainTerminationCriterion.ITERATIONS,
        iterations_limit=10000,
        start_threshold=0.05,
        end_threshold=0.0
    )
    solver.set_acceptance(acceptance)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union
import math
import warnings

import numpy as np

from alnsmanager.errors import ConfigurationWarning
from alnsmanager.params import load_json, lookup, read_float
from alnsmanager.status import AlgorithmStatus


class AcceptanceCriterion(ABC):
    """Classe de base (optionnelle) des critères d'acceptation."""

    @abstractmethod
    def __call__(self, status: AlgorithmStatus) -> bool:
        """
        Returns:
            True si status.new_solution doit remplacer la solution courante
        """
        pass


class AcceptAll(AcceptanceCriterion):
    """Accepte toutes les candidates."""

    def __call__(self, status: AlgorithmStatus) -> bool:
        return True


class HillClimbing(AcceptanceCriterion):
    """Accepte une candidate si elle ne dégrade pas la solution courante."""

    def __call__(self, status: AlgorithmStatus) -> bool:
        return status.new_solution.cost() <= status.current_solution.cost()


class MainTerminationCriterion(Enum):
    """Grandeur qui fait avancer la décroissance du seuil."""
    ITERATIONS = "iterations"
    TIME = "time"


DEFAULT_ITERATIONS_LIMIT = 1_000_000
DEFAULT_TIME_LIMIT = 3600.0
DEFAULT_START_THRESHOLD = 0.1
DEFAULT_END_THRESHOLD = 0.0


def relative_gap(candidate_cost: float, best_cost: float) -> float:
    """
    Écart (candidate - best) / candidate.

    Si candidate_cost <= 0 la division n'a pas de sens : on retourne
    l'écart absolu candidate - best.
    """
    if candidate_cost > 0.0:
        return (candidate_cost - best_cost) / candidate_cost
    return candidate_cost - best_cost


@dataclass
class LinearRecordToRecordTravel(AcceptanceCriterion):
    """
    Record-to-record travel à seuil linéaire.

    Le seuil vaut start_threshold au début et décroît linéairement jusqu'à
    end_threshold quand le compteur d'itérations atteint iterations_limit
    (ou le temps écoulé atteint time_limit, selon main_termination_criterion).
    Au-delà de la limite, il reste à end_threshold.

    La candidate est acceptée si relative_gap(candidate, best) <= seuil.
    Seuil 0 partout = hill climbing sur la meilleure ; seuil infini = marche aléatoire.

    Attributs:
        main_termination_criterion: ITERATIONS ou TIME
        iterations_limit: Nombre d'itérations prévu pour la décroissance
        time_limit: Durée (secondes) prévue pour la décroissance
        start_threshold: Seuil initial
        end_threshold: Seuil final
    """
    main_termination_criterion: MainTerminationCriterion = MainTerminationCriterion.ITERATIONS
    iterations_limit: int = DEFAULT_ITERATIONS_LIMIT
    time_limit: float = DEFAULT_TIME_LIMIT
    start_threshold: float = DEFAULT_START_THRESHOLD
    end_threshold: float = DEFAULT_END_THRESHOLD

    def __post_init__(self):
        """Valide les paramètres."""
        if not isinstance(self.main_termination_criterion, MainTerminationCriterion):
            self.main_termination_criterion = MainTerminationCriterion(self.main_termination_criterion)
        if self.iterations_limit < 0:
            raise ValueError(f"iterations_limit must be >= 0, got {self.iterations_limit}")
        if self.time_limit < 0:
            raise ValueError(f"time_limit must be >= 0, got {self.time_limit}")

    def progress(self, status: AlgorithmStatus) -> float:
        """Avancement dans [0, 1] selon le critère principal."""
        if self.main_termination_criterion == MainTerminationCriterion.ITERATIONS:
            done, limit = status.iteration_number, self.iterations_limit
        else:
            done, limit = status.elapsed_time_sec, self.time_limit

        if limit <= 0:
            return 1.0
        return min(1.0, max(0.0, done / limit))

    def threshold(self, status: AlgorithmStatus) -> float:
        """
        Seuil courant, interpolé entre start_threshold et end_threshold.

        Les extrémités sont retournées telles quelles (progress 0 ou 1, ou
        seuils égaux) et la pondération évite inf - inf : un seuil infini
        reste infini.
        """
        progress = self.progress(status)
        if progress <= 0.0 or self.start_threshold == self.end_threshold:
            return self.start_threshold
        if progress >= 1.0:
            return self.end_threshold
        return self.start_threshold * (1.0 - progress) + self.end_threshold * progress

    def __call__(self, status: AlgorithmStatus) -> bool:
        gap = relative_gap(status.new_solution.cost(), status.best_solution.cost())
        return gap <= self.threshold(status)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'LinearRecordToRecordTravel':
        """
        Construit le critère depuis un dictionnaire au format JSON.

        Clés lues: acceptance.main_termination_criterion ("iterations" | "time"),
        iterations_limit, time_limit, acceptance.start_threshold,
        acceptance.end_threshold. Les clés absentes ou invalides prennent
        leur valeur par défaut.
        """
        criterion = MainTerminationCriterion.ITERATIONS
        try:
            raw = lookup(data, 'acceptance.main_termination_criterion')
        except KeyError:
            raw = None
        if raw is not None:
            try:
                criterion = MainTerminationCriterion(raw)
            except ValueError:
                warnings.warn(f"Invalid value for 'acceptance.main_termination_criterion': {raw!r}, "
                              f"using default 'iterations'", ConfigurationWarning, stacklevel=2)

        iterations_limit = read_float(data, 'iterations_limit', DEFAULT_ITERATIONS_LIMIT,
                                      lambda v: v >= 0 and float(v).is_integer())

        return LinearRecordToRecordTravel(
            main_termination_criterion=criterion,
            iterations_limit=int(iterations_limit),
            time_limit=read_float(data, 'time_limit', DEFAULT_TIME_LIMIT, lambda v: v >= 0),
            start_threshold=read_float(data, 'acceptance.start_threshold', DEFAULT_START_THRESHOLD),
            end_threshold=read_float(data, 'acceptance.end_threshold', DEFAULT_END_THRESHOLD),
        )

    @staticmethod
    def from_json(path: Union[str, Path]) -> 'LinearRecordToRecordTravel':
        """Construit le critère depuis un fichier JSON."""
        return LinearRecordToRecordTravel.from_dict(load_json(path))


@dataclass
class SimulatedAnnealing(AcceptanceCriterion):
    """
    Critère de Metropolis.

    - delta <= 0 (pas de dégradation de la courante) : toujours accepter
    - delta > 0 : accepter avec probabilité exp(-delta / T)

    La température est multipliée par cooling_rate à chaque appel, sans
    descendre sous min_temperature.

    Attributs:
        initial_temperature: Température initiale (plus élevée = plus d'exploration)
        cooling_rate: Taux de refroidissement (0 < cooling_rate < 1)
        min_temperature: Température plancher
        seed: Graine du générateur propre au critère
    """
    initial_temperature: float = 1000.0
    cooling_rate: float = 0.9995
    min_temperature: float = 0.01
    seed: Optional[int] = None
    temperature: float = field(init=False)
    rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self):
        """Valide les paramètres et initialise l'état."""
        if not 0.0 < self.cooling_rate < 1.0:
            raise ValueError(f"cooling_rate must be in (0, 1), got {self.cooling_rate}")
        if self.min_temperature <= 0.0:
            raise ValueError(f"min_temperature must be positive, got {self.min_temperature}")
        if self.initial_temperature < self.min_temperature:
            raise ValueError("initial_temperature must be >= min_temperature")

        self.temperature = self.initial_temperature
        self.rng = np.random.default_rng(self.seed)

    def __call__(self, status: AlgorithmStatus) -> bool:
        delta = status.new_solution.cost() - status.current_solution.cost()

        if delta <= 0:
            accept = True
        else:
            accept = self.rng.random() < math.exp(-delta / self.temperature)

        # Refroidit
        self.temperature = max(self.min_temperature, self.temperature * self.cooling_rate)
        return accept

    def reset(self):
        """Remet la température à sa valeur initiale."""
        self.temperature = self.initial_temperature
