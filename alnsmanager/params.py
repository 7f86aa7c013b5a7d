"""
AlgorithmParams - Paramètres d'adaptation des scores ALNS

Quatre constantes pilotent la mise à jour des scores des opérateurs :
- score_decay : vitesse d'oubli de l'historique (0 < decay < 1)
- new_best_multiplier : récompense quand on trouve une nouvelle meilleure solution
- new_improving_multiplier : récompense quand on améliore la solution courante
- new_accepted_multiplier : récompense quand la solution est seulement acceptée

Par convention new_best >= new_improving >= new_accepted (non vérifié).

Chargement depuis JSON:
    {
        "scores": {
            "score_decay": 0.9,
            "new_best_multiplier": 10.0,
            "new_improving_multiplier": 4.0,
            "new_accepted_multiplier": 1.5
        }
    }

Toute clé absente ou invalide est remplacée par sa valeur par défaut
(avec un ConfigurationWarning), le chargement n'échoue jamais sur une clé.

Usage:
    params = AlgorithmParams.from_json("params.json")
    solver = ALNSSolver(params, initial_solution)
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union
import json
import math
import warnings

from alnsmanager.errors import ConfigurationWarning


DEFAULT_SCORE_DECAY = 0.9
DEFAULT_NEW_BEST_MULTIPLIER = 10.0
DEFAULT_NEW_IMPROVING_MULTIPLIER = 4.0
DEFAULT_NEW_ACCEPTED_MULTIPLIER = 1.5


def _is_decay(value: float) -> bool:
    return 0.0 < value < 1.0


def _is_positive(value: float) -> bool:
    return value > 0.0


def lookup(data: Dict[str, Any], dotted_key: str) -> Any:
    """
    Cherche une clé "a.b.c" dans des dictionnaires imbriqués.

    Raises:
        KeyError: si un des niveaux est absent (ou n'est pas un dict)
    """
    node: Any = data
    for part in dotted_key.split('.'):
        if not isinstance(node, dict) or part not in node:
            raise KeyError(dotted_key)
        node = node[part]
    return node


def read_float(data: Dict[str, Any],
               dotted_key: str,
               default: float,
               check: Optional[Callable[[float], bool]] = None) -> float:
    """
    Lit un flottant dans une source clé/valeur, avec repli sur le défaut.

    Une valeur est rejetée si elle est absente, booléenne, non convertible
    en float, NaN, ou si `check` la refuse.

    Args:
        data: Source (dict issu d'un JSON)
        dotted_key: Chemin de la clé, ex: "scores.score_decay"
        default: Valeur de repli
        check: Prédicat de validité optionnel

    Returns:
        La valeur lue, ou `default`
    """
    try:
        raw = lookup(data, dotted_key)
    except KeyError:
        return default

    if isinstance(raw, bool):
        value = math.nan
    else:
        try:
            value = float(raw)
        except (TypeError, ValueError):
            value = math.nan

    if math.isnan(value) or (check is not None and not check(value)):
        warnings.warn(f"Invalid value for '{dotted_key}': {raw!r}, using default {default}",
                      ConfigurationWarning, stacklevel=3)
        return default

    return value


def load_json(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Charge un fichier JSON de paramètres.

    Le fichier lui-même doit exister et être du JSON valide : seules les
    clés individuelles bénéficient du repli sur les défauts.
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        warnings.warn(f"Parameter file {path} does not contain a JSON object, using defaults",
                      ConfigurationWarning, stacklevel=3)
        return {}
    return data


@dataclass
class AlgorithmParams:
    """
    Paramètres généraux de l'ALNS.

    Attributs:
        score_decay: Poids de l'historique dans la moyenne mobile des scores
        new_best_multiplier: Récompense "nouvelle meilleure solution"
        new_improving_multiplier: Récompense "améliore la courante"
        new_accepted_multiplier: Récompense "acceptée sans amélioration"
    """
    score_decay: float = DEFAULT_SCORE_DECAY
    new_best_multiplier: float = DEFAULT_NEW_BEST_MULTIPLIER
    new_improving_multiplier: float = DEFAULT_NEW_IMPROVING_MULTIPLIER
    new_accepted_multiplier: float = DEFAULT_NEW_ACCEPTED_MULTIPLIER

    def __post_init__(self):
        """Valide les paramètres."""
        if not _is_decay(self.score_decay):
            raise ValueError(f"score_decay must be in (0, 1), got {self.score_decay}")

        for name in ('new_best_multiplier', 'new_improving_multiplier', 'new_accepted_multiplier'):
            value = getattr(self, name)
            if not _is_positive(value):
                raise ValueError(f"{name} must be positive, got {value}")

    def to_dict(self) -> Dict[str, Any]:
        """Convertit en dictionnaire (même format que le fichier JSON)."""
        return {'scores': asdict(self)}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'AlgorithmParams':
        """
        Construit les paramètres depuis un dictionnaire au format JSON.

        Les clés sont cherchées sous "scores". Chaque clé absente ou
        invalide prend sa valeur par défaut.
        """
        return AlgorithmParams(
            score_decay=read_float(data, 'scores.score_decay',
                                   DEFAULT_SCORE_DECAY, _is_decay),
            new_best_multiplier=read_float(data, 'scores.new_best_multiplier',
                                           DEFAULT_NEW_BEST_MULTIPLIER, _is_positive),
            new_improving_multiplier=read_float(data, 'scores.new_improving_multiplier',
                                                DEFAULT_NEW_IMPROVING_MULTIPLIER, _is_positive),
            new_accepted_multiplier=read_float(data, 'scores.new_accepted_multiplier',
                                               DEFAULT_NEW_ACCEPTED_MULTIPLIER, _is_positive),
        )

    @staticmethod
    def from_json(path: Union[str, Path]) -> 'AlgorithmParams':
        """Construit les paramètres depuis un fichier JSON."""
        return AlgorithmParams.from_dict(load_json(path))
