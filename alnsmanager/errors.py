"""
Erreurs du moteur ALNS.

Deux familles bien distinctes :
- PreconditionError : mauvaise utilisation de l'API (ex: solve() sans opérateur)
- les exceptions levées par le code utilisateur (opérateurs, critère
  d'acceptation, visiteur) ne sont jamais encapsulées : elles remontent telles quelles.

ConfigurationWarning signale une clé de configuration invalide remplacée
par sa valeur par défaut (jamais fatal).
"""


class ALNSError(Exception):
    """Classe de base des erreurs levées par le moteur lui-même."""


class PreconditionError(ALNSError, RuntimeError):
    """L'API a été mal utilisée (ex: aucun opérateur destroy enregistré)."""


class ConfigurationWarning(UserWarning):
    """Clé de configuration absente ou invalide, remplacée par le défaut."""
