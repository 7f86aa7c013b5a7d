"""
Tests pytest pour AlgorithmStatus et la copie des solutions

Usage:
    pytest Tests/test_status.py -v
"""

import pytest

from alnsmanager.params import AlgorithmParams
from alnsmanager.solver import ALNSSolver
from alnsmanager.status import AlgorithmStatus, clone_solution


# ============================================================================
# FIXTURES
# ============================================================================

class RouteDict(dict):
    """Solution stockée dans un dict : {'route': [...]} ; hérite du .copy() superficiel."""
    def cost(self):
        return float(sum(self['route']))


class RouteList(list):
    """Solution liste de routes imbriquées."""
    def cost(self):
        return float(sum(sum(route) for route in self))


class CountingCopy:
    """Solution avec son propre .copy() qui compte ses appels."""
    copies = 0

    def __init__(self, route):
        self.route = route

    def cost(self):
        return float(sum(self.route))

    def copy(self):
        CountingCopy.copies += 1
        return CountingCopy(list(self.route))


class Plain:
    """Solution sans .copy()."""
    def __init__(self, route):
        self.route = route

    def cost(self):
        return float(sum(self.route))


# ============================================================================
# TESTS - clone_solution
# ============================================================================

def test_clone_dict_subclass_is_deep():
    """Le .copy() hérité de dict est ignoré : la route imbriquée est copiée."""
    original = RouteDict(route=[1, 2, 3])
    clone = clone_solution(original)

    clone['route'].append(4)
    assert original['route'] == [1, 2, 3]
    assert isinstance(clone, RouteDict)


def test_clone_list_subclass_is_deep():
    """Même chose pour une sous-classe de list."""
    original = RouteList([[1, 2], [3]])
    clone = clone_solution(original)

    clone[0].append(10)
    assert original == [[1, 2], [3]]
    assert isinstance(clone, RouteList)


def test_clone_uses_user_defined_copy():
    """Un .copy() défini par l'utilisateur est appelé."""
    CountingCopy.copies = 0
    original = CountingCopy([1, 2])
    clone = clone_solution(original)

    assert CountingCopy.copies == 1
    assert clone is not original
    assert clone.route == [1, 2]


def test_clone_without_copy_uses_deepcopy():
    """Sans .copy(), copie profonde."""
    original = Plain([1, 2])
    clone = clone_solution(original)

    clone.route.append(3)
    assert original.route == [1, 2]


# ============================================================================
# TESTS - AlgorithmStatus
# ============================================================================

def test_status_solutions_are_independent_copies():
    """Les trois solutions de départ sont des copies distinctes de l'initiale."""
    initial = RouteDict(route=[5, 5])
    status = AlgorithmStatus(initial, seed=0)

    solutions = [status.initial_solution, status.best_solution,
                 status.current_solution, status.new_solution]
    assert len({id(s) for s in solutions}) == 4
    assert all(s is not initial for s in solutions)

    status.current_solution['route'].append(1)
    assert status.best_solution['route'] == [5, 5]
    assert initial['route'] == [5, 5]


def test_dict_solution_run_keeps_best_intact():
    """Un destroy qui modifie la route de la candidate ne corrompt ni courante ni meilleure."""
    solver = ALNSSolver(AlgorithmParams(), RouteDict(route=[10, 10]), seed=0)

    def drop_last(solution):
        solution['route'].pop()

    def add_five(solution):
        solution['route'].append(5)

    solver.register_destroy(drop_last)
    solver.register_repair(add_five)
    solver.set_visitor(lambda status: status.iteration_number + 1 < 3)
    best = solver.solve()

    # [10, 10] -> [10, 5] -> [10, 5] -> [10, 5] : chaque passe part de la courante
    assert best['route'] == [10, 5]
    assert solver.status.current_solution['route'] == [10, 5]
    assert solver.status.initial_solution['route'] == [10, 10]
    assert best is not solver.status.current_solution


def test_status_repr():
    """repr lisible."""
    status = AlgorithmStatus(RouteDict(route=[1.5]), seed=0)
    assert repr(status) == "AlgorithmStatus(iteration=0, elapsed=0.00s, best=1.50, current=1.50)"


@pytest.mark.parametrize("initial", [RouteDict(route=[3]), RouteList([[3]]), Plain([3])])
def test_reset_clones_new_initial(initial):
    """reset copie la nouvelle solution initiale."""
    status = AlgorithmStatus(Plain([100]), seed=0)
    status.iteration_number = 7
    status.reset(initial)

    assert status.iteration_number == 0
    assert status.best_solution.cost() == 3.0
    assert status.best_solution is not initial
