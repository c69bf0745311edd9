"""
Stateless selection helpers shared by the budget-constrained algorithms.
"""
import numpy as np


def generate_indices(n_arm, rng):
    """Uniformly random permutation of the arm indices 0..n_arm-1, as a list."""
    return [int(i) for i in rng.permutation(n_arm)]


def get_affordable(bandit, indices=None):
    """
    Filter arm indices by affordability against the bandit's current budget.

    :param bandit: Bandit
    :param indices: iterable of arm indices to filter. All arms if None.
    :return: list of indices whose arm cost does not exceed the remaining budget (order preserved)
    """
    if indices is None:
        indices = range(bandit.n_arm)
    return [i for i in indices if bandit.can_afford(bandit.arms[i].cost)]


def get_best_from_feasibles(bandit, feasibles):
    """
    Index of the arm with the highest ratio among `feasibles`.

    Ties go to the candidate that comes first in `feasibles`, so passing a random
    permutation gives a randomized tie-break. Returns None for an empty candidate list.
    """
    current_best = None
    for i in feasibles:
        if current_best is None or bandit.memories[i].ratio > bandit.memories[current_best].ratio:
            current_best = i
    return current_best


def get_best_rotated(values, feasibles, start):
    """
    Scan `values` starting at `start` (wrap-around) and return the first index holding the
    maximum among the indices in `feasibles`. None if nothing is feasible.
    """
    feasibles = set(feasibles)
    n = len(values)
    current_best = None
    for offset in range(n):
        index = (offset + start) % n
        if index in feasibles and (current_best is None or values[index] > values[current_best]):
            current_best = index
    return current_best


def get_pull_result(algo_name, index, arm, memory):
    return (f"[{algo_name}] Pulled arm {index} (cost {arm.cost:g}): "
            f"pulls = {memory.pulls}, mean reward = {memory.mean_reward:.4f}, ratio = {memory.ratio:.4f}")


def best_ratio_arm(arm_means, costs):
    """Index of the arm with the highest expected reward per unit cost."""
    return int(np.argmax(np.asarray(arm_means, dtype=float) / np.asarray(costs, dtype=float)))
