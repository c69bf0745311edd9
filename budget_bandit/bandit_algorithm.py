import logging
import math
from abc import ABC, abstractmethod

import numpy as np

from budget_bandit import utilities

logger = logging.getLogger(__name__)


class BudgetedBanditAlgorithm(ABC):
    name = None
    takes_parameters = True

    def __init__(self, algo_para=None):
        """
        :param algo_para: default parameter list used when run() is called without input_parameters.
                          A single number is wrapped into a one-element list.
        """
        if algo_para is not None and not isinstance(algo_para, (list, tuple, np.ndarray)):
            algo_para = [algo_para]
        self.algo_para = algo_para
        self.__name__ = self.name or f"{self.__class__.__name__}"

    def run(self, bandit, input_parameters=None):
        """
        Pull arms of `bandit` until its budget is exhausted.

        :param bandit: the Bandit (trial context) to drive. Mutated in place.
        :param input_parameters: algorithm specific parameter list. Falls back to the list given at construction.
        """
        if input_parameters is None:
            input_parameters = self.algo_para
        self._run(bandit, [] if input_parameters is None else list(input_parameters))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("[%s] Budget exhausted (remaining %s). Trial complete.", self.name, bandit.budget)

    @abstractmethod
    def _run(self, bandit, input_parameters):
        pass

    def __repr__(self):
        return f"{self.__class__.__name__}({self.algo_para})"


def get_d_values(pulls, ratios, lam, total_pulls):
    """
    UCB-BV1 D-values for all arms.

        root = sqrt(ln(total_pulls - 1) / pulls)
        D    = ratio + (1 + 1/lam) * root / (lam - root)

    The bound is not clamped: when lam - root is zero or negative D becomes inf or flips sign,
    and those values are ranked as they are. ln(total_pulls - 1) is taken as 0 when its argument
    is not positive, and arms that were never pulled get D = inf.

    :param pulls: array of pull counts per arm
    :param ratios: array of observed reward/cost ratios per arm
    :param lam: minimum arm cost
    :param total_pulls: round counter (initialization pulls included)
    :return: np.ndarray of D-values
    """
    pulls = np.asarray(pulls, dtype=float)
    ratios = np.asarray(ratios, dtype=float)
    log_term = math.log(total_pulls - 1) if total_pulls > 1 else 0.0

    with np.errstate(divide='ignore', invalid='ignore'):
        root = np.sqrt(log_term / pulls)
        d_values = ratios + (1 + 1 / lam) * root / (lam - root)
    d_values[pulls == 0] = np.inf
    return d_values


class UCBBV1(BudgetedBanditAlgorithm):
    """
    UCB-BV1: pull every arm once in random order, then repeatedly pull the affordable arm
    with the greatest D-value. Takes no parameters.
    """
    name = "UCB-BV1"
    takes_parameters = False

    def _run(self, bandit, input_parameters):
        arms = bandit.arms
        memories = bandit.memories
        lam = bandit.min_cost
        total_pulls = 0
        trace = logger.isEnabledFor(logging.DEBUG)

        if bandit.is_exhausted():
            return

        # initial phase: each arm once, in random order
        for i in utilities.generate_indices(bandit.n_arm, bandit.rng):
            if not bandit.can_afford(arms[i].cost):
                continue
            bandit.pull(i)
            total_pulls += 1
            if trace:
                logger.debug(utilities.get_pull_result(self.name, i, arms[i], memories[i]))

        if trace:
            logger.debug("[%s] Initial phase complete.", self.name)

        # exploitation phase
        while not bandit.is_exhausted():
            total_pulls += 1
            d_values = get_d_values(bandit.get_pull_counts(), bandit.get_ratios(), lam, total_pulls)
            if trace:
                logger.debug("[%s] D-values set to: %s", self.name, d_values)

            start = int(bandit.rng.integers(bandit.n_arm))
            current_best = utilities.get_best_rotated(d_values, utilities.get_affordable(bandit), start)
            if current_best is None:
                break

            bandit.pull(current_best)
            if trace:
                logger.debug(utilities.get_pull_result(self.name, current_best, arms[current_best],
                                                       memories[current_best]))


class LSplit(BudgetedBanditAlgorithm):
    """
    l-split: pull every surviving arm once per iteration, then keep only the
    floor(n_arm * (1 - l_value)^iteration) best arms by ratio (at least one).

    input_parameters[0] -> l_value in (0, 1): share of arms dropped in the first iteration.
    """
    name = "l-split"

    def __init__(self, algo_para=None):
        super().__init__(algo_para)
        self.schedule_history = []

    def _run(self, bandit, input_parameters):
        if len(input_parameters) < 1:
            raise ValueError(f"{self.name} requires the elimination rate l_value as input_parameters[0].")
        l_value = float(input_parameters[0])
        if not 0 < l_value < 1:
            raise ValueError(f"{self.name} requires 0 < l_value < 1, got {l_value}.")

        arms = bandit.arms
        memories = bandit.memories
        n_arm = bandit.n_arm
        trace = logger.isEnabledFor(logging.DEBUG)

        remaining_arms = list(range(n_arm))
        num_to_pull = n_arm
        iterations = 0
        self.schedule_history = []

        while len(remaining_arms) > 0 and not bandit.is_exhausted():
            for i in remaining_arms:
                if bandit.can_afford(arms[i].cost):
                    bandit.pull(i)
                    if trace:
                        logger.debug(utilities.get_pull_result(self.name, i, arms[i], memories[i]))

            iterations += 1
            remaining_arms = []

            if num_to_pull > 1:
                num_to_pull = max(int(math.floor(n_arm * (1 - l_value) ** iterations)), 1)
                if trace:
                    logger.debug("[%s] Number of arms to pull on next iteration: %d", self.name, num_to_pull)
            self.schedule_history.append(num_to_pull)

            # best arms by ratio survive; unaffordable picks are replaced by the next best
            feasibles = utilities.generate_indices(n_arm, bandit.rng)
            while len(remaining_arms) < num_to_pull and feasibles:
                current_best = utilities.get_best_from_feasibles(bandit, feasibles)
                feasibles.remove(current_best)
                if bandit.can_afford(arms[current_best].cost):
                    remaining_arms.append(current_best)


ALGORITHMS = {algo.name: algo for algo in (UCBBV1, LSplit)}


def get_algorithm(name, algo_para=None):
    try:
        return ALGORITHMS[name](algo_para)
    except KeyError:
        raise ValueError(f"Unknown algorithm '{name}'. Available: {sorted(ALGORITHMS)}") from None
