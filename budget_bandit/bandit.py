import numpy as np

from budget_bandit.arm import Arm, ArmMemory

# costs that sum to the budget up to floating-point drift (e.g. 0.1 * 3 vs 0.3) are still affordable
BUDGET_TOL = 1e-9


class Bandit:
    def __init__(self, arms, budget, rng=None):
        """
        Trial context for one budget-constrained bandit run.

        The arm list and memory list are index-aligned: memories[i] holds the statistics of arms[i].
        The only way to change the state is pull(); algorithms are responsible for only pulling
        arms they can afford. Affordability is checked with can_afford(), which allows BUDGET_TOL
        of rounding error, so the budget can be spent down to exactly 0.

        :param arms: list of Arm, fixed for the whole trial
        :param budget: starting budget
        :param rng: numpy Generator used for reward sampling and by the algorithms for randomization.
                    A fresh unseeded generator is created if None.
        """
        if len(arms) == 0:
            raise ValueError("Bandit requires at least one arm.")
        if budget < 0:
            raise ValueError(f"Budget must be non-negative, got {budget}.")

        self.arms = list(arms)
        self.memories = [ArmMemory() for _ in self.arms]
        self.budget = budget
        self.initial_budget = budget
        self.min_cost = min(arm.cost for arm in self.arms)
        self.rng = np.random.default_rng() if rng is None else rng

        self.total_reward = 0.0
        self.pull_history = []

    @classmethod
    def from_costs(cls, costs, reward_sources, budget, rng=None):
        if len(costs) != len(reward_sources):
            raise ValueError("costs and reward_sources must have the same length.")
        return cls([Arm(cost, source) for cost, source in zip(costs, reward_sources)], budget, rng=rng)

    @property
    def n_arm(self):
        return len(self.arms)

    def pull(self, index):
        arm = self.arms[index]
        reward = arm.sample_reward(self.rng)
        self.budget -= arm.cost
        if -BUDGET_TOL < self.budget < 0:
            self.budget = 0.0
        self.memories[index].update(reward, arm.cost)
        self.total_reward += reward
        self.pull_history.append(index)

    def get_costs(self):
        return np.array([arm.cost for arm in self.arms], dtype=float)

    def get_pull_counts(self):
        return np.array([memory.pulls for memory in self.memories], dtype=float)

    def get_ratios(self):
        return np.array([memory.ratio for memory in self.memories], dtype=float)

    def can_afford(self, cost):
        return cost <= self.budget + BUDGET_TOL

    def is_exhausted(self):
        # budget only decreases, so once the cheapest arm is out of reach every arm is
        return not self.can_afford(self.min_cost)

    def __repr__(self):
        return f"Bandit(n_arm={self.n_arm}, budget={self.budget}, min_cost={self.min_cost})"
