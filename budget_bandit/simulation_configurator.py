import warnings
from dataclasses import dataclass, field
from typing import Literal, Optional, Union

import numpy as np

from budget_bandit.arm import Arm, bernoulli_reward, normal_reward
from budget_bandit.bandit import Bandit


@dataclass
class SimulationConfig:
    """
    Configuration for budget-constrained bandit simulation.

    ----------------------------------------
    Budget & Arm Settings
    ----------------------------------------
    budget (float): Starting budget of every trial. A trial ends once no arm is affordable.

    n_arm (int): Number of arms available in the bandit environment.

    arm_costs (float or list of float): Cost paid each time an arm is pulled.
                                        Can be a single float (applied to all arms) or a list specifying the cost of each arm.

    ----------------------------------------
    Reward Distribution Settings
    ----------------------------------------
    reward_model (Literal): Distribution of a single reward.
        Options: 'binomial': Bernoulli reward with the arm's mean as success probability;
                 'normal':   Gaussian reward around the arm's mean with standard deviation 'reward_std'.

    arm_mean_reward_dist_loc (float or list of float): Mean(s) of the normal distribution the true expected rewards of the arms
                                                       are drawn from (i.e., the "ground truth" of each trial).
                                                       Can be a single float (applied to all arms) or a list specifying the mean for each arm.
    arm_mean_reward_dist_scale (float or list of float): Standard deviation(s) of that distribution.
                                                       A value of 0 implies a fixed scenario across trials (but still unknown to the algorithm).

    reward_std (float or None): Standard deviation of the reward distribution itself. Required for normal rewards,
                                ignored for Bernoulli rewards.

    arm_mean_reward_cap (list of float): Lower and upper bounds on the expected reward of each arm.

    ----------------------------------------
    General Simulation Settings
    ----------------------------------------
    n_rep (int): Number of independent trials.
    seed (int or None): Seed of the root SeedSequence every trial's generator is spawned from.
    n_jobs (int): Number of worker processes for running trials (joblib convention, -1 = all cores).
    show_progress (bool): Whether to display a tqdm progress bar while trials run.
    """

    # Budget / arm parameters
    budget: float = 100.0
    n_arm: int = 3
    arm_costs: Union[float, list[float]] = 1.0

    # Reward distribution parameters
    reward_model: Literal['binomial', 'normal'] = 'binomial'
    arm_mean_reward_dist_loc: Union[float, list[float]] = 0.5
    arm_mean_reward_dist_scale: Union[float, list[float]] = 0.15
    reward_std: Optional[float] = None
    arm_mean_reward_cap: list[float] = field(default_factory=lambda: [0.05, 0.95])

    # General simulation parameters
    n_rep: int = 1000
    seed: Optional[int] = 0
    n_jobs: int = 1
    show_progress: bool = False

    def __post_init__(self):
        self.manual_init()

    def manual_init(self):
        """Broadcast scalar settings to n_arm and validate. Run again after changing fields by hand."""
        per_arm = ['arm_costs', 'arm_mean_reward_dist_loc', 'arm_mean_reward_dist_scale']
        list_lengths = {name: len(getattr(self, name)) for name in per_arm
                        if isinstance(getattr(self, name), (list, tuple, np.ndarray))}

        if list_lengths:
            if len(set(list_lengths.values())) > 1:
                raise ValueError(f"Per-arm settings must have the same length, got {list_lengths}.")
            n_listed = next(iter(list_lengths.values()))
            if n_listed != self.n_arm:
                warnings.warn(
                    f"Length of per-arm settings ({n_listed}) differs from n_arm ({self.n_arm}). "
                    f"Updating n_arm automatically."
                )
                self.n_arm = n_listed

        for name in per_arm:
            value = getattr(self, name)
            if isinstance(value, (list, tuple, np.ndarray)):
                setattr(self, name, [float(v) for v in value])
            else:
                setattr(self, name, [float(value)] * self.n_arm)

        if self.n_arm < 1:
            raise ValueError("n_arm must be at least 1.")
        if self.budget < 0:
            raise ValueError(f"budget must be non-negative, got {self.budget}.")
        if min(self.arm_costs) <= 0:
            raise ValueError(f"arm_costs must be positive, got {self.arm_costs}.")
        if self.reward_model not in ('binomial', 'normal'):
            raise NotImplementedError(f"Reward model '{self.reward_model}' not supported.")
        if self.reward_model == 'normal' and self.reward_std is None:
            raise ValueError("reward_std must be provided for normal reward_model.")
        if self.arm_mean_reward_cap[0] > self.arm_mean_reward_cap[1]:
            raise ValueError(f"arm_mean_reward_cap must be [low, high], got {self.arm_mean_reward_cap}.")

    @property
    def min_cost(self):
        return min(self.arm_costs)

    @property
    def setting_signature(self):
        return (f'budget: {self.budget}; costs: {self.arm_costs}; reward: {self.reward_model}; '
                f'mean loc: {self.arm_mean_reward_dist_loc}')

    def spawn_seeds(self):
        """One independent SeedSequence per trial, so trials can run in any order or process."""
        return np.random.SeedSequence(self.seed).spawn(self.n_rep)

    def generate_arm_means(self, rng):
        samples = rng.normal(loc=self.arm_mean_reward_dist_loc, scale=self.arm_mean_reward_dist_scale,
                             size=self.n_arm)
        return np.clip(samples, self.arm_mean_reward_cap[0], self.arm_mean_reward_cap[1])

    def generate_arms(self, rng, arm_means=None):
        """
        :param rng: numpy Generator of the trial
        :param arm_means: expected reward per arm. Drawn from the configured distribution if None.
        :return: list of Arm
        """
        if arm_means is None:
            arm_means = self.generate_arm_means(rng)
        if self.reward_model == 'binomial':
            sources = [bernoulli_reward(p) for p in arm_means]
        elif self.reward_model == 'normal':
            sources = [normal_reward(loc, self.reward_std) for loc in arm_means]
        else:
            raise NotImplementedError(f"Reward model '{self.reward_model}' not supported.")
        return [Arm(cost, source) for cost, source in zip(self.arm_costs, sources)]

    def build_bandit(self, rng, arm_means=None):
        return Bandit(self.generate_arms(rng, arm_means=arm_means), self.budget, rng=rng)
