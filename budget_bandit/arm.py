"""
Arms and per-arm memory for budget-constrained bandits.

An arm is a fixed (cost, reward source) pair. The reward source is any callable that
takes a numpy Generator and returns one reward, so the bandit can hand every trial its
own random stream.
"""
from dataclasses import dataclass
from functools import partial
from typing import Callable

import numpy as np


def _bernoulli(rng, p):
    return float(rng.binomial(n=1, p=p))


def _normal(rng, loc, scale):
    return float(rng.normal(loc=loc, scale=scale))


def _constant(rng, value):
    return float(value)


def bernoulli_reward(p):
    return partial(_bernoulli, p=p)


def normal_reward(loc, scale):
    return partial(_normal, loc=loc, scale=scale)


def constant_reward(value):
    """Deterministic reward source (mostly for tests and sanity checks)."""
    return partial(_constant, value=value)


@dataclass(frozen=True)
class Arm:
    cost: float
    reward_source: Callable[[np.random.Generator], float]

    def __post_init__(self):
        if not self.cost > 0:
            raise ValueError(f"Arm cost must be positive, got {self.cost}.")

    def sample_reward(self, rng):
        return self.reward_source(rng)


@dataclass
class ArmMemory:
    """
    Running statistics for one arm.

    pulls (int): number of times the arm has been pulled.
    cumulative_reward (float): sum of observed rewards.
    ratio (float): average observed reward per unit of cost. Stays 0.0 until the first pull.
    """
    pulls: int = 0
    cumulative_reward: float = 0.0
    ratio: float = 0.0

    def update(self, reward, cost):
        self.pulls += 1
        self.cumulative_reward += reward
        self.ratio = self.cumulative_reward / (self.pulls * cost)

    @property
    def mean_reward(self):
        if self.pulls == 0:
            return 0.0
        return self.cumulative_reward / self.pulls
