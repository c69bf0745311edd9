import numpy as np
import pytest

from budget_bandit.arm import Arm, ArmMemory, bernoulli_reward, constant_reward, normal_reward
from budget_bandit.bandit import Bandit


def make_bandit(costs, rewards, budget, seed=0):
    return Bandit.from_costs(costs, [constant_reward(r) for r in rewards], budget,
                             rng=np.random.default_rng(seed))


def test_pull_updates_budget_and_memory():
    bandit = make_bandit([1, 2, 4], [1.0, 1.0, 2.0], budget=10)
    bandit.pull(2)

    assert bandit.budget == 6
    assert bandit.memories[2].pulls == 1
    assert bandit.memories[2].ratio == pytest.approx(0.5)
    assert bandit.memories[0].pulls == 0
    assert bandit.total_reward == 2.0
    assert bandit.pull_history == [2]


def test_ratio_is_running_reward_per_cost():
    memory = ArmMemory()
    memory.update(1.0, cost=2.0)
    memory.update(0.0, cost=2.0)
    memory.update(2.0, cost=2.0)
    assert memory.pulls == 3
    assert memory.ratio == pytest.approx(3.0 / 6.0)
    assert memory.mean_reward == pytest.approx(1.0)


def test_min_cost_and_alignment():
    bandit = make_bandit([3, 1.5, 2], [0, 0, 0], budget=5)
    assert bandit.min_cost == 1.5
    assert len(bandit.memories) == len(bandit.arms) == 3
    assert not bandit.is_exhausted()


def test_exhausted_when_budget_below_min_cost():
    bandit = make_bandit([5], [1.0], budget=4)
    assert bandit.is_exhausted()


def test_invalid_construction():
    with pytest.raises(ValueError):
        Bandit([], 10)
    with pytest.raises(ValueError):
        make_bandit([1], [1.0], budget=-1)
    with pytest.raises(ValueError):
        Arm(0, constant_reward(1.0))
    with pytest.raises(ValueError):
        Bandit.from_costs([1, 2], [constant_reward(1.0)], 10)


def test_state_arrays():
    bandit = make_bandit([1, 2], [1.0, 1.0], budget=10)
    bandit.pull(0)
    bandit.pull(0)
    bandit.pull(1)
    np.testing.assert_array_equal(bandit.get_pull_counts(), [2, 1])
    np.testing.assert_allclose(bandit.get_ratios(), [1.0, 0.5])
    np.testing.assert_array_equal(bandit.get_costs(), [1, 2])


def test_reward_sources_use_trial_rng():
    rng = np.random.default_rng(1)
    assert bernoulli_reward(1.0)(rng) == 1.0
    assert bernoulli_reward(0.0)(rng) == 0.0
    assert normal_reward(3.0, 0.0)(rng) == 3.0

    a = [normal_reward(0.0, 1.0)(np.random.default_rng(7)) for _ in range(2)]
    assert a[0] == a[1]


def test_budget_can_be_spent_down_despite_rounding():
    bandit = make_bandit([0.1], [1.0], budget=0.3)
    for _ in range(3):
        assert bandit.can_afford(0.1)
        bandit.pull(0)
    assert bandit.budget == 0.0
    assert bandit.is_exhausted()
    assert not bandit.can_afford(0.1)
