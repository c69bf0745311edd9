import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import pytest

from budget_bandit import sim_wrapper as sw
from budget_bandit.analysis import best_param_per_budget, compare_to_baseline, summarize_results
from budget_bandit.bandit_algorithm import LSplit, UCBBV1
from budget_bandit.plotting import plot_budget_curves, plot_reward_distribution
from budget_bandit.simulation_configurator import SimulationConfig


@pytest.fixture(scope="module")
def sim_config():
    return SimulationConfig(n_rep=10, budget=25, arm_costs=[1.0, 2.0], arm_mean_reward_dist_loc=[0.3, 0.8],
                            arm_mean_reward_dist_scale=0.0, seed=7)


@pytest.fixture(scope="module")
def results(sim_config):
    return {
        "UCB-BV1": sw.run_simulation(UCBBV1(), sim_config),
        "l-split (0.5)": sw.run_simulation(LSplit(0.5), sim_config),
    }


def test_summarize_results(results):
    df = summarize_results(results)
    assert list(df.index) == ["UCB-BV1", "l-split (0.5)"]
    assert {"mean_reward", "ci_low", "ci_high", "best_arm_rate", "share_arm_0", "share_arm_1"} <= set(df.columns)
    assert ((df["ci_low"] <= df["mean_reward"]) & (df["mean_reward"] <= df["ci_high"])).all()
    assert (df["share_arm_0"] + df["share_arm_1"]).round(8).eq(1.0).all()


def test_compare_to_baseline(results):
    df = summarize_results(results)
    out = compare_to_baseline(df, "UCB-BV1")
    assert out.loc["UCB-BV1", "mean_reward_diff"] == 0
    with pytest.raises(ValueError):
        compare_to_baseline(df, "missing")


def test_best_param_per_budget():
    df = pd.DataFrame({
        "algo_name": ["l-split"] * 4,
        "algo_param": [0.25, 0.5, 0.25, 0.5],
        "budget": [10, 10, 20, 20],
        "mean_reward": [3.0, 4.0, 9.0, 8.0],
    })
    best = best_param_per_budget(df, "l-split")
    assert list(best["algo_param"]) == [0.5, 0.25]
    with pytest.raises(ValueError):
        best_param_per_budget(df, "UCB-BV1")


def test_plot_reward_distribution(results):
    ax = plot_reward_distribution(results)
    assert ax.get_xlabel() == "Total reward per trial"
    plt.close("all")


def test_plot_budget_curves(sim_config):
    df = sw.sweep_and_run([{"budget": [10, 20]}, {"algo": [UCBBV1, LSplit]}, {"algo_param_list": [0.5]}],
                          sim_config)
    ax = plot_budget_curves(df)
    assert len(ax.get_lines()) == 2
    plt.close("all")


def test_summary_of_trials_without_pulls():
    config = SimulationConfig(n_rep=3, budget=0.5, arm_costs=[1.0, 2.0], arm_mean_reward_dist_loc=[0.3, 0.8], seed=7)
    df = summarize_results({"UCB-BV1": sw.run_simulation(UCBBV1(), config)})

    row = df.loc["UCB-BV1"]
    assert row["mean_pulls"] == 0
    assert row["best_arm_rate"] == 0
    assert pd.isna(row["reward_per_cost"])
    assert row["share_arm_0"] == 0 and row["share_arm_1"] == 0
