"""
template for running a simulation (how to set up configurations etc)
"""
import logging

import numpy as np
import matplotlib.pyplot as plt

from budget_bandit import bandit_algorithm as algorithm
from budget_bandit import sim_wrapper as sw
from budget_bandit.analysis import best_param_per_budget, summarize_results
from budget_bandit.plotting import plot_budget_curves, plot_reward_distribution
from budget_bandit.simulation_configurator import SimulationConfig

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

sim_config_base = SimulationConfig(
    n_rep=2000,
    budget=500,
    arm_costs=[1.0, 1.5, 2.0, 3.0],
    arm_mean_reward_dist_loc=[0.4, 0.55, 0.7, 0.9],
    arm_mean_reward_dist_scale=0.05,
    reward_model='binomial',
    seed=0,
    n_jobs=-1,
    show_progress=True,
)

"""
Part 1: compare algorithms on one setting
"""
results = {
    "UCB-BV1": sw.run_simulation(algorithm.UCBBV1(), sim_config_base),
    "l-split (0.25)": sw.run_simulation(algorithm.LSplit(0.25), sim_config_base),
    "l-split (0.5)": sw.run_simulation(algorithm.LSplit(0.5), sim_config_base),
}
print(summarize_results(results))
plot_reward_distribution(results)

"""
Part 2: sweep budgets and elimination rates
"""
sweeps = [
    {"budget": [100, 250, 500, 1000]},
    {"algo": [algorithm.UCBBV1, algorithm.LSplit]},
    {"algo_param_list": list(map(float, np.linspace(0.2, 0.8, 4)))},
]
sim_config_base.show_progress = False
res_df = sw.sweep_and_run(sweeps, sim_config_base)
print(best_param_per_budget(res_df, "l-split"))

plot_budget_curves(res_df)
plt.show()
