"""Budget-constrained multi-armed bandit simulation."""

from budget_bandit.arm import Arm, ArmMemory, bernoulli_reward, constant_reward, normal_reward
from budget_bandit.bandit import Bandit
from budget_bandit.bandit_algorithm import BudgetedBanditAlgorithm, LSplit, UCBBV1, get_algorithm
from budget_bandit.simulation_configurator import SimulationConfig
from budget_bandit.sim_wrapper import run_simulation, run_trial, sweep_and_run
from budget_bandit.analysis import summarize_results
