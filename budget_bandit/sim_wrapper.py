import copy
import itertools
import logging
from typing import Optional, Type, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from scipy import stats
from tqdm import tqdm

from budget_bandit.bandit_algorithm import BudgetedBanditAlgorithm
from budget_bandit.simulation_configurator import SimulationConfig
from budget_bandit.utilities import best_ratio_arm

logger = logging.getLogger(__name__)


def run_trial(
    algo: BudgetedBanditAlgorithm,
    sim_config: SimulationConfig,
    seed,
    input_parameters=None,
    arm_means=None,
) -> dict:
    """
    Run one independent trial: build a fresh Bandit, let `algo` spend its budget, collect the outcome.

    :param algo: algorithm instance
    :param sim_config: simulation configuration (costs, budget, reward model)
    :param seed: anything np.random.default_rng accepts (int, SeedSequence, ...)
    :param input_parameters: algorithm parameters, see BudgetedBanditAlgorithm.run
    :param arm_means: fixed expected rewards; drawn from the configured distribution if None
    :return: dict with the trial's outcome
    """
    rng = np.random.default_rng(seed)
    if arm_means is None:
        arm_means = sim_config.generate_arm_means(rng)
    bandit = sim_config.build_bandit(rng, arm_means=arm_means)

    algo.run(bandit, input_parameters)

    pull_counts = bandit.get_pull_counts()
    best_arm = best_ratio_arm(arm_means, sim_config.arm_costs)
    return {
        "total_reward": bandit.total_reward,
        "n_pulls": len(bandit.pull_history),
        "pull_counts": pull_counts,
        "arm_means": np.asarray(arm_means, dtype=float),
        "remaining_budget": bandit.budget,
        "best_arm_hit": bool(len(bandit.pull_history) > 0 and pull_counts[best_arm] == np.max(pull_counts)),
    }


def run_simulation(
    algo: Union[BudgetedBanditAlgorithm, Type[BudgetedBanditAlgorithm]],
    sim_config: SimulationConfig,
    input_parameters=None,
) -> "SimResult":
    """
    The main function for running simulation: sim_config.n_rep independent trials of `algo`.

    Every trial gets its own generator spawned from sim_config.seed, so results do not depend on
    sim_config.n_jobs.

    :param algo: algorithm instance, or algorithm class (instantiated with input_parameters)
    :param sim_config:
    :param input_parameters: the parameters of the algorithm. For each algorithm, check its docstring
    :return: SimResult
    """
    if isinstance(algo, type):
        algo = algo(input_parameters)

    logger.info("Running %d trials of %s (budget %s, %d arms)", sim_config.n_rep, algo.__name__,
                sim_config.budget, sim_config.n_arm)

    seeds = sim_config.spawn_seeds()
    if sim_config.show_progress:
        seeds = tqdm(seeds, desc=algo.__name__)

    if sim_config.n_jobs == 1:
        trials = [run_trial(algo, sim_config, seed, input_parameters) for seed in seeds]
    else:
        with Parallel(n_jobs=sim_config.n_jobs) as parallel:
            trials = parallel(delayed(run_trial)(copy.deepcopy(algo), sim_config, seed, input_parameters)
                              for seed in seeds)

    result = SimResult(trials, sim_config, algo_name=algo.__name__)
    logger.info("%s finished: mean reward %.4f", algo.__name__, result.mean_reward)
    return result


class SimResult:
    def __init__(self, trials, sim_config: SimulationConfig, algo_name: Optional[str] = None):
        """
        Holds the outcome of a batch of trials as numpy arrays (first axis = trial).

        Attributes:
        -----------
        total_reward : np.ndarray, shape (n_rep,)
        n_pulls : np.ndarray, shape (n_rep,)
        pull_counts : np.ndarray, shape (n_rep, n_arm)
        arm_means : np.ndarray, shape (n_rep, n_arm)
            True expected reward of each arm in each trial.
        remaining_budget : np.ndarray, shape (n_rep,)
        best_arm_hit : np.ndarray of bool, shape (n_rep,)
            Whether the arm with the best expected reward/cost ratio was the most pulled one
            (False for trials that could not afford a single pull).
        """
        if len(trials) == 0:
            raise ValueError("SimResult requires at least one trial.")
        self.algo_name = algo_name
        self.sim_config = sim_config
        self.n_rep = len(trials)
        self.n_arm = sim_config.n_arm

        self.total_reward = np.array([t["total_reward"] for t in trials], dtype=float)
        self.n_pulls = np.array([t["n_pulls"] for t in trials], dtype=int)
        self.pull_counts = np.stack([t["pull_counts"] for t in trials])
        self.arm_means = np.stack([t["arm_means"] for t in trials])
        self.remaining_budget = np.array([t["remaining_budget"] for t in trials], dtype=float)
        self.best_arm_hit = np.array([t["best_arm_hit"] for t in trials], dtype=bool)

    @property
    def mean_reward(self):
        return float(np.mean(self.total_reward))

    @property
    def reward_sd(self):
        if self.n_rep < 2:
            return 0.0
        return float(np.std(self.total_reward, ddof=1))

    @property
    def spent_budget(self):
        return self.sim_config.budget - self.remaining_budget

    def confidence_interval(self, level=0.95):
        """Student-t interval for the mean total reward."""
        if self.n_rep < 2 or self.reward_sd == 0:
            return self.mean_reward, self.mean_reward
        low, high = stats.t.interval(level, df=self.n_rep - 1, loc=self.mean_reward,
                                     scale=stats.sem(self.total_reward))
        return float(low), float(high)

    def pull_share(self):
        """Average share of pulls going to each arm, shape (n_arm,). Trials without any pull are left out."""
        pulled = self.n_pulls > 0
        if not np.any(pulled):
            return np.zeros(self.n_arm)
        shares = self.pull_counts[pulled] / self.n_pulls[pulled, np.newaxis]
        return np.mean(shares, axis=0)

    def reward_per_cost(self):
        with np.errstate(divide='ignore', invalid='ignore'):
            return self.total_reward / self.spent_budget

    def to_frame(self):
        df = pd.DataFrame({
            "total_reward": self.total_reward,
            "n_pulls": self.n_pulls,
            "remaining_budget": self.remaining_budget,
            "best_arm_hit": self.best_arm_hit,
        })
        for k in range(self.n_arm):
            df[f"pulls_arm_{k}"] = self.pull_counts[:, k]
        df.insert(0, "algo_name", self.algo_name)
        df.index.name = "trial"
        return df


# === Sweeps ===
def run_task_common(
    sim_config_base: SimulationConfig,
    algo,
    algo_param=None,
    overrides: Optional[dict] = None,
):
    sim_config = copy.deepcopy(sim_config_base)

    if overrides:
        for k, v in overrides.items():
            setattr(sim_config, k, v)
        sim_config.manual_init()

    input_parameters = None if algo_param is None else [algo_param]
    res = run_simulation(algo, sim_config, input_parameters=input_parameters)
    low, high = res.confidence_interval()

    return {
        "algo_name": res.algo_name,
        "algo_param": algo_param,
        "budget": sim_config.budget,
        "setting": sim_config.setting_signature,
        "mean_reward": res.mean_reward,
        "reward_sd": res.reward_sd,
        "ci_low": low,
        "ci_high": high,
        "mean_pulls": float(np.mean(res.n_pulls)),
        "best_arm_rate": float(np.mean(res.best_arm_hit)),
        "mean_remaining_budget": float(np.mean(res.remaining_budget)),
    }


def sweep_and_run(sweep_specs, base_config: SimulationConfig):
    """
    sweep_specs: list of dicts, e.g.
        [
            {"budget": [100, 500]},
            {"algo": [UCBBV1, LSplit]},
            {"algo_param_list": [0.25, 0.5]},
        ]
    Every combination is run once. "algo_param_list" is ignored (set to None) for algorithms that
    take no parameters, and duplicate combinations created that way are skipped.
    base_config: SimulationConfig (copied inside run_task_common)

    Returns: DataFrame of results, one row per combination
    """
    sweep_dict = {}
    for d in sweep_specs:
        sweep_dict.update(d)

    keys = list(sweep_dict.keys())
    value_lists = [sweep_dict[k] for k in keys]

    all_results = []
    seen = set()
    for combo in itertools.product(*value_lists):
        overrides = {}
        algo = None
        algo_param = None

        for k, v in zip(keys, combo):
            if k == "algo":
                algo = v
            elif k == "algo_param_list":
                algo_param = v
            else:
                overrides[k] = v

        if algo is None:
            raise ValueError("sweep_specs must include an 'algo' entry.")
        if not getattr(algo, "takes_parameters", True):
            algo_param = None

        signature = (algo.name, algo_param, tuple(sorted((k, repr(v)) for k, v in overrides.items())))
        if signature in seen:
            continue
        seen.add(signature)

        result = run_task_common(base_config, algo=algo, algo_param=algo_param, overrides=overrides)
        all_results.append({**overrides, **result})

    return pd.DataFrame(all_results)
