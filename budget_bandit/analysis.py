import numpy as np
import pandas as pd


# ── Algorithm comparison table ───────────────────────────────────────────────

def _mean_or_nan(arr):
    return float(np.mean(arr)) if arr.size else np.nan


def summarize_results(results, level=0.95):
    """Build a tidy summary DataFrame comparing algorithms run on the same setting.

    Parameters
    ----------
    results : dict[str, SimResult]
        Label -> result returned by ``run_simulation``.
    level : float
        Confidence level of the interval around the mean total reward.

    Returns
    -------
    pd.DataFrame
        One row per algorithm. Columns: ``mean_reward``, ``reward_sd``, ``ci_low``,
        ``ci_high``, ``reward_per_cost``, ``mean_pulls``, ``best_arm_rate``,
        ``mean_remaining_budget`` and ``share_arm_{k}`` for each arm.
    """
    rows = {}
    for label, res in results.items():
        low, high = res.confidence_interval(level)
        row = {
            "mean_reward": res.mean_reward,
            "reward_sd": res.reward_sd,
            "ci_low": low,
            "ci_high": high,
            "reward_per_cost": _mean_or_nan(res.reward_per_cost()[res.n_pulls > 0]),
            "mean_pulls": float(np.mean(res.n_pulls)),
            "best_arm_rate": float(np.mean(res.best_arm_hit)),
            "mean_remaining_budget": float(np.mean(res.remaining_budget)),
        }
        for k, share in enumerate(res.pull_share()):
            row[f"share_arm_{k}"] = share
        rows[label] = row

    df = pd.DataFrame.from_dict(rows, orient="index")
    df.index.name = "algo_name"
    return df


def compare_to_baseline(df, baseline, column="mean_reward"):
    """Difference of ``column`` to the ``baseline`` row, for every row of a summary table."""
    if baseline not in df.index:
        raise ValueError(f"No row for baseline '{baseline}'")
    out = df[[column]].copy()
    out[f"{column}_diff"] = df[column] - df.loc[baseline, column]
    out[f"{column}_rel"] = out[f"{column}_diff"] / df.loc[baseline, column]
    return out


# ── Sweep results ───────────────────────────────────────────────────────────

def best_param_per_budget(df, algo_name, column="mean_reward"):
    """For a sweep DataFrame, the algorithm parameter with the highest ``column`` at each budget."""
    subset = df[df["algo_name"] == algo_name]
    if subset.empty:
        raise ValueError(f"No rows for {algo_name}")
    best = subset.loc[subset.groupby("budget")[column].idxmax()]
    return best[["budget", "algo_param", column]].reset_index(drop=True)
