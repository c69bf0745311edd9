import matplotlib.pyplot as plt
import numpy as np


def plot_reward_distribution(results, ax=None, bins=30, colors=None):
    """Histogram of total reward per trial, one layer per algorithm.

    Parameters
    ----------
    results : dict[str, SimResult]
        Label -> result returned by ``run_simulation``.
    ax : matplotlib.axes.Axes or None
        If None a new figure is created.
    colors : dict[str, str] or None
        Label -> colour hex string.

    Returns
    -------
    ax : matplotlib.axes.Axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 4))
    colors = colors or {}

    all_rewards = np.concatenate([res.total_reward for res in results.values()])
    edges = np.histogram_bin_edges(all_rewards, bins=bins)
    for label, res in results.items():
        c = colors.get(label)
        ax.hist(res.total_reward, bins=edges, alpha=0.4, label=label, color=c)
        ax.axvline(res.mean_reward, ls="--", color=c)

    ax.set_xlabel("Total reward per trial")
    ax.set_ylabel("Trials")
    ax.set_title("Total reward distribution")
    ax.legend()
    ax.grid(alpha=0.3)
    return ax


def plot_budget_curves(df, ax=None, colors=None):
    """Mean reward (with confidence band) against budget, for a DataFrame from ``sweep_and_run``.

    One line per (algo_name, algo_param) pair.
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 4))
    colors = colors or {}

    for (name, param), group in df.groupby(["algo_name", df["algo_param"].fillna(-1)], sort=False):
        group = group.sort_values("budget")
        label = name if param == -1 else f"{name} ({param:g})"
        c = colors.get(label)
        line, = ax.plot(group["budget"], group["mean_reward"], marker="o", label=label, color=c)
        if "ci_low" in group and "ci_high" in group:
            ax.fill_between(group["budget"], group["ci_low"], group["ci_high"],
                            alpha=0.15, color=line.get_color())

    ax.set_xlabel("Budget")
    ax.set_ylabel("Mean total reward")
    ax.set_title("Reward by budget")
    ax.legend()
    ax.grid(alpha=0.3)
    return ax
