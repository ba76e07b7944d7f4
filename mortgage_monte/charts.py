"""Chart generation for projection results."""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from mortgage_monte.monte_carlo import ProjectionResult
from mortgage_monte.simulation import YearRecord

# Scenario color mapping
SCENARIO_COLORS = {
    "mortgage": "#0033cc",        # blue
    "invest_first": "#cc3300",    # red
}
TAXABLE_COLORS = {
    "mortgage": "#6600cc",
    "invest_first": "#ff6600",
}
RETIREMENT_COLOR = "#00cc00"

SCENARIO_LABELS = {
    "mortgage": "Pay down mortgage",
    "invest_first": "Invest first",
}


def _format_dollar_axis(ax: plt.Axes):
    """Show Y axis ticks as $K / $M."""
    def fmt(x, _):
        if abs(x) >= 1_000_000:
            return f"${x / 1_000_000:.1f}M"
        if abs(x) >= 1_000:
            return f"${x / 1_000:.0f}K"
        return f"${x:.0f}"
    ax.yaxis.set_major_formatter(ticker.FuncFormatter(fmt))


def _scenarios(result: ProjectionResult) -> list[tuple[str, list[YearRecord]]]:
    return [("mortgage", result.mortgage), ("invest_first", result.invest_first)]


def _save(fig, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return filepath


def plot_net_worth(result: ProjectionResult, output_path: Path, name: str = "") -> Path:
    """Line chart of mean net worth per scenario with the year-30 95% CI.

    Args:
        result: ProjectionResult from project().
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "base" → net_worth-base.png).

    Returns:
        Path to the generated PNG file.
    """
    fig, ax = plt.subplots(figsize=(14, 8))

    for key, trajectory in _scenarios(result):
        years = [d.year for d in trajectory]
        net_worth = [d.net_worth for d in trajectory]
        color = SCENARIO_COLORS[key]
        ax.plot(years, net_worth, label=SCENARIO_LABELS[key], color=color, linewidth=2)

        final = trajectory[-1]
        if final.confidence_interval:
            ax.errorbar(
                final.year, final.net_worth, yerr=final.confidence_interval,
                color=color, capsize=6, linewidth=1.5,
            )
            ax.annotate(
                f"±${final.confidence_interval:,.0f}",
                xy=(final.year, final.net_worth + final.confidence_interval),
                fontsize=10, color=color, ha="right", va="bottom",
            )

    ax.set_xlabel("Year")
    ax.set_ylabel("Net worth")
    ax.set_title(f"Mean net worth by scenario (N={result.n_trials:,} trials, 95% CI at year 30)")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_dollar_axis(ax)

    return _save(fig, output_path, "net_worth", name)


def plot_balances(result: ProjectionResult, output_path: Path, name: str = "") -> Path:
    """Three panels: mortgage balance, investment accounts, liquidity ratio."""
    fig, axes = plt.subplots(1, 3, figsize=(18, 6))
    ax_loan, ax_inv, ax_liq = axes

    for key, trajectory in _scenarios(result):
        years = [d.year for d in trajectory]
        label = SCENARIO_LABELS[key]
        ax_loan.plot(years, [d.balance for d in trajectory], label=label,
                     color=SCENARIO_COLORS[key], linewidth=2)
        ax_inv.plot(years, [d.taxable_investments for d in trajectory],
                    label=f"{label}: taxable", color=TAXABLE_COLORS[key], linewidth=2)
        ax_liq.plot(years, [d.liquidity_ratio for d in trajectory], label=label,
                    color=SCENARIO_COLORS[key], linewidth=2)

    # 401(k) path is identical in distribution for both scenarios
    ax_inv.plot(
        [d.year for d in result.mortgage],
        [d.retirement_401k for d in result.mortgage],
        label="401(k)", color=RETIREMENT_COLOR, linewidth=1.8, linestyle="--",
    )
    ax_liq.axhline(1.0, color="#666666", linewidth=1, linestyle=":")

    ax_loan.set_title("Mortgage balance")
    ax_inv.set_title("Investment accounts")
    ax_liq.set_title("Liquidity ratio (liquid assets / target)")
    for ax in axes:
        ax.set_xlabel("Year")
        ax.grid(True, alpha=0.3)
        ax.legend(loc="best", fontsize=9)
    _format_dollar_axis(ax_loan)
    _format_dollar_axis(ax_inv)

    return _save(fig, output_path, "balances", name)
