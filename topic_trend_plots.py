"""
Line charts of topic proportions over years.

Used by hot_cold_topics.py to draw the hot and cold topic charts: one line per
topic, year on the x axis and the (smoothed) mean topic proportion on the y
axis.
"""

from pathlib import Path
from typing import Optional, Union

import matplotlib.font_manager as fm
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns


sns.set_style("whitegrid")


def check_font_available(font_name: str) -> bool:
    """Check if a font is available on the system."""
    available_fonts = [f.name for f in fm.fontManager.ttflist]
    return font_name in available_fonts


def resolve_font_family(font_family: Optional[str]) -> str:
    """Return ``font_family`` if installed, else matplotlib's default family."""
    if font_family and check_font_available(font_family):
        return font_family
    default = plt.rcParams['font.family']
    return default[0] if isinstance(default, list) else default


def to_long_format(wide: pd.DataFrame, year_column: str = "year") -> pd.DataFrame:
    """
    Reshape a wide year x topic table to long format.

    Args:
        wide: Table with a year column and one column per topic
        year_column: Name of the year column

    Returns:
        DataFrame with columns year, topic and value, one row per year and topic
    """
    return wide.melt(id_vars=[year_column], var_name="topic", value_name="value")


def plot_topic_trends(
    wide: pd.DataFrame,
    title: str,
    legend_font_size: int = 12,
    year_column: str = "year",
    font_family: Optional[str] = None,
    output_file: Optional[Union[str, Path]] = None,
    show: bool = True,
    verbose: bool = True
):
    """
    Plot one line per topic column against year.

    An empty table or a table without topic columns gives an empty chart.

    Args:
        wide: Year column plus the topic columns to plot
        title: Chart title
        legend_font_size: Font size of the legend text (topic labels)
        year_column: Name of the year column
        font_family: Font family for all text, falls back to the default font
        output_file: Save the chart as PNG to this path
        show: Display the chart
        verbose: Print progress messages

    Returns:
        The matplotlib figure
    """
    font = resolve_font_family(font_family)
    long_df = to_long_format(wide, year_column=year_column)

    fig, ax = plt.subplots(figsize=(12, 7))

    if long_df.empty:
        if verbose:
            print(f"⚠ {title}: no topics to plot")
        ax.text(0.5, 0.5, "No significant topics", transform=ax.transAxes,
                ha='center', va='center', fontsize=12, fontfamily=font, color='gray')
    else:
        groups = long_df.groupby("topic", sort=False)
        colors = sns.color_palette("husl", groups.ngroups)
        for color, (topic, group) in zip(colors, groups):
            ax.plot(group[year_column], group["value"], linewidth=2, color=color, label=str(topic))
        ax.legend(prop={'family': font, 'size': legend_font_size})

    ax.set_xlabel('Year', fontsize=12, fontfamily=font)
    ax.set_ylabel('Mean topic proportion', fontsize=12, fontfamily=font)
    ax.set_title(title, fontsize=14, fontweight='bold', fontfamily=font)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_file is not None:
        plt.savefig(output_file, dpi=300, bbox_inches='tight')
        if verbose:
            print(f"  Saved to: {output_file}")

    if show:
        plt.show()
    plt.close(fig)

    return fig
