"""
Hot and cold topics over publication years.

Takes a table of per-document topic proportions (the output of a fitted LDA or
BERTopic model joined with document metadata), averages the proportions per
year, smooths them with a trailing moving average and correlates every topic
with year. Topics with a significant positive correlation are "hot", topics
with a significant negative correlation are "cold". The top five of each are
plotted and returned as data frames.

Usage:
    python hot_cold_topics.py --topic-distributions topic_distributions.csv --ma 10

    from hot_cold_topics import compute_hot_cold_topics
    hotncold = compute_hot_cold_topics(topic_props, pval=0.01, ma=10)
    hotncold["top5_pos_cor"]
"""

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy.stats import pearsonr

from topic_trend_plots import plot_topic_trends
from topic_proportions_io import label_topics, load_topic_info, load_topic_proportions, save_results


CORRELATION_COLUMNS = ["correlation", "pvalue", "topic_label", "topic_index"]


@dataclass
class TrendConfig:
    """Configuration for the hot/cold topic analysis."""

    # Selection
    pval: float = 0.05
    n_top: int = 5
    strongest_cold: bool = False  # False keeps the tail-of-ranking selection for cold topics

    # Smoothing
    ma: int = 5
    smooth_year: bool = True

    # Input columns
    year_column: str = "year"
    id_column: str = "id"

    # Plotting
    legend_font_size: int = 12
    font_family: str = "Noto Sans"
    output_dir: Optional[Path] = None

    verbose: bool = True

    def __post_init__(self):
        if not 0 <= self.pval <= 1:
            raise ValueError(f"pval must be within [0, 1], got {self.pval}")
        if self.ma < 1:
            raise ValueError(f"Moving average window must be at least 1, got {self.ma}")
        if self.n_top < 1:
            raise ValueError(f"n_top must be at least 1, got {self.n_top}")
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)

    def get_output_suffix(self) -> str:
        """
        Generate standardized output file suffix based on configuration.

        Returns:
            String suffix like "ma5_p0.05" or "ma10_p0.01_rawyear_strongest"
        """
        parts = [f"ma{self.ma}", f"p{self.pval:g}"]
        if not self.smooth_year:
            parts.append("rawyear")
        if self.strongest_cold:
            parts.append("strongest")
        return "_".join(parts)


def _check_year_column(df: pd.DataFrame, year_column: str):
    if year_column not in df.columns or not pd.api.types.is_numeric_dtype(df[year_column]):
        raise ValueError(f"year column required: '{year_column}' is missing or not numeric")


def topic_columns(df: pd.DataFrame, year_column: str = "year") -> List[str]:
    """Names of all columns except the year column, in table order."""
    return [col for col in df.columns if col != year_column]


def aggregate_by_year(
    topic_props: pd.DataFrame,
    year_column: str = "year",
    id_column: str = "id"
) -> pd.DataFrame:
    """
    Average topic proportions per year.

    Args:
        topic_props: One row per document with an id column, a year column and
            one column per topic
        year_column: Name of the year column
        id_column: Name of the document id column, excluded from aggregation

    Returns:
        DataFrame with one row per distinct year (ascending) and the mean
        proportion of every topic in that year
    """
    _check_year_column(topic_props, year_column)

    props = topic_props.drop(columns=[id_column], errors="ignore")
    non_numeric = [
        col for col in topic_columns(props, year_column)
        if not pd.api.types.is_numeric_dtype(props[col])
    ]
    if non_numeric:
        raise ValueError(f"Topic columns must be numeric, got non-numeric columns: {non_numeric}")

    return props.groupby(year_column, sort=True).mean().reset_index()


def moving_average(
    yearly: pd.DataFrame,
    window: int = 5,
    year_column: str = "year",
    smooth_year: bool = True
) -> pd.DataFrame:
    """
    Trailing moving average over the yearly table.

    Every column, the year column included, is replaced by the mean of the
    current and previous ``window - 1`` values. Rows where the average is
    undefined are dropped. With ``smooth_year=False`` the year column keeps the
    last raw year of each window.
    """
    if window < 1:
        raise ValueError(f"Moving average window must be at least 1, got {window}")

    smoothed = yearly.rolling(window=window).mean()
    if not smooth_year:
        smoothed[year_column] = yearly[year_column]

    return smoothed.dropna().reset_index(drop=True)


def _is_constant(values: np.ndarray) -> bool:
    # rolling means of a constant column can differ in the last bits
    return bool(np.allclose(values, values[0], rtol=1e-9, atol=1e-12))


def _pearson(x: np.ndarray, y: np.ndarray) -> Tuple[float, float]:
    # undefined correlation: too few points or no variance
    if len(x) < 3 or _is_constant(x) or _is_constant(y):
        return np.nan, 1.0
    result = pearsonr(x, y)
    return float(result[0]), float(result[1])


def correlate_with_year(smoothed: pd.DataFrame, year_column: str = "year") -> pd.DataFrame:
    """
    Pearson correlation of every topic column with year.

    Args:
        smoothed: Smoothed yearly table
        year_column: Name of the year column

    Returns:
        DataFrame with columns correlation, pvalue, topic_label and
        topic_index (1-based position among the non-year columns). Undefined
        correlations are NaN with a p-value of 1.
    """
    years = smoothed[year_column].to_numpy(dtype=float)
    rows = []
    for idx, topic in enumerate(topic_columns(smoothed, year_column), start=1):
        cor, pval = _pearson(years, smoothed[topic].to_numpy(dtype=float))
        rows.append({"correlation": cor, "pvalue": pval, "topic_label": topic, "topic_index": idx})

    return pd.DataFrame(rows, columns=CORRELATION_COLUMNS)


def rank_topics(
    correlations: pd.DataFrame,
    pval: float = 0.05,
    n_top: int = 5,
    strongest_cold: bool = False
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Select the hot and cold topics from a correlation table.

    Significant topics (p-value <= ``pval``) are sorted by correlation,
    descending. Hot topics are the first ``n_top`` positive ones. Cold topics
    are the last ``n_top`` negative ones of that same ordering, i.e. the
    significant negative topics closest to zero; ``strongest_cold=True`` takes
    the ``n_top`` most negative instead.

    Returns:
        Tuple of (hot, cold) correlation tables
    """
    significant = correlations[correlations["pvalue"] <= pval]
    ranked = significant.sort_values("correlation", ascending=False, kind="mergesort")

    pos = ranked[ranked["correlation"] > 0].head(n_top)
    negative = ranked[ranked["correlation"] < 0]
    if strongest_cold:
        neg = negative.iloc[::-1].head(n_top)
    else:
        neg = negative.tail(n_top)

    return pos.reset_index(drop=True), neg.reset_index(drop=True)


def select_topics(smoothed: pd.DataFrame, selected: pd.DataFrame, year_column: str = "year") -> pd.DataFrame:
    """Year column plus the selected topic columns, in table order."""
    labels = set(selected["topic_label"])
    keep = [col for col in topic_columns(smoothed, year_column) if col in labels]
    return smoothed[[year_column] + keep].reset_index(drop=True)


def compute_hot_cold_topics(
    topic_props: pd.DataFrame,
    pval: float = 0.05,
    ma: int = 5,
    size: int = 12,
    config: Optional[TrendConfig] = None,
    show: bool = True
) -> Dict[str, pd.DataFrame]:
    """
    Find and plot the top hot and cold topics.

    Args:
        topic_props: Per-document topic proportions with id and year columns
        pval: p-value cutoff for a topic to be considered at all
        ma: Moving average window in years
        size: Font size of the legend text
        config: Full configuration; when given it replaces pval, ma and size
        show: Display the two charts

    Returns:
        Dictionary with the keys:
            - top5_positive: year plus the hot topic columns
            - top5_negative: year plus the cold topic columns
            - top5_pos_cor: correlation table of the hot topics
            - top5_neg_cor: correlation table of the cold topics
    """
    if config is None:
        config = TrendConfig(pval=pval, ma=ma, legend_font_size=size)
    year_column = config.year_column

    yearly = aggregate_by_year(topic_props, year_column=year_column, id_column=config.id_column)
    smoothed = moving_average(yearly, window=config.ma, year_column=year_column, smooth_year=config.smooth_year)
    if config.verbose:
        print(f"Aggregated {len(topic_props)} documents into {len(yearly)} years "
              f"({len(smoothed)} after {config.ma}-year moving average)")
        if smoothed.empty:
            print(f"⚠ Fewer than {config.ma} years of data, nothing to correlate")

    correlations = correlate_with_year(smoothed, year_column=year_column)
    pos, neg = rank_topics(correlations, pval=config.pval, n_top=config.n_top,
                           strongest_cold=config.strongest_cold)
    if config.verbose:
        n_significant = int((correlations["pvalue"] <= config.pval).sum())
        print(f"✓ {n_significant} of {len(correlations)} topics significant at p <= {config.pval:g}: "
              f"{len(pos)} hot, {len(neg)} cold selected")

    top_positive = select_topics(smoothed, pos, year_column)
    top_negative = select_topics(smoothed, neg, year_column)

    suffix = config.get_output_suffix()
    for wide, title, name in [
        (top_positive, f"Top {config.n_top} hot topics", "hot_topics"),
        (top_negative, f"Top {config.n_top} cold topics", "cold_topics"),
    ]:
        output_file = config.output_dir / f"{name}_{suffix}.png" if config.output_dir else None
        plot_topic_trends(
            wide,
            title=title,
            legend_font_size=config.legend_font_size,
            year_column=year_column,
            font_family=config.font_family,
            output_file=output_file,
            show=show,
            verbose=config.verbose,
        )

    return {
        "top5_positive": top_positive,
        "top5_negative": top_negative,
        "top5_pos_cor": pos,
        "top5_neg_cor": neg,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Plot the top hot and cold topics of a topic model over publication years",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--topic-distributions',
        type=str,
        required=True,
        help='Path to CSV with one row per document: id, year (or a date) and one column per topic'
    )

    parser.add_argument(
        '--topic-info',
        type=str,
        help='Path to topic info CSV (Topic, Name/Representation) used to label topic columns'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        default='hot_cold_topics',
        help='Directory to save charts and tables (default: hot_cold_topics)'
    )

    parser.add_argument(
        '--pval',
        type=float,
        default=0.05,
        help='p-value cutoff for topics to include in the top lists (default: 0.05)'
    )

    parser.add_argument(
        '--ma',
        type=int,
        default=5,
        help='Moving average interval in years (default: 5)'
    )

    parser.add_argument(
        '--legend-size',
        type=int,
        default=12,
        help='Font size of the legend text (default: 12)'
    )

    parser.add_argument(
        '--n-top',
        type=int,
        default=5,
        help='Number of hot and cold topics to select (default: 5)'
    )

    parser.add_argument(
        '--id-column',
        type=str,
        default='id',
        help='Document id column (default: id)'
    )

    parser.add_argument(
        '--year-column',
        type=str,
        default='year',
        help='Publication year column (default: year)'
    )

    parser.add_argument(
        '--date-column',
        type=str,
        help='Derive the year column from this date column'
    )

    parser.add_argument(
        '--topic-prefix',
        type=str,
        help='Only treat columns starting with this prefix as topics (e.g. "topic_id=")'
    )

    parser.add_argument(
        '--raw-year',
        action='store_true',
        help='Correlate against the last year of each window instead of the smoothed year'
    )

    parser.add_argument(
        '--strongest-cold',
        action='store_true',
        help='Select the most negative cold topics instead of the tail of the ranking'
    )

    parser.add_argument(
        '--font-family',
        type=str,
        default='Noto Sans',
        help='Font family to use for the charts (default: Noto Sans)'
    )

    parser.add_argument(
        '--no-show',
        action='store_true',
        help='Only save the charts, do not display them'
    )

    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Only print the selected topics, no progress messages'
    )

    args = parser.parse_args()

    try:
        config = TrendConfig(
            pval=args.pval,
            n_top=args.n_top,
            strongest_cold=args.strongest_cold,
            ma=args.ma,
            smooth_year=not args.raw_year,
            year_column=args.year_column,
            id_column=args.id_column,
            legend_font_size=args.legend_size,
            font_family=args.font_family,
            output_dir=args.output_dir,
            verbose=not args.quiet,
        )
        config.output_dir.mkdir(parents=True, exist_ok=True)

        topic_props = load_topic_proportions(
            args.topic_distributions,
            id_column=args.id_column,
            year_column=args.year_column,
            date_column=args.date_column,
            topic_prefix=args.topic_prefix,
            verbose=config.verbose,
        )
        if args.topic_info:
            topic_props = label_topics(topic_props, load_topic_info(args.topic_info), verbose=config.verbose)

        results = compute_hot_cold_topics(topic_props, config=config, show=not args.no_show)
        save_results(results, config.output_dir, suffix=config.get_output_suffix(), verbose=config.verbose)

        print("\nHot topics:")
        print(results["top5_pos_cor"].to_string(index=False))
        print("\nCold topics:")
        print(results["top5_neg_cor"].to_string(index=False))
        print(f"\n✓ Analysis completed successfully! Results saved to: {config.output_dir}")

    except Exception as e:
        print(f"\n✗ Error: {e}")
        import traceback
        traceback.print_exc()
        return 1

    return 0


if __name__ == '__main__':
    exit(main())
