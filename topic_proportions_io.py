"""
Reading topic proportion tables and writing hot/cold topic results.

Topic distributions are expected in the layout written by the topic model
export: document metadata columns followed by one ``topic_id=<n>`` column per
topic. Topic labels come from a topic info table (``Topic``, ``Name`` and/or
``Representation`` columns, as produced by ``BERTopic.get_topic_info()``).
"""

import ast
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd


TOPIC_COLUMN_PATTERN = re.compile(r"^topic_id=(-?\d+)$")


def load_topic_proportions(
    path: Union[str, Path],
    id_column: str = "id",
    year_column: str = "year",
    date_column: Optional[str] = None,
    topic_prefix: Optional[str] = None,
    verbose: bool = True
) -> pd.DataFrame:
    """
    Load per-document topic proportions from CSV.

    Args:
        path: CSV file with one row per document
        id_column: Document id column; created from the row number if missing
        year_column: Publication year column
        date_column: If given, the year column is derived from this date column
        topic_prefix: Only columns starting with this prefix are topics; by
            default the ``topic_id=<n>`` columns, or every other numeric
            column when there are none
        verbose: Print progress messages

    Returns:
        DataFrame with the id column, the year column and the topic columns
    """
    if verbose:
        print(f"Loading topic proportions from {path}...")
    df = pd.read_csv(path)

    if date_column is not None:
        if date_column not in df.columns:
            raise ValueError(f"Date column '{date_column}' not found in {path}")
        df[year_column] = pd.to_datetime(df[date_column], errors="coerce").dt.year

    if year_column not in df.columns:
        raise ValueError(f"year column required: '{year_column}' not found in {path}")

    df[year_column] = pd.to_numeric(df[year_column], errors="coerce")
    missing_year = df[year_column].isna()
    if missing_year.any():
        if verbose:
            print(f"⚠ Dropping {int(missing_year.sum())} documents without a publication year")
        df = df[~missing_year]
    df = df.astype({year_column: int})

    if id_column not in df.columns:
        if verbose:
            print(f"⚠ No '{id_column}' column, using row numbers as document ids")
        df = df.reset_index(drop=True)
        df[id_column] = df.index

    topics = find_topic_columns(df, id_column=id_column, year_column=year_column, topic_prefix=topic_prefix)
    if not topics:
        raise ValueError(f"No topic columns found in {path}")

    if verbose:
        print(f"✓ Loaded {len(df)} documents, {len(topics)} topics")
    if verbose and len(df):
        print(f"  Years: {df[year_column].min()}-{df[year_column].max()}")

    return df[[id_column, year_column] + topics].reset_index(drop=True)


def find_topic_columns(
    df: pd.DataFrame,
    id_column: str = "id",
    year_column: str = "year",
    topic_prefix: Optional[str] = None
) -> List[str]:
    if topic_prefix is not None:
        return [col for col in df.columns if str(col).startswith(topic_prefix)]

    # metadata written next to topic_id=<n> columns can be numeric too
    exported = [col for col in df.columns if TOPIC_COLUMN_PATTERN.match(str(col))]
    if exported:
        return exported
    return [
        col for col in df.columns
        if col not in (id_column, year_column)
        and not str(col).startswith("Unnamed:")
        and pd.api.types.is_numeric_dtype(df[col])
    ]


def load_topic_info(path: Union[str, Path]) -> pd.DataFrame:
    """Load a topic info table saved as CSV."""
    topic_info = pd.read_csv(path)
    if "Topic" not in topic_info.columns:
        raise ValueError(f"Topic info {path} has no 'Topic' column")
    return topic_info


def _topic_words(row: pd.Series, n_words: int) -> List[str]:
    representation = row.get("Representation")
    if isinstance(representation, str):
        representation = ast.literal_eval(representation)
    if isinstance(representation, (list, tuple)) and len(representation) > 0:
        return [str(word) for word in representation[:n_words]]

    # Name looks like "3_word_word_word"
    name = row.get("Name")
    if isinstance(name, str):
        words = name.split("_")
        if words and words[0].lstrip("-").isdigit():
            words = words[1:]
        return [w for w in words if w][:n_words]
    return []


def topic_labels(topic_info: pd.DataFrame, n_words: int = 5) -> Dict[int, str]:
    """
    Build a readable label for every topic from its top words.

    Returns:
        Dictionary mapping topic id to a label like "3: cell membrane protein"
    """
    labels = {}
    for _, row in topic_info.iterrows():
        topic_id = int(row["Topic"])
        words = _topic_words(row, n_words)
        labels[topic_id] = f"{topic_id}: {' '.join(words)}" if words else f"Topic {topic_id}"
    return labels


def label_topics(
    topic_props: pd.DataFrame,
    topic_info: pd.DataFrame,
    n_words: int = 5,
    verbose: bool = True
) -> pd.DataFrame:
    """
    Rename ``topic_id=<n>`` columns to labels built from the topic's top words.

    Columns without a matching topic, and all other columns, keep their names.
    """
    labels = topic_labels(topic_info, n_words=n_words)
    renames = {}
    for col in topic_props.columns:
        match = TOPIC_COLUMN_PATTERN.match(str(col))
        if match and int(match.group(1)) in labels:
            renames[col] = labels[int(match.group(1))]

    if verbose:
        print(f"✓ Labelled {len(renames)} topic columns")
    return topic_props.rename(columns=renames)


def save_results(
    results: Dict[str, pd.DataFrame],
    output_dir: Union[str, Path],
    suffix: str = "",
    verbose: bool = True
) -> List[Path]:
    """
    Save every result table as CSV.

    Args:
        results: Dictionary returned by compute_hot_cold_topics
        output_dir: Directory to save the tables
        suffix: Suffix for output filenames
        verbose: Print progress messages

    Returns:
        List of written files
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for name, table in results.items():
        output_file = output_dir / (f"{name}_{suffix}.csv" if suffix else f"{name}.csv")
        table.to_csv(output_file, index=False)
        written.append(output_file)
        if verbose:
            print(f"  Saved to: {output_file}")

    return written
