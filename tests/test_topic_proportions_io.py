import pandas as pd
import pytest

from hot_cold_topics import TrendConfig, compute_hot_cold_topics
from topic_proportions_io import (
    label_topics,
    load_topic_info,
    load_topic_proportions,
    save_results,
    topic_labels,
)


@pytest.fixture
def distributions_csv(tmp_path):
    df = pd.DataFrame({
        "corpusid": [11, 12, 13, 14],
        "title": ["a", "b", "c", "d"],
        "publicationdate": ["2001-03-01", "2002-07-15", None, "2004-01-30"],
        "topic_id=0": [0.7, 0.6, 0.5, 0.4],
        "topic_id=1": [0.3, 0.4, 0.5, 0.6],
    })
    path = tmp_path / "topic_distributions.csv"
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def topic_info():
    return pd.DataFrame({
        "Topic": [-1, 0, 1],
        "Count": [10, 40, 30],
        "Name": ["-1_the_of_and", "0_cell_membrane_protein_receptor", "1_signal_receiver_sender"],
        "Representation": [None, "['cell', 'membrane', 'protein', 'receptor', 'channel', 'ion']", None],
    })


def test_load_with_date_column(distributions_csv):
    df = load_topic_proportions(distributions_csv, id_column="corpusid", date_column="publicationdate")
    assert list(df.columns) == ["corpusid", "year", "topic_id=0", "topic_id=1"]
    assert list(df["year"]) == [2001, 2002, 2004]
    assert list(df["corpusid"]) == [11, 12, 14]


def test_load_with_topic_prefix(distributions_csv):
    df = load_topic_proportions(distributions_csv, date_column="publicationdate", topic_prefix="topic_id=")
    # no "id" column in the file: row numbers are used
    assert list(df.columns) == ["id", "year", "topic_id=0", "topic_id=1"]


def test_load_without_year(distributions_csv):
    with pytest.raises(ValueError, match="year column required"):
        load_topic_proportions(distributions_csv, id_column="corpusid")


def test_topic_labels(topic_info):
    labels = topic_labels(topic_info, n_words=5)
    assert labels[0] == "0: cell membrane protein receptor channel"
    assert labels[1] == "1: signal receiver sender"
    assert labels[-1] == "-1: the of and"


def test_label_topics(topic_info):
    props = pd.DataFrame({"id": [1], "year": [2000], "topic_id=0": [0.4], "topic_id=1": [0.6], "topic_id=5": [0.0]})
    labelled = label_topics(props, topic_info, n_words=3)
    assert list(labelled.columns) == ["id", "year", "0: cell membrane protein", "1: signal receiver sender", "topic_id=5"]


def test_load_topic_info(tmp_path, topic_info):
    path = tmp_path / "topic_info.csv"
    topic_info.to_csv(path, index=False)
    loaded = load_topic_info(path)
    assert topic_labels(loaded)[0] == "0: cell membrane protein receptor channel"

    topic_info.drop(columns=["Topic"]).to_csv(path, index=False)
    with pytest.raises(ValueError):
        load_topic_info(path)


def test_save_results(tmp_path):
    results = {
        "top5_positive": pd.DataFrame({"year": [2002.0], "t": [0.1]}),
        "top5_pos_cor": pd.DataFrame({"correlation": [0.9], "pvalue": [0.01], "topic_label": ["t"], "topic_index": [1]}),
    }
    written = save_results(results, tmp_path / "out", suffix="ma5_p0.05")
    assert [p.name for p in written] == ["top5_positive_ma5_p0.05.csv", "top5_pos_cor_ma5_p0.05.csv"]
    pd.testing.assert_frame_equal(pd.read_csv(written[1]), results["top5_pos_cor"])


@pytest.fixture
def exported_csv(tmp_path):
    # metadata columns next to the topic columns, as in the topic distribution export
    years = list(range(2000, 2008))
    df = pd.DataFrame({
        "corpusid": [100 + i for i in range(len(years))],
        "year": years,
        "score": [0.5 + 0.1 * i for i in range(len(years))],
        "topic_id=0": [0.4] * len(years),
        "topic_id=1": [0.6] * len(years),
    })
    path = tmp_path / "topic_distributions.csv"
    df.to_csv(path, index=False)
    return path


def test_numeric_metadata_is_not_a_topic(exported_csv):
    df = load_topic_proportions(exported_csv, verbose=False)
    assert list(df.columns) == ["id", "year", "topic_id=0", "topic_id=1"]

    results = compute_hot_cold_topics(df, config=TrendConfig(ma=1, verbose=False), show=False)
    assert results["top5_pos_cor"].empty
    assert results["top5_neg_cor"].empty
    assert list(results["top5_positive"].columns) == ["year"]


def test_all_numeric_columns_without_exported_topics(tmp_path):
    path = tmp_path / "props.csv"
    pd.DataFrame({"id": [1, 2], "year": [2000, 2001], "ecology": [0.3, 0.4], "genetics": [0.7, 0.6]}).to_csv(path, index=False)
    df = load_topic_proportions(path, verbose=False)
    assert list(df.columns) == ["id", "year", "ecology", "genetics"]


def test_quiet_helpers(distributions_csv, topic_info, tmp_path, capsys):
    df = load_topic_proportions(distributions_csv, date_column="publicationdate", verbose=False)
    label_topics(df, topic_info, verbose=False)
    save_results({"top5_positive": df}, tmp_path / "out", verbose=False)
    assert capsys.readouterr().out == ""
