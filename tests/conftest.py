import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def trend_props():
    """Two documents per year 2000-2010: topic_a rising, topic_b falling, topic_c flat."""
    rows = []
    for i, year in enumerate(range(2000, 2011)):
        a = 0.1 + 0.02 * i
        b = 0.3 - 0.02 * i
        for doc, offset in enumerate([-0.01, 0.01]):
            rows.append({
                "id": f"{year}-{doc}",
                "year": year,
                "topic_a": a + offset,
                "topic_b": b - offset,
                "topic_c": 0.05,
            })
    return pd.DataFrame(rows)


@pytest.fixture
def many_topics_props():
    """Twelve years and ten topics with slopes between -0.009 and +0.009."""
    years = np.arange(1990, 2002)
    slopes = {f"topic_{k}": s for k, s in enumerate(
        [0.009, -0.009, 0.007, -0.007, 0.005, -0.005, 0.003, -0.003, 0.001, -0.001, 0.002, -0.002], start=1)}
    rng = np.random.default_rng(42)
    data = {"id": [f"doc{i}" for i in range(len(years))], "year": years}
    for name, slope in slopes.items():
        data[name] = 0.2 + slope * (years - years[0]) + rng.normal(0, 0.0005, len(years))
    return pd.DataFrame(data)
