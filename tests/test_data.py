"""Tests for biex.data - transforming measurement tables."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from biex.data import transform_data
from biex.transform import Transform


@pytest.fixture(scope="module")
def transform():
    return Transform(resolution=1, linear_max=1000)


@pytest.fixture
def data():
    return pd.DataFrame({
        "CD3": [-1e6, 0.0, 500.0, 1000.0],
        "FSC-A": [1, 2, 3, 4],
    })


class TestTransformData:
    def test_to_scale(self, data, transform):
        result = transform_data(data, {"CD3": transform})
        expected = [transform.translate_from_linear(value) for value in data["CD3"]]
        assert list(result["CD3"]) == expected
        assert result["CD3"].iloc[0] == 0
        assert result["CD3"].iloc[-1] == 4.5

    def test_untransformed_columns_kept(self, data, transform):
        result = transform_data(data, {"CD3": transform})
        pd.testing.assert_series_equal(result["FSC-A"], data["FSC-A"])

    def test_input_not_modified(self, data, transform):
        original = data.copy(deep=True)
        transform_data(data, {"CD3": transform})
        pd.testing.assert_frame_equal(data, original)

    def test_to_linear(self, transform):
        data = pd.DataFrame({"CD3": [0.0, 2.25, 4.5]})
        result = transform_data(data, {"CD3": transform}, to_scale=False)
        assert result["CD3"].iloc[0] == transform.lookup[0]
        assert result["CD3"].iloc[1] == pytest.approx(transform.lookup[512])
        assert result["CD3"].iloc[2] == transform.lookup[1024]

    def test_integer_column(self, data, transform):
        result = transform_data(data, {"FSC-A": transform})
        assert result["FSC-A"].dtype == float
        assert result["FSC-A"].iloc[0] == pytest.approx(transform.translate_from_linear(1))

    def test_missing_column(self, data, transform):
        with pytest.raises(ValueError, match="doesnt contain a column"):
            transform_data(data, {"CD4": transform})

    def test_missing_values_left_untouched(self, transform):
        data = pd.DataFrame({"CD3": [np.nan, 1000.0]})
        with pytest.warns(UserWarning, match="1 missing value"):
            result = transform_data(data, {"CD3": transform})
        assert np.isnan(result["CD3"].iloc[0])
        assert result["CD3"].iloc[1] == 4.5
