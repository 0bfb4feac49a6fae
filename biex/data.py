##############################################################################     ##    ######
#    A.J. Zwijnenburg                   2021-06-02           v1.0                 #  #      ##
#    Copyright (C) 2021 - AJ Zwijnenburg          GPLv3 license                  ######   ##
##############################################################################  ##    ## ######

## Copyright notice ##########################################################
# Biex Tools provides a python implementation of the biexponential transform.
# Copyright (C) 2021 - AJ Zwijnenburg
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
##############################################################################

"""
Applies transforms to tabular measurement data.

:func: transform_data
Transforms the columns of a DataFrame using a transform per column

"""
from __future__ import annotations
from typing import Dict

import pandas as pd
import warnings

from .transform import Transform

def transform_data(data: pd.DataFrame, transforms: Dict[str, Transform], to_scale: bool=True) -> pd.DataFrame:
    """
    Applies the transforms to the data columns. Makes a copy of the data.
        :param data: the measurement data
        :param transforms: the transform to apply indexed on column name
        :param to_scale: if True transforms linear data into display values, otherwise display values into linear data
        :returns: the transformed data, columns without a transform are unchanged
        :raises ValueError: if a transform refers to a column that isnt in data
    """
    for column in transforms:
        if column not in data.columns:
            raise ValueError(f"data doesnt contain a column for transform '{column}'")

    data = data.copy(deep=True)

    for column, transform in transforms.items():
        if to_scale:
            function = transform.translate_from_linear
        else:
            function = transform.translate_to_linear

        missing = int(data[column].isna().sum())
        if missing:
            warnings.warn(f"column '{column}' contains {missing} missing value(s). These are left untransformed")

        data[column] = data[column].map(function, na_action="ignore").astype(float)

    return data
