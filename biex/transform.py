##############################################################################     ##    ######
#    A.J. Zwijnenburg                   2021-06-02           v1.2                 #  #      ##
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
Classes for the biexponential (Logicle) data/scale transformation.
For conversions of data from the untransformed (linear) scale to the transformed (display) scale and back.

:class: ScaleType
Enumeration of the scale families a transform can report

:class: BiexConfig
The construction switches of a biexponential transform
.from_r_value() - converts the legacy signed r-value into a config

:class: Transform
The biexponential transform. Immutable after construction.
.inverse()  - the biexponential function, display scale (0-1) to linear value
.series_biexponential() - the Taylor series approximation of the biexponential near zero
.translate_to_linear()  - display scale (0-4.5) to linear value using the lookup table
.translate_from_linear() - linear value to display scale (0-4.5) using the lookup table
.scaler()   - translate_from_linear of a list of values
.unscaler() - translate_to_linear of a list of values
.solve()    - the root solver used during construction

"""
from __future__ import annotations
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
import bisect
import copy
import enum
import logging
import warnings

from .errors import ConstructionPreconditionError, RangeError
from .solver import solve as _solve

logger = logging.getLogger(__name__)

class ScaleType(enum.Enum):
    """
    The scale families
    """
    LINEAR = 0
    LOG = 1
    BIEXPONENTIAL = 2
    BAND = 3
    UNKNOWN = 4

class BiexConfig(NamedTuple):
    """
    The construction switches of a biexponential transform
        :param resolution: the resolution (r-value) parameter, > 0
        :param report_range: whether the transform reports its bounded linear range
    """
    resolution: float = 0.001
    report_range: bool = False

    @classmethod
    def from_r_value(cls, r_value: float) -> BiexConfig:
        """
        Converts the legacy signed r-value into a config. A negative r-value is used (as absolute value)
        as resolution and turns on range reporting. A non-negative r-value is ignored and the default
        resolution is used instead.
            :param r_value: the signed r-value
        """
        warnings.warn(
            "signed r-values are deprecated, construct a BiexConfig(resolution, report_range) instead",
            DeprecationWarning,
            stacklevel=2
        )
        if r_value < 0:
            return cls(resolution=abs(r_value), report_range=True)
        return cls()

class Transform():
    """
    Represents a biexponential scale from the linear domain onto a display scale of 0 to M (4.5).
    Construction derives the biexponential coefficients and generates a look-up table,
    afterwards the transform is not modified.
    Source paper: David R. Parks, Mario Roederer, Wayne A. Moore. A new "Logicle" display method avoids
    deceptive effects of logarithmic scaling for low signals and compensated data.
    Cytometry Part A, Volume 69A, Issue 6, pages 541-551, June 2006.
        :param resolution: the resolution (r-value), determines the width of the linear region
        :param linear_max: the top of the scale in linear space
        :param report_range: whether to report the bounded linear range (range_min/range_max)
        :raises ConstructionPreconditionError: if resolution or linear_max is non-finite or <= 0,
            or if linear_max / resolution <= 10**-M
    """
    M: float = 4.5
    BINS: int = 1024
    TAYLOR_LENGTH: int = 16

    def __init__(self, resolution: float=0.001, linear_max: float=262144, report_range: bool=False):
        if not np.isfinite(linear_max) or linear_max <= 0:
            raise ConstructionPreconditionError(f"linear_max has to be a finite value > 0, not '{linear_max}'")
        if not np.isfinite(resolution) or resolution <= 0:
            raise ConstructionPreconditionError(f"resolution has to be a finite value > 0, not '{resolution}'")

        self._r_value: float = resolution
        self._t: float = linear_max
        self._report_range: bool = bool(report_range)

        # Width of the linear region in decades, can never be negative
        self._W: float = (self.M - np.log10(self._t / self._r_value)) / 2
        if self._W >= self.M:
            # zero would sit at or beyond the top of the scale, the biexponential stops being increasing
            raise ConstructionPreconditionError(f"linear_max / resolution has to be > 10**-{self.M}, not '{self._t / self._r_value}'")
        if self._W < 0:
            self._W = 0.0

        # Actual parameters, formulas from biexponential paper
        self._w: float = self._W / self.M
        x2: float = 0.0
        self._x1: float = x2 + self._w
        x0: float = x2 + (2 * self._w)
        self._b: float = self.M * np.log(10.0)
        self._d: float = _solve(self._b, self._w)
        c_a: float = np.exp(x0 * (self._b + self._d))
        mf_a: float = np.exp(self._b * self._x1) - (c_a / np.exp(self._d * self._x1))
        self._a: float = self._t / (np.exp(self._b) - mf_a - (c_a / np.exp(self._d)))
        self._c: float = c_a * self._a
        self._f: float = -mf_a * self._a

        # Use Taylor series near x1, i.e., the data near to zero
        # to avoid round-off problems of formal definition
        self._x_taylor: float = self._x1 + (self._w / 4)

        # Compute coefficients of the Taylor series
        pos_coef: float = self._a * np.exp(self._b * self._x1)
        neg_coef: float = -self._c / np.exp(self._d * self._x1)

        # 16 is enough for full precision of typical scales
        taylor: List[float] = [None]*self.TAYLOR_LENGTH
        for i in range(0, self.TAYLOR_LENGTH):
            pos_coef *= (self._b / (i + 1))
            neg_coef *= (-self._d / (i + 1))
            taylor[i] = pos_coef + neg_coef
        # Exact result of logicle condition
        taylor[1] = 0.0
        self._taylor: Tuple[float, ...] = tuple(taylor)

        self._lookup: Tuple[float, ...] = self._build_lookup()
        self._resolution: float = self.M / self.BINS

        self._range_min: Optional[float] = None
        self._range_max: Optional[float] = None
        if self._report_range:
            self._range_max = self._t
            self._range_min = self._lookup[0]

        logger.debug("constructed %r: W=%s, d=%s", self, self._W, self._d)

    @classmethod
    def from_config(cls, config: BiexConfig, linear_max: float) -> Transform:
        """
        Constructs a transform from a BiexConfig
            :param config: the construction switches
            :param linear_max: the top of the scale in linear space
        """
        return cls(resolution=config.resolution, linear_max=linear_max, report_range=config.report_range)

    @classmethod
    def from_r_value(cls, r_value: float, linear_max: float) -> Transform:
        """
        Constructs a transform from the legacy signed r-value. See BiexConfig.from_r_value()
            :param r_value: the signed r-value
            :param linear_max: the top of the scale in linear space
        """
        return cls.from_config(BiexConfig.from_r_value(r_value), linear_max)

    def _build_lookup(self) -> Tuple[float, ...]:
        """
        Builds the lookup table by sampling the inverse on BINS+1 equidistant display values in [0, 1]
        """
        lookup: List[float] = [0.0]*(self.BINS + 1)
        for i in range(0, self.BINS + 1):
            lookup[i] = float(self.inverse(i / self.BINS))
        return tuple(lookup)

    @property
    def r_value(self) -> float:
        """
        The effective resolution (r-value) parameter
        """
        return self._r_value

    @property
    def resolution_param(self) -> float:
        return self._r_value

    @property
    def report_range(self) -> bool:
        return self._report_range

    @property
    def linear_max(self) -> float:
        return self._t

    @property
    def decade_width(self) -> float:
        """
        The width of the linear region in decades (W)
        """
        return self._W

    @property
    def w(self) -> float:
        return self._w

    @property
    def x1(self) -> float:
        """
        The display (0-1) location of linear zero
        """
        return self._x1

    @property
    def x_taylor(self) -> float:
        """
        Below this display (0-1) value the Taylor series is used instead of the biexponential
        """
        return self._x_taylor

    @property
    def coefficients(self) -> Tuple[float, float, float, float, float]:
        """
        The biexponential coefficients (a, b, c, d, f)
        """
        return (self._a, self._b, self._c, self._d, self._f)

    @property
    def taylor(self) -> Tuple[float, ...]:
        return self._taylor

    @property
    def lookup(self) -> Tuple[float, ...]:
        return self._lookup

    @property
    def bins(self) -> int:
        return self.BINS

    @property
    def resolution(self) -> float:
        """
        The display scale width of a single lookup table bin
        """
        return self._resolution

    @property
    def range_min(self) -> Optional[float]:
        return self._range_min

    @property
    def range_max(self) -> Optional[float]:
        return self._range_max

    @property
    def scale_type(self) -> ScaleType:
        return ScaleType.BIEXPONENTIAL

    @staticmethod
    def solve(b: float, w: float) -> float:
        """
        Solves f(d;w,b) = 2 * (ln(d) - ln(b)) + w * (d + b) = 0 for d, given b and w
            :param b: the (natural log) range of the scale
            :param w: the normalized width of the linear region
        """
        return _solve(b, w)

    def series_biexponential(self, scale: float) -> float:
        """
        Computes the value of the Taylor series at a point on the display scale (0-1)
            :param scale: the display value
        """
        # Taylor series is around x1
        x: float = scale - self._x1
        # Note that taylor[1] should be identical to zero according to logicle condition
        t_sum: float = self._taylor[-1] * x
        for i in range(self.TAYLOR_LENGTH-2, 1, -1):
            t_sum = (t_sum + self._taylor[i]) * x
        return (t_sum * x + self._taylor[0]) * x

    def inverse(self, scale: float) -> float:
        """
        Reverts the scaled data back into unscaled form.
        Expects a data range of 0-1
            :param scale: the display value
        """
        # reflect negative scale regions
        negative: bool = scale < self._x1
        if negative:
            scale = 2 * self._x1 - scale

        inverse: float = None
        if scale < self._x_taylor:
            # near x1, i.e., data zero use the series expansion
            inverse = self.series_biexponential(scale)
        else:
            # this formulation has better roundoff behavior
            inverse = (self._a * np.exp(self._b * scale) + self._f) - (self._c / np.exp(self._d * scale))

        # handle scale for negative values
        if negative:
            return -inverse
        else:
            return inverse

    def translate_to_linear(self, scale: float) -> float:
        """
        Converts a display value (0-4.5) into a linear value by interpolating the lookup table.
        Values outside the display range are clamped.
            :param scale: the display value
            :raises RangeError: if the value cannot be placed in the lookup table
        """
        scale = 0.0 if scale < 0 else self.M if scale > self.M else scale

        # find the bin
        x: float = scale / self._resolution
        if not 0 <= x <= self.BINS:
            raise RangeError(scale, x)
        index = int(np.floor(x))

        if index == self.BINS:
            return self._lookup[self.BINS]

        # interpolate the table linearly
        delta: float = x - index
        return (1 - delta) * self._lookup[index] + delta * self._lookup[index + 1]

    def translate_from_linear(self, linear: float) -> float:
        """
        Converts a linear value into a display value (0-4.5) by interpolating the lookup table.
        Values outside the lookup range are clamped to the display range.
            :param linear: the linear value
            :raises RangeError: if the value is NaN
        """
        if np.isnan(linear):
            raise RangeError(linear, np.nan)

        if linear <= self._lookup[0]:
            return 0.0
        elif linear > self._lookup[self.BINS - 1]:
            return self.M

        # lookup[index] <= linear < lookup[index + 1]
        index = bisect.bisect_right(self._lookup, linear) - 1
        lower = self._lookup[index]
        upper = self._lookup[index + 1]

        return (index + (linear - lower) / (upper - lower)) * self._resolution

    def scaler(self, data: List[float]) -> List[float]:
        """
        Converts a list of linear values into display values. None and NaN entries are kept.
            :param data: the data to scale
        """
        data = copy.deepcopy(data)

        for i in range(0, len(data)):
            if data[i] is None or np.isnan(data[i]):
                continue
            data[i] = self.translate_from_linear(data[i])

        return data

    def unscaler(self, data: List[float]) -> List[float]:
        """
        Converts a list of display values into linear values. None and NaN entries are kept.
            :param data: the data to unscale
        """
        data = copy.deepcopy(data)

        for i in range(0, len(data)):
            if data[i] is None or np.isnan(data[i]):
                continue
            data[i] = self.translate_to_linear(data[i])

        return data

    def __eq__(self, other) -> bool:
        if not isinstance(other, Transform):
            return False

        if self._r_value != other._r_value:
            return False
        if self._t != other._t:
            return False
        if self._report_range != other._report_range:
            return False

        return True

    def __hash__(self) -> int:
        return hash((self._r_value, self._t, self._report_range))

    def __repr__(self) -> str:
        return f"(BiexTransform:[{self._t};{self._r_value};{'range' if self._report_range else 'norange'}]->[0-{self.M}])"
