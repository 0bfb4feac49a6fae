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
Root solver for the biexponential transform.

:func: solve
Solves f(d;w,b) = 2 * (ln(d) - ln(b)) + w * (d + b) = 0 for d, given b and w

"""
from __future__ import annotations

import logging

import numpy as np

from .errors import ConvergenceError

logger = logging.getLogger(__name__)

EPSILON: float = 1.0e-12
MAX_ITERATIONS: int = 20

def solve(b: float, w: float) -> float:
    """
    Solves f(d;w,b) = 2 * (ln(d) - ln(b)) + w * (d + b) = 0 for d, given b and w.
    Based on RTSAFE from Numerical Recipes 1st Edition: Newton's method guarded by bisection.
        :param b: the (natural log) range of the scale, > 0
        :param w: the normalized width of the linear region, >= 0
        :returns: the root d
        :raises ConvergenceError: if no root is found within MAX_ITERATIONS
    """
    # w == 0 means it's really arcsinh
    if w == 0:
        return b

    # bracket the root
    d_lo: float = 0.0
    d_hi: float = b

    # bisection first step
    d: float = (d_lo + d_hi) / 2
    last_delta: float = d_hi - d_lo
    delta: float = None

    # evaluate f(d;w,b) and its derivative
    f_b: float = -2 * np.log(b) + w * b
    f: float = 2 * np.log(d) + w * d + f_b
    last_f: float = np.nan

    for i in range(1, MAX_ITERATIONS):
        d_f: float = 2 / d + w

        # if Newton's method would step outside the bracket
        # or if it isn't converging quickly enough
        if ((d - d_hi) * d_f - f) * ((d - d_lo) * d_f - f) >= 0 or abs(1.9 * f) > abs(last_delta * d_f):
            # take a bisection step
            delta = (d_hi - d_lo) / 2
            d = d_lo + delta
            if d == d_lo:
                logger.debug(f"solve(b={b}, w={w}) stalled at bisection after {i} iterations")
                return d
        else:
            # otherwise take a Newton step
            delta = f / d_f
            t = d
            d -= delta
            if d == t:
                logger.debug(f"solve(b={b}, w={w}) stalled at newton step after {i} iterations")
                return d

        if abs(delta) < EPSILON:
            logger.debug(f"solve(b={b}, w={w}) converged after {i} iterations")
            return d
        last_delta = delta

        # recompute the function
        f = 2 * np.log(d) + w * d + f_b
        if f == 0 or f == last_f:
            # found the root or not going to get any closer
            logger.debug(f"solve(b={b}, w={w}) converged after {i} iterations")
            return d
        last_f = f

        # update the bracketing interval
        if f < 0:
            d_lo = d
        else:
            d_hi = d

    raise ConvergenceError(b, w, MAX_ITERATIONS)
