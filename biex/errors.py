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
Exceptions raised by the biexponential transform.
All inherit from ValueError, so callers catching ValueError keep working.

:class: ConvergenceError
The root solver did not converge within its iteration limit

:class: RangeError
A scale value could not be mapped onto the lookup table

:class: ConstructionPreconditionError
A transform was requested with invalid construction parameters

"""
from __future__ import annotations


class ConvergenceError(ValueError):
    """
    Raised when the root solver exceeds its iteration limit.
    The solver is deterministic, so repeating the call with the same input will fail again.
        :param b: the b parameter given to the solver
        :param w: the w parameter given to the solver
        :param iterations: the iteration limit that was exceeded
    """
    def __init__(self, b: float, w: float, iterations: int):
        self.b: float = b
        self.w: float = w
        self.iterations: int = iterations
        super().__init__(f"exceeded maximum iterations ({iterations}) in solve() for b={b}, w={w}")


class RangeError(ValueError):
    """
    Raised when a scale value does not map to an index inside the lookup table.
        :param value: the offending scale value
        :param index: the computed lookup table index
    """
    def __init__(self, value: float, index: float):
        self.value: float = value
        self.index: float = index
        super().__init__(f"illegal argument to biexponential scale: {value}")


class ConstructionPreconditionError(ValueError):
    """
    Raised when a transform is constructed with a non-finite or non-positive parameter
    """
