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
Memoization of constructed transforms. Building a transform samples the full lookup table,
so transforms with identical parameters should be shared.
Create a TransformCache once and pass it to the consumers that need transforms.

:class: TransformCache
Thread-safe get-or-construct cache of Transform objects
.get_or_construct() - returns the shared transform for the parameters
.get_or_construct_config() - returns the shared transform for a BiexConfig
.clear()    - removes all cached transforms

"""
from __future__ import annotations
from collections import OrderedDict
from typing import Optional, Tuple

import logging
import threading

from .transform import BiexConfig, Transform

logger = logging.getLogger(__name__)

_Key = Tuple[float, float, bool]

class TransformCache():
    """
    Get-or-construct cache of Transforms keyed on (resolution, linear_max, report_range).
    Repeated requests with identical parameters return the identical Transform instance.
        :param max_size: maximum amount of cached transforms. None (default) means unbounded.
            When bounded, the least recently used transform is evicted.
    """
    def __init__(self, max_size: Optional[int]=None):
        if max_size is not None and max_size < 1:
            raise ValueError(f"max_size has to be >= 1 or None, not '{max_size}'")

        self._max_size: Optional[int] = max_size
        self._lock = threading.Lock()
        self._data: OrderedDict[_Key, Transform] = OrderedDict()

    @property
    def max_size(self) -> Optional[int]:
        return self._max_size

    def get_or_construct(self, resolution: float, linear_max: float, report_range: bool=False) -> Transform:
        """
        Returns the shared transform for the parameters, constructs it on first request.
        Construction errors are propagated and nothing is cached.
            :param resolution: the resolution (r-value) parameter
            :param linear_max: the top of the scale in linear space
            :param report_range: whether the transform reports its bounded linear range
        """
        key: _Key = (resolution, linear_max, bool(report_range))

        # Construction is done while holding the lock, so a key is never built twice
        with self._lock:
            transform = self._data.get(key)
            if transform is not None:
                logger.debug(f"cache hit for {key}")
                self._data.move_to_end(key)
                return transform

            logger.debug(f"cache miss for {key}")
            transform = Transform(resolution=resolution, linear_max=linear_max, report_range=report_range)
            self._data[key] = transform

            if self._max_size is not None and len(self._data) > self._max_size:
                evicted, _ = self._data.popitem(last=False)
                logger.debug(f"evicted {evicted}")

            return transform

    def get_or_construct_config(self, config: BiexConfig, linear_max: float) -> Transform:
        """
        Returns the shared transform for a BiexConfig, see get_or_construct()
            :param config: the construction switches
            :param linear_max: the top of the scale in linear space
        """
        return self.get_or_construct(config.resolution, linear_max, config.report_range)

    def clear(self) -> None:
        """
        Removes all cached transforms
        """
        with self._lock:
            self._data.clear()

    def __contains__(self, key: _Key) -> bool:
        resolution, linear_max, report_range = key
        with self._lock:
            return (resolution, linear_max, bool(report_range)) in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __repr__(self) -> str:
        return f"(TransformCache:[{len(self)}/{self._max_size}])"
