# Copyright 2019 TerraPower, LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Various math utilities."""
import operator

import numpy as np


def isMonotonic(inputIter, relation):
    """
    Checks if an iterable is monotonic with respect to a relation.

    Parameters
    ----------
    inputIter : iterable
        Values to check
    relation : str
        One of ``"<"``, ``"<="``, ``">"``, ``">="``

    Examples
    --------
    >>> isMonotonic([0.0, 1.0, 2.5], "<")
    True
    """
    relations = {
        "<": operator.lt,
        "<=": operator.le,
        ">": operator.gt,
        ">=": operator.ge,
    }
    compare = relations[relation]
    values = list(inputIter)
    return all(compare(a, b) for a, b in zip(values[:-1], values[1:]))


def maxAbsDiff(newValues, oldValues) -> float:
    """
    Return the infinity norm of the difference between two arrays.

    Used as the convergence measure of flux iterations. Empty inputs give 0.0.
    """
    diff = np.abs(np.asarray(newValues) - np.asarray(oldValues))
    return float(diff.max()) if diff.size else 0.0
