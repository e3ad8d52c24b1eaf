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

"""
Moment-to-discrete operator.

Maps flux moments onto discrete directions. Only the isotropic moment is carried, so the
operator is the constant ``1 / angularNorm``: an isotropic scalar source ``q`` becomes
the angular source ``q / 2`` in 1D and ``q / (4 pi)`` in 2D and 3D.
"""
from snsweep.utils.customExceptions import OutOfRange


class MomentToDiscrete:
    """Isotropic moment-to-discrete operator for a quadrature."""

    legendreOrder = 0

    def __init__(self, quadrature):
        self.quadrature = quadrature
        self._value = 1.0 / quadrature.angularNorm

    def __call__(self, o, a, legendre=0, azimuthal=0):
        return self.value(o, a, legendre, azimuthal)

    def value(self, o, a, legendre=0, azimuthal=0):
        """Return the operator element for angle ``(o, a)`` and a flux moment."""
        if legendre > self.legendreOrder or abs(azimuthal) > legendre:
            raise OutOfRange(
                "Moment ({}, {}) is beyond Legendre order {}".format(
                    legendre, azimuthal, self.legendreOrder
                )
            )
        self.quadrature.index(o, a)
        return self._value
