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
Boundary conditions.

Each side of the boundary store gets one condition. A condition knows how to prepare the
side for a group solve (:py:meth:`BoundaryCondition.set`), how to turn the outgoing flux
of a finished sweep into incident flux (:py:meth:`BoundaryCondition.update`), and how
to do the same for a single ordinate during a sweep
(:py:meth:`BoundaryCondition.updateAngle`).
"""
import numpy as np

from snsweep.settings import sweepSettings
from snsweep.utils.customExceptions import InvalidConfiguration

# (incident, outgoing) octant pairs per dimension and side. The octants of a pair differ
# only in the sign along the side's normal.
REFLECTIVE_PAIRS = {
    1: (((0, 1),), ((1, 0),)),
    2: (
        ((0, 1), (3, 2)),
        ((2, 3), (1, 0)),
        ((1, 2), (0, 3)),
        ((3, 0), (2, 1)),
    ),
    3: (
        ((7, 6), (4, 5), (3, 2), (0, 1)),
        ((5, 4), (6, 7), (1, 0), (2, 3)),
        ((5, 6), (1, 2), (4, 7), (0, 3)),
        ((6, 5), (7, 4), (2, 1), (3, 0)),
        ((2, 6), (3, 7), (1, 5), (0, 4)),
        ((7, 3), (6, 2), (4, 0), (5, 1)),
    ),
}


class BoundaryCondition:
    """Base class of the per-side boundary conditions."""

    def __init__(self, boundary, side):
        self.boundary = boundary
        self.side = side

    def __repr__(self):
        return self.__class__.__name__

    def set(self, g):
        """Prepare the side for a solve of group ``g``."""

    def update(self, g):
        """Update the incident flux of group ``g`` after a sweep."""

    def updateAngle(self, g, o, a):
        """Update the incident flux of group ``g`` after sweeping ordinate ``(o, a)``."""


class Vacuum(BoundaryCondition):
    """Nothing enters through the side."""


class Reflective(BoundaryCondition):
    """
    Specular reflection.

    Outgoing flux along one octant becomes incident flux along the octant mirrored
    across the side, at the same face position and in the same group. In adjoint mode
    all octant signs are negated, so the roles within each pair swap. The mode is read at
    every update, so the quadrature may be switched after the boundary is built.
    """

    def __init__(self, boundary, side):
        BoundaryCondition.__init__(self, boundary, side)
        forward = REFLECTIVE_PAIRS[boundary.dimension][side]
        adjoint = tuple((out, inc) for inc, out in forward)
        self._pairs = {False: forward, True: adjoint}
        self._incidentOf = {
            mode: {out: inc for inc, out in pairs}
            for mode, pairs in self._pairs.items()
        }

    @property
    def pairs(self):
        """(incident, outgoing) octant pairs for the current adjoint mode."""
        return self._pairs[bool(self.boundary.quadrature.adjoint)]

    def update(self, g):
        flux = self.boundary.sideFlux(self.side)
        for inc, out in self.pairs:
            flux[g, inc] = flux[g, out]

    def updateAngle(self, g, o, a):
        inc = self._incidentOf[bool(self.boundary.quadrature.adjoint)].get(o)
        if inc is None:
            return
        flux = self.boundary.sideFlux(self.side)
        flux[g, inc, a] = flux[g, o, a]


class Fixed(BoundaryCondition):
    """
    Prescribed isotropic incident flux.

    Parameters
    ----------
    incidentFlux : array-like
        Incident angular flux per group, applied uniformly over the face and over all
        incident directions.
    """

    def __init__(self, boundary, side, incidentFlux):
        BoundaryCondition.__init__(self, boundary, side)
        incidentFlux = np.asarray(incidentFlux, dtype=float)
        if incidentFlux.shape != (boundary.numberGroups,):
            raise InvalidConfiguration(
                "Fixed boundary on side {} needs {} group values, got {}".format(
                    side, boundary.numberGroups, incidentFlux.shape
                )
            )
        self.incidentFlux = incidentFlux

    def set(self, g):
        flux = self.boundary.sideFlux(self.side)
        for o in self.boundary.incidentOctants(self.side):
            flux[g, o] = self.incidentFlux[g]


def buildCondition(cs, boundary, side):
    """Build the condition the settings ask for on ``side``."""
    kind = cs[sweepSettings.BC_SETTINGS[side]]
    if kind == sweepSettings.BC_VACUUM:
        return Vacuum(boundary, side)
    if kind == sweepSettings.BC_REFLECT:
        return Reflective(boundary, side)
    if kind == sweepSettings.BC_FIXED:
        sideName = sweepSettings.SIDE_NAMES[side]
        fixedFlux = cs[sweepSettings.CONF_BC_FIXED_FLUX]
        if sideName not in fixedFlux:
            raise InvalidConfiguration(
                "Side `{}` is fixed but `{}` has no entry for it".format(
                    sideName, sweepSettings.CONF_BC_FIXED_FLUX
                )
            )
        return Fixed(boundary, side, fixedFlux[sideName])
    raise InvalidConfiguration(f"Unknown boundary condition `{kind}`")
