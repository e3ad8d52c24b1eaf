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
The boundary flux store.

Every side of the mesh holds the angular flux crossing it for every octant, angle and
group. The value for one ``(side, octant, angle, group)`` is a face distribution whose
rank follows the dimension:

======  ===========  ==============================================
dim     value        face axes
======  ===========  ==============================================
1       scalar       none
2       1D array     y for x-faces (LEFT, RIGHT), x for y-faces
3       2D array     (y, z) for x-faces, (x, z) for y-faces, (x, y)
                     for z-faces (SOUTH, NORTH)
======  ===========  ==============================================

During a sweep the sweeper reads the incident values and writes the outgoing ones. The
per-side boundary conditions then move flux around between sweeps:

* ``set(g)`` loads anything fixed for a group solve, like a prescribed incident flux,
* ``update(g)`` moves outgoing flux into incident flux (reflection),
* ``update(g, o, a)`` does the same for one just-swept ordinate, so later ordinates in
  the same sweep see it.

The single-angle update changes the sweep operator between applications, so it must not
run while a Krylov solver is applying that operator. Inside :py:meth:`Boundary.frozen`
it raises :py:class:`~snsweep.utils.customExceptions.BoundaryFrozenError`.
"""
import contextlib

import numpy as np

from snsweep import runLog
from snsweep.geometry.mesh import SIDE_LABELS
from snsweep.settings import sweepSettings
from snsweep.transport import boundaryConditions
from snsweep.utils.customExceptions import BoundaryFrozenError, OutOfRange

INCIDENT, OUTGOING = 0, 1


class Boundary:
    """
    Boundary flux container and update protocol.

    Parameters
    ----------
    cs : Settings
        Supplies the number of groups and the boundary condition of each side.
    mesh : Mesh
        Sets the face sizes.
    quadrature : Quadrature
        Sets the octants and angles, and their in/out topology on every side.
    """

    def __init__(self, cs, mesh, quadrature):
        self.mesh = mesh
        self.quadrature = quadrature
        self.dimension = mesh.dimension
        self.numberGroups = cs[sweepSettings.CONF_NUMBER_GROUPS]
        self.numberSides = 2 * self.dimension
        self._frozen = False

        nx, ny, nz = (mesh.numberCellsX, mesh.numberCellsY, mesh.numberCellsZ)
        faceShapes = {
            1: [(), ()],
            2: [(ny,), (ny,), (nx,), (nx,)],
            3: [(ny, nz), (ny, nz), (nx, nz), (nx, nz), (nx, ny), (nx, ny)],
        }[self.dimension]

        q = quadrature
        self._flux = [
            np.zeros((self.numberGroups, q.numberOctants, q.numberAnglesOctant) + shape)
            for shape in faceShapes
        ]
        self._facePoints = [int(np.prod(shape)) for shape in faceShapes]

        self._conditions = [
            boundaryConditions.buildCondition(cs, self, side)
            for side in range(self.numberSides)
        ]
        self._isReflective = [
            isinstance(bc, boundaryConditions.Reflective) for bc in self._conditions
        ]
        runLog.debug(
            "Boundary conditions: {}".format(
                ", ".join(
                    f"{SIDE_LABELS[s]}={bc}" for s, bc in enumerate(self._conditions)
                )
            )
        )

    def __repr__(self):
        return "<{} {}D groups:{}>".format(
            self.__class__.__name__, self.dimension, self.numberGroups
        )

    # ----------------------------------------------------------------------
    # access

    def _checkSide(self, side):
        if not 0 <= side < self.numberSides:
            raise OutOfRange(
                f"Side {side} is out of range for a {self.dimension}D boundary"
            )

    def _checkIndices(self, side, o, a, g):
        self._checkSide(side)
        q = self.quadrature
        if not 0 <= o < q.numberOctants:
            raise OutOfRange(f"Octant {o} is out of range")
        if not 0 <= a < q.numberAnglesOctant:
            raise OutOfRange(f"Angle {a} is out of range")
        self._checkGroup(g)

    def _checkGroup(self, g):
        if not 0 <= g < self.numberGroups:
            raise OutOfRange(
                f"Group {g} is out of range; there are {self.numberGroups}"
            )

    def __getitem__(self, key):
        side, o, a, g = key
        self._checkIndices(side, o, a, g)
        return self._flux[side][g, o, a]

    def __setitem__(self, key, value):
        side, o, a, g = key
        self._checkIndices(side, o, a, g)
        self._flux[side][g, o, a] = value

    def value(self, side, o, a, g):
        """Boundary flux on ``side`` for octant ``o``, angle ``a`` and group ``g``."""
        return self[side, o, a, g]

    def sideFlux(self, side):
        """All flux on a side, shaped ``(groups, octants, angles, *face)``."""
        self._checkSide(side)
        return self._flux[side]

    def incidentOctants(self, side):
        """Octants entering the mesh through ``side``, adjoint aware."""
        if self.quadrature.adjoint:
            return self.quadrature.outgoingOctants(side)
        return self.quadrature.incidentOctants(side)

    def outgoingOctants(self, side):
        """Octants leaving the mesh through ``side``, adjoint aware."""
        if self.quadrature.adjoint:
            return self.quadrature.incidentOctants(side)
        return self.quadrature.outgoingOctants(side)

    def orderedAngle(self, side, angle, inout):
        """
        Map an ordered angle on a side to its cardinal ordinate index.

        Ordered angles run over the side's incident (or outgoing) octants in table order
        and, within each octant, over the quadrature's angle order.
        """
        octants = (
            self.incidentOctants(side) if inout == INCIDENT else self.outgoingOctants(side)
        )
        nao = self.quadrature.numberAnglesOctant
        if not 0 <= angle < len(octants) * nao:
            raise OutOfRange(f"Ordered angle {angle} is out of range on side {side}")
        return self.quadrature.index(octants[angle // nao], angle % nao)

    def _ordered(self, side, angle, inout):
        n = self.orderedAngle(side, angle, inout)
        nao = self.quadrature.numberAnglesOctant
        return n // nao, n % nao

    def incident(self, side, angle, g):
        """Incident flux of the ``angle``-th ordered incident direction on ``side``."""
        o, a = self._ordered(side, angle, INCIDENT)
        return self[side, o, a, g]

    def outgoing(self, side, angle, g):
        """Outgoing flux of the ``angle``-th ordered outgoing direction on ``side``."""
        o, a = self._ordered(side, angle, OUTGOING)
        return self[side, o, a, g]

    def setIncident(self, side, angle, g, value):
        o, a = self._ordered(side, angle, INCIDENT)
        self[side, o, a, g] = value

    def setOutgoing(self, side, angle, g, value):
        o, a = self._ordered(side, angle, OUTGOING)
        self[side, o, a, g] = value

    def boundaryFluxSize(self, side):
        """Number of incident (or outgoing) values on a side for one group."""
        self._checkSide(side)
        q = self.quadrature
        return (q.numberOctants // 2) * q.numberAnglesOctant * self._facePoints[side]

    # ----------------------------------------------------------------------
    # conditions

    def condition(self, side):
        self._checkSide(side)
        return self._conditions[side]

    @property
    def hasReflective(self):
        return any(self._isReflective)

    def isReflective(self, side):
        self._checkSide(side)
        return self._isReflective[side]

    def set(self, g):
        """Apply each side's one-time setup for a group solve."""
        self._checkGroup(g)
        for bc in self._conditions:
            bc.set(g)

    def update(self, g, o=None, a=None):
        """
        Move outgoing flux into incident flux for group ``g``.

        With ``o`` and ``a`` given, only the ordinate that was just swept is moved.

        Raises
        ------
        BoundaryFrozenError
            For a single-angle update inside :py:meth:`frozen`.
        """
        self._checkGroup(g)
        if o is None:
            for bc in self._conditions:
                bc.update(g)
            return

        if self._frozen:
            raise BoundaryFrozenError(
                "Single-angle boundary updates are not allowed while the boundary is "
                "frozen for a linear operator application"
            )
        for bc in self._conditions:
            bc.updateAngle(g, o, a)

    def clear(self, g):
        """Zero all boundary flux of group ``g``."""
        self._checkGroup(g)
        for flux in self._flux:
            flux[g] = 0.0

    @property
    def isFrozen(self):
        return self._frozen

    @contextlib.contextmanager
    def frozen(self):
        """Forbid single-angle updates while a linear operator is being applied."""
        previous = self._frozen
        self._frozen = True
        try:
            yield self
        finally:
            self._frozen = previous

    # ----------------------------------------------------------------------
    # Krylov boundary unknowns

    @property
    def reflectiveIncidentSize(self):
        """Length of the vector of reflective incident values for one group."""
        return sum(
            self.boundaryFluxSize(side)
            for side in range(self.numberSides)
            if self._isReflective[side]
        )

    def getIncidentVector(self, g):
        """Flatten the incident flux of every reflective side for group ``g``."""
        self._checkGroup(g)
        pieces = [
            self._flux[side][g, list(self.incidentOctants(side))].ravel()
            for side in range(self.numberSides)
            if self._isReflective[side]
        ]
        return np.concatenate(pieces) if pieces else np.zeros(0)

    def setIncidentVector(self, g, vector):
        """Scatter a vector from :py:meth:`getIncidentVector` back into the store."""
        self._checkGroup(g)
        vector = np.asarray(vector, dtype=float)
        if vector.size != self.reflectiveIncidentSize:
            raise OutOfRange(
                "Incident vector has {} values but {} are needed".format(
                    vector.size, self.reflectiveIncidentSize
                )
            )
        start = 0
        for side in range(self.numberSides):
            if not self._isReflective[side]:
                continue
            octants = list(self.incidentOctants(side))
            flux = self._flux[side]
            shape = flux[g, octants].shape
            size = self.boundaryFluxSize(side)
            flux[g, octants] = vector[start : start + size].reshape(shape)
            start += size
