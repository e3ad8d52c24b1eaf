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
Transport sweepers.

A sweep inverts the streaming-collision operator for one group with the source held
fixed. Every ordinate is swept on its own: cells are visited in the order its direction
signs dictate (ascending along an axis when the sign is positive, descending when it is
negative), so the inflow to a cell is always known when the cell is solved. Inflow at
the mesh edge comes from the boundary store, and the flux leaving the mesh is written
back to it.
"""
import numpy as np

from snsweep import runLog
from snsweep.geometry.mesh import BOTTOM, LEFT, NORTH, RIGHT, SOUTH, TOP
from snsweep.settings import sweepSettings
from snsweep.transport.equations import buildEquation
from snsweep.utils.customExceptions import InvalidConfiguration


def _marching(sign, n, lowSide, highSide):
    """Cell order plus the entering and exiting sides along one axis."""
    if sign > 0.0:
        return range(n), lowSide, highSide
    return range(n - 1, -1, -1), highSide, lowSide


class Sweeper:
    """
    Base sweeper.

    Parameters
    ----------
    cs : Settings
        Supplies the cell equation and whether angular fluxes are stored.
    mesh, material, quadrature : collaborators
        Shared, read-only during a sweep.
    state : State
        Receives the angular flux when it is stored.
    boundary : Boundary
        Incident flux is read from it and outgoing flux written to it.
    sweepSource : SweepSource
        Supplies the source of each ordinate.
    """

    DIMENSION = None

    def __init__(self, cs, mesh, material, quadrature, state, boundary, sweepSource):
        if mesh.dimension != self.DIMENSION or quadrature.dimension != self.DIMENSION:
            raise InvalidConfiguration(
                "{} needs a {}D mesh and quadrature, got {}D and {}D".format(
                    self.__class__.__name__,
                    self.DIMENSION,
                    mesh.dimension,
                    quadrature.dimension,
                )
            )
        self.mesh = mesh
        self.material = material
        self.quadrature = quadrature
        self.state = state
        self.boundary = boundary
        self.sweepSource = sweepSource
        self.equation = buildEquation(
            cs[sweepSettings.CONF_EQUATION], mesh, material, quadrature
        )

        self._group = None
        self._updatePsi = False
        self._updateBoundary = True
        self.numberSweeps = 0

        self._source = np.zeros(mesh.numberCells())
        self._psi = np.zeros(mesh.numberCells())
        self.setUpdatePsi(cs[sweepSettings.CONF_STORE_ANGULAR_FLUX])

    def __repr__(self):
        return "<{} {}>".format(self.__class__.__name__, self.equation.__class__.__name__)

    def setUpdatePsi(self, flag):
        """Store the angular flux of every ordinate in the state during sweeps."""
        if flag and not self.state.storeAngularFlux:
            raise InvalidConfiguration(
                "Cannot store angular flux in a state built without it"
            )
        self._updatePsi = bool(flag)

    def setUpdateBoundary(self, flag):
        """Apply single-angle boundary updates after each ordinate."""
        self._updateBoundary = bool(flag)

    def setupGroup(self, g):
        self._group = g
        self.equation.setupGroup(g)

    def sweep(self, phi):
        """
        Sweep every ordinate of the current group.

        Parameters
        ----------
        phi : numpy.ndarray
            Scalar flux buffer. It is zeroed and filled with the new flux.

        Returns
        -------
        phi : numpy.ndarray
            The same buffer.
        """
        if self._group is None:
            raise InvalidConfiguration("setupGroup() must be called before sweep()")
        g = self._group
        q = self.quadrature
        phi[:] = 0.0
        for o in range(q.numberOctants):
            signs = q.octantSign[o]
            for a in range(q.numberAnglesOctant):
                self.sweepSource.source(g, o, a, out=self._source)
                self.equation.setupAngle(a)
                self._sweepAngle(signs, o, a, self._source, self._psi)
                phi += q.weight(a) * self._psi
                if self._updatePsi:
                    self.state.setPsi(g, o, a, self._psi)
                if self._updateBoundary:
                    self.boundary.update(g, o, a)
        self.numberSweeps += 1
        return phi

    def _sweepAngle(self, signs, o, a, source, psi):
        raise NotImplementedError


class Sweeper1D(Sweeper):
    DIMENSION = 1

    def _sweepAngle(self, signs, o, a, source, psi):
        g = self._group
        b = self.boundary
        solve = self.equation.solve
        xs, xIn, xOut = _marching(signs[0], self.mesh.numberCellsX, LEFT, RIGHT)

        psiX = b[xIn, o, a, g]
        for i in xs:
            psi[i], psiX = solve(i, i, source[i], psiX)
        b[xOut, o, a, g] = psiX


class Sweeper2D(Sweeper):
    DIMENSION = 2

    def _sweepAngle(self, signs, o, a, source, psi):
        g = self._group
        b = self.boundary
        solve = self.equation.solve
        nx, ny = self.mesh.numberCellsX, self.mesh.numberCellsY
        xs, xIn, xOut = _marching(signs[0], nx, LEFT, RIGHT)
        ys, yIn, yOut = _marching(signs[1], ny, BOTTOM, TOP)

        # x-faces are indexed by j, y-faces by i
        psiY = np.array(b[yIn, o, a, g])
        xInFace = b[xIn, o, a, g]
        xOutFace = np.empty(ny)
        for j in ys:
            psiX = xInFace[j]
            for i in xs:
                cell = i + j * nx
                psi[cell], psiX, psiY[i] = solve(
                    cell, i, j, source[cell], psiX, psiY[i]
                )
            xOutFace[j] = psiX
        b[xOut, o, a, g] = xOutFace
        b[yOut, o, a, g] = psiY


class Sweeper3D(Sweeper):
    DIMENSION = 3

    def _sweepAngle(self, signs, o, a, source, psi):
        g = self._group
        b = self.boundary
        solve = self.equation.solve
        nx, ny, nz = (
            self.mesh.numberCellsX,
            self.mesh.numberCellsY,
            self.mesh.numberCellsZ,
        )
        xs, xIn, xOut = _marching(signs[0], nx, LEFT, RIGHT)
        ys, yIn, yOut = _marching(signs[1], ny, BOTTOM, TOP)
        zs, zIn, zOut = _marching(signs[2], nz, SOUTH, NORTH)

        # x-faces are indexed (j, k), y-faces (i, k), z-faces (i, j)
        psiZ = np.array(b[zIn, o, a, g])
        xInFace = b[xIn, o, a, g]
        yInFace = b[yIn, o, a, g]
        xOutFace = np.empty((ny, nz))
        yOutFace = np.empty((nx, nz))
        for k in zs:
            psiY = yInFace[:, k].copy()
            for j in ys:
                psiX = xInFace[j, k]
                for i in xs:
                    cell = i + j * nx + k * nx * ny
                    psi[cell], psiX, psiY[i], psiZ[i, j] = solve(
                        cell, i, j, k, source[cell], psiX, psiY[i], psiZ[i, j]
                    )
                xOutFace[j, k] = psiX
            yOutFace[:, k] = psiY
        b[xOut, o, a, g] = xOutFace
        b[yOut, o, a, g] = yOutFace
        b[zOut, o, a, g] = psiZ


SWEEPERS = {1: Sweeper1D, 2: Sweeper2D, 3: Sweeper3D}


def buildSweeper(cs, mesh, material, quadrature, state, boundary, sweepSource):
    """Build the sweeper for the mesh dimension."""
    if mesh.dimension != quadrature.dimension:
        raise InvalidConfiguration(
            "Mesh is {}D but the quadrature is {}D".format(
                mesh.dimension, quadrature.dimension
            )
        )
    sweeper = SWEEPERS[mesh.dimension](
        cs, mesh, material, quadrature, state, boundary, sweepSource
    )
    runLog.debug(f"Built {sweeper}")
    return sweeper
