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

r"""
Cell equations for the streaming-collision balance along one ordinate.

For a cell with widths :math:`\Delta_x, \Delta_y, \Delta_z`, total cross section
:math:`\sigma` and source :math:`s`, the balance is

.. math::

    \frac{|\mu|}{\Delta_x}(\psi_{x,out} - \psi_{x,in})
    + \frac{|\eta|}{\Delta_y}(\psi_{y,out} - \psi_{y,in})
    + \frac{|\xi|}{\Delta_z}(\psi_{z,out} - \psi_{z,in})
    + \sigma \psi = s

and each equation closes it with a relation between the cell average :math:`\psi` and
the face fluxes:

* diamond difference (``dd``): :math:`\psi_{out} = 2 \psi - \psi_{in}`,
* step difference (``sd``): :math:`\psi_{out} = \psi`,
* step characteristic (``sc``, 1D only): the exact solution for a flat source.

Equations are bound to a group with :py:meth:`Equation.setupGroup` and to an ordinate
with :py:meth:`Equation.setupAngle`; :py:meth:`Equation.solve` then returns the cell
average and the outgoing face fluxes.
"""
import math

from snsweep.geometry.mesh import MATERIAL
from snsweep.utils.customExceptions import InvalidConfiguration

# optical thickness below which the step characteristic uses its thin-cell limit
THIN_CELL_TAU = 1.0e-8


class Equation:
    """Base class of the cell equations."""

    DIMENSION = None
    #: 2 for diamond difference, 1 for step difference
    _faceFactor = 2.0

    def __init__(self, mesh, material, quadrature):
        self.mesh = mesh
        self.material = material
        self.quadrature = quadrature
        self._materialMap = mesh.meshMap(MATERIAL)
        self._sigmaT = None
        self._coefficients = [None, None, None]

    def setupGroup(self, g):
        """Bind the total cross section of group ``g`` in every cell."""
        self._sigmaT = self.material.sigmaT(self._materialMap, g)

    def setupAngle(self, a):
        """Precompute the streaming coefficients of angle ``a`` of the current octant."""
        q = self.quadrature
        cosines = (q.mus[a], q.etas[a], q.xis[a])
        for axis in range(self.DIMENSION):
            self._coefficients[axis] = (
                self._faceFactor * cosines[axis] / self.mesh.widths(axis)
            )

    def solve(self, *args):
        raise NotImplementedError


class Equation1DDiamond(Equation):
    DIMENSION = 1

    def solve(self, cell, i, source, psiIn):
        cx = self._coefficients[0][i]
        psi = (source + cx * psiIn) / (self._sigmaT[cell] + cx)
        return psi, 2.0 * psi - psiIn


class Equation1DStep(Equation):
    DIMENSION = 1
    _faceFactor = 1.0

    def solve(self, cell, i, source, psiIn):
        cx = self._coefficients[0][i]
        psi = (source + cx * psiIn) / (self._sigmaT[cell] + cx)
        return psi, psi


class Equation1DStepCharacteristic(Equation):
    """Step characteristic: exact attenuation of the incident flux across the cell."""

    DIMENSION = 1
    _faceFactor = 1.0

    def solve(self, cell, i, source, psiIn):
        # cx is |mu| / dx
        cx = self._coefficients[0][i]
        sigma = self._sigmaT[cell]
        tau = sigma / cx
        if tau < THIN_CELL_TAU:
            psiOut = psiIn + source / cx
            return 0.5 * (psiIn + psiOut), psiOut
        attenuation = math.exp(-tau)
        psiOut = psiIn * attenuation + source / sigma * (1.0 - attenuation)
        psi = source / sigma + (psiIn - psiOut) * cx / sigma
        return psi, psiOut


class Equation2DDiamond(Equation):
    DIMENSION = 2

    def solve(self, cell, i, j, source, psiInX, psiInY):
        cx = self._coefficients[0][i]
        cy = self._coefficients[1][j]
        psi = (source + cx * psiInX + cy * psiInY) / (self._sigmaT[cell] + cx + cy)
        return psi, 2.0 * psi - psiInX, 2.0 * psi - psiInY


class Equation2DStep(Equation):
    DIMENSION = 2
    _faceFactor = 1.0

    def solve(self, cell, i, j, source, psiInX, psiInY):
        cx = self._coefficients[0][i]
        cy = self._coefficients[1][j]
        psi = (source + cx * psiInX + cy * psiInY) / (self._sigmaT[cell] + cx + cy)
        return psi, psi, psi


class Equation3DDiamond(Equation):
    DIMENSION = 3

    def solve(self, cell, i, j, k, source, psiInX, psiInY, psiInZ):
        cx = self._coefficients[0][i]
        cy = self._coefficients[1][j]
        cz = self._coefficients[2][k]
        psi = (source + cx * psiInX + cy * psiInY + cz * psiInZ) / (
            self._sigmaT[cell] + cx + cy + cz
        )
        return psi, 2.0 * psi - psiInX, 2.0 * psi - psiInY, 2.0 * psi - psiInZ


class Equation3DStep(Equation):
    DIMENSION = 3
    _faceFactor = 1.0

    def solve(self, cell, i, j, k, source, psiInX, psiInY, psiInZ):
        cx = self._coefficients[0][i]
        cy = self._coefficients[1][j]
        cz = self._coefficients[2][k]
        psi = (source + cx * psiInX + cy * psiInY + cz * psiInZ) / (
            self._sigmaT[cell] + cx + cy + cz
        )
        return psi, psi, psi, psi


EQUATIONS = {
    ("dd", 1): Equation1DDiamond,
    ("sd", 1): Equation1DStep,
    ("sc", 1): Equation1DStepCharacteristic,
    ("dd", 2): Equation2DDiamond,
    ("sd", 2): Equation2DStep,
    ("dd", 3): Equation3DDiamond,
    ("sd", 3): Equation3DStep,
}


def buildEquation(name, mesh, material, quadrature):
    """Build the cell equation ``name`` for the mesh dimension."""
    try:
        equationClass = EQUATIONS[name, mesh.dimension]
    except KeyError:
        valid = sorted(n for n, d in EQUATIONS if d == mesh.dimension)
        raise InvalidConfiguration(
            "Equation `{}` is not available in {}D; choose from {}".format(
                name, mesh.dimension, valid
            )
        ) from None
    return equationClass(mesh, material, quadrature)
