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
The solution state: flux moments per group, optionally the discrete angular flux, and
the eigenvalue.
"""
import numpy as np

from snsweep.settings import sweepSettings
from snsweep.utils.customExceptions import InvalidConfiguration, OutOfRange


class State:
    """
    Holds the unknowns of a transport solve.

    Parameters
    ----------
    numberGroups : int
        Number of energy groups.
    mesh : Mesh
        The mesh; sets the length of every flux array.
    quadrature : Quadrature
        The quadrature; sets the number of angular flux arrays when they are stored.
    storeAngularFlux : bool, optional
        Keep the discrete angular flux of every ordinate.
    """

    def __init__(self, numberGroups, mesh, quadrature, storeAngularFlux=False):
        self.numberGroups = numberGroups
        self.numberCells = mesh.numberCells()
        self.quadrature = quadrature
        self.storeAngularFlux = storeAngularFlux
        self.eigenvalue = 1.0

        self._phi = [np.zeros(self.numberCells) for _ in range(numberGroups)]
        self._psi = None
        if storeAngularFlux:
            self._psi = [
                [np.zeros(self.numberCells) for _ in range(quadrature.numberAngles)]
                for _ in range(numberGroups)
            ]

    @classmethod
    def fromSettings(cls, cs, mesh, quadrature):
        return cls(
            cs[sweepSettings.CONF_NUMBER_GROUPS],
            mesh,
            quadrature,
            storeAngularFlux=cs[sweepSettings.CONF_STORE_ANGULAR_FLUX],
        )

    def _checkGroup(self, g):
        if not 0 <= g < self.numberGroups:
            raise OutOfRange(f"Group {g} is out of range; there are {self.numberGroups}")

    def phi(self, g):
        """Scalar flux of group ``g``."""
        self._checkGroup(g)
        return self._phi[g]

    def setPhi(self, g, values):
        self._checkGroup(g)
        values = np.asarray(values, dtype=float)
        if values.shape != (self.numberCells,):
            raise InvalidConfiguration(
                f"Flux for group {g} needs {self.numberCells} cells, got {values.shape}"
            )
        self._phi[g][:] = values

    @property
    def allPhi(self):
        """Scalar flux of every group, in group order."""
        return self._phi

    def psi(self, g, o, a):
        """Angular flux of group ``g`` along ordinate ``(o, a)``."""
        self._checkAngularFlux()
        self._checkGroup(g)
        return self._psi[g][self.quadrature.index(o, a)]

    def setPsi(self, g, o, a, values):
        self._checkAngularFlux()
        self._checkGroup(g)
        self._psi[g][self.quadrature.index(o, a)][:] = values

    def _checkAngularFlux(self):
        if not self.storeAngularFlux:
            raise InvalidConfiguration(
                "Angular flux is only available when `store_angular_flux` is on"
            )

    def clear(self):
        """Zero all fluxes and reset the eigenvalue."""
        for phi in self._phi:
            phi[:] = 0.0
        if self._psi is not None:
            for psiGroup in self._psi:
                for psi in psiGroup:
                    psi[:] = 0.0
        self.eigenvalue = 1.0
