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

"""Isotropic scattering sources."""
import numpy as np

from snsweep.geometry.mesh import MATERIAL


class ScatterSource:
    """
    Builds scattering sources from the state fluxes and the material scatter matrix.

    The group ranges come from the material scatter bounds, so the material must be
    finalized before any source is built.
    """

    def __init__(self, state, mesh, material):
        self.state = state
        self.material = material
        self._materialMap = mesh.meshMap(MATERIAL)

    def _sigmaS(self, g, gp):
        return self.material.sigmaS(self._materialMap, g, gp)

    def buildWithinGroupSource(self, g, phi):
        """Self-scatter in group ``g`` for the flux ``phi``."""
        return self._sigmaS(g, g) * phi

    def buildInScatterSource(self, g):
        """Scatter into ``g`` from every other group, using the state fluxes."""
        source = np.zeros_like(self.state.phi(g))
        lower = self.material.lower(g)
        upper = g - 1 if self.material.downscatter else self.material.upper(g)
        for gp in range(lower, upper + 1):
            if gp == g:
                continue
            source += self._sigmaS(g, gp) * self.state.phi(gp)
        return source

    def buildTotalSource(self, g, phis):
        """Scatter into ``g`` from all groups, including itself, for the fluxes ``phis``."""
        source = np.zeros_like(phis[g])
        lower = self.material.lower(g)
        upper = g if self.material.downscatter else self.material.upper(g)
        for gp in range(lower, upper + 1):
            source += self._sigmaS(g, gp) * phis[gp]
        return source
