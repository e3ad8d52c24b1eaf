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

"""Fission source for multiplying media."""
import numpy as np

from snsweep.geometry.mesh import MATERIAL


class FissionSource:
    r"""
    Isotropic fission source.

    The fission density is

    .. math::

        f(r) = \sum_{g'} \nu\Sigma_{f,g'}(r) \phi_{g'}(r)

    and the source in group :math:`g` is :math:`\chi_g(r) f(r) / k`, where :math:`k` is
    the eigenvalue stored in the state.
    """

    def __init__(self, state, mesh, material):
        self.state = state
        self.material = material
        self._materialMap = mesh.meshMap(MATERIAL)
        self._density = np.zeros(mesh.numberCells())

    def update(self):
        """Recompute the fission density from the current state fluxes."""
        self._density[:] = 0.0
        for g in range(self.material.numberGroups):
            self._density += self.material.nuSigmaF(self._materialMap, g) * self.state.phi(g)

    @property
    def density(self):
        return self._density

    def source(self, g):
        """Fission source emitted into group ``g``."""
        return (
            self.material.chi(self._materialMap, g)
            * self._density
            / self.state.eigenvalue
        )
