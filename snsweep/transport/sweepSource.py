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
Assembly of the per-ordinate source consumed by a sweep.

For group :math:`g` and ordinate :math:`(o, a)` the sweep source is

.. math::

    Q_{g,o,a}(r) = \left(F_g(r) + S_g(r)\right) M_{o,a} + \sum D_{g,o,a}(r)
                   - \delta_{m(r),g,n(o,a)} \phi_g(r)

where :math:`F_g` is the fixed part (external moment sources plus fission),
:math:`S_g` the scatter part, :math:`M_{o,a}` the isotropic moment-to-discrete element,
:math:`D` the discrete external sources and the last term the discrete generalized
multigroup correction evaluated with the last within-group flux.

The fixed and scatter buffers are rebuilt, never accumulated, by the ``build*``
methods; :py:meth:`SweepSource.source` only reads them. Inside
:py:meth:`SweepSource.scatterOnly` the fixed part and the discrete sources are left out,
which turns a sweep into an application of the linear within-group operator.
"""
import contextlib

import numpy as np

from snsweep.angle.momentToDiscrete import MomentToDiscrete
from snsweep.geometry.mesh import MATERIAL
from snsweep.transport.scatterSource import ScatterSource


class SweepSource:
    """
    Builds the source for each ordinate of a sweep.

    Parameters
    ----------
    state : State
        Holds the group fluxes used by the in-scatter and total scatter sources.
    mesh : Mesh
        Sets the buffer sizes and supplies the material map.
    material : Material
        Scatter cross sections and the optional delta correction. Must be finalized.
    quadrature : Quadrature
        Maps ordinates to cardinal indices for the delta correction.
    momentToDiscrete : MomentToDiscrete, optional
        Built from the quadrature when not given.
    """

    def __init__(self, state, mesh, material, quadrature, momentToDiscrete=None):
        self.state = state
        self.mesh = mesh
        self.material = material
        self.quadrature = quadrature
        self.momentToDiscrete = momentToDiscrete or MomentToDiscrete(quadrature)

        numberCells = mesh.numberCells()
        self.fixedGroupSource = np.zeros(numberCells)
        self.scatterGroupSource = np.zeros(numberCells)
        self.groupScalarFlux = np.zeros(numberCells)

        self._materialMap = mesh.meshMap(MATERIAL)
        self._scatterSource = ScatterSource(state, mesh, material)
        self._fissionSource = None
        self._momentSources = []
        self._discreteSources = []
        self._includeFixed = True

    def setFissionSource(self, fissionSource):
        self._fissionSource = fissionSource

    def addExternalSource(self, source):
        """Add a fixed source; discrete sources are kept apart from moment sources."""
        if source.discrete:
            self._discreteSources.append(source)
        else:
            self._momentSources.append(source)

    def reset(self):
        """Zero every buffer."""
        self.fixedGroupSource[:] = 0.0
        self.scatterGroupSource[:] = 0.0
        self.groupScalarFlux[:] = 0.0

    def buildFixed(self, g):
        """Fixed source of group ``g``: external moment sources plus fission."""
        self.fixedGroupSource[:] = 0.0
        for source in self._momentSources:
            self.fixedGroupSource += source.source(g)
        if self._fissionSource is not None:
            self.fixedGroupSource += self._fissionSource.source(g)

    def buildFixedWithScatter(self, g):
        """Fixed source of group ``g`` plus the in-scatter from all other groups."""
        self.buildFixed(g)
        self.fixedGroupSource += self._scatterSource.buildInScatterSource(g)

    def buildWithinGroupScatter(self, g, phi):
        """Self-scatter source for the within-group flux ``phi``."""
        self.groupScalarFlux[:] = phi
        self.scatterGroupSource[:] = self._scatterSource.buildWithinGroupSource(g, phi)

    def buildTotalScatter(self, g, phis):
        """Scatter into group ``g`` from every group, for operator-style solves."""
        self.scatterGroupSource[:] = self._scatterSource.buildTotalSource(g, phis)

    @contextlib.contextmanager
    def scatterOnly(self):
        """Leave the fixed and discrete sources out of :py:meth:`source`."""
        previous = self._includeFixed
        self._includeFixed = False
        try:
            yield self
        finally:
            self._includeFixed = previous

    def source(self, g, o, a, out=None):
        """
        Return the source of group ``g`` along ordinate ``(o, a)``.

        Parameters
        ----------
        out : numpy.ndarray, optional
            Buffer to fill; a new array is returned when omitted.
        """
        if out is None:
            out = np.empty(self.mesh.numberCells())
        if self._includeFixed:
            np.add(self.fixedGroupSource, self.scatterGroupSource, out=out)
        else:
            out[:] = self.scatterGroupSource
        out *= self.momentToDiscrete(o, a)
        if self._includeFixed:
            for source in self._discreteSources:
                out += source.discreteSource(g, o, a)
        if self.material.hasDGM:
            n = self.quadrature.index(o, a)
            out -= self.groupScalarFlux * self.material.delta(self._materialMap, g, n)
        return out
