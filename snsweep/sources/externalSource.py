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
External (fixed) sources.

Every source can report two things for a group:

* :py:meth:`ExternalSource.source`, the isotropic scalar source density per cell, and
* :py:meth:`ExternalSource.discreteSource`, the angular source per cell along one
  ordinate.

Moment sources are projected onto the ordinates by the sweep source. Discrete sources
are added along each ordinate as they are, which is how anisotropic fixed sources enter
a sweep.
"""
import numpy as np

from snsweep.angle.momentToDiscrete import MomentToDiscrete
from snsweep.utils.customExceptions import InvalidConfiguration, OutOfRange


class ExternalSource:
    """Base class for fixed sources on a mesh."""

    #: whether the source is defined per ordinate rather than as a moment
    discrete = False

    def __init__(self, numberGroups, mesh, quadrature=None):
        self.numberGroups = numberGroups
        self.mesh = mesh
        self.quadrature = quadrature
        self.momentToDiscrete = (
            MomentToDiscrete(quadrature) if quadrature is not None else None
        )

    def _checkGroup(self, g):
        if not 0 <= g < self.numberGroups:
            raise OutOfRange(f"Group {g} is out of range; there are {self.numberGroups}")

    def source(self, g):
        """Scalar source density of group ``g`` in every cell."""
        raise NotImplementedError

    def discreteSource(self, g, o, a):
        """Angular source of group ``g`` along ordinate ``(o, a)`` in every cell."""
        if self.momentToDiscrete is None:
            raise InvalidConfiguration("A quadrature is needed for discrete source values")
        return self.source(g) * self.momentToDiscrete.value(o, a)


class IsotropicSource(ExternalSource):
    """
    Isotropic source assigned by region.

    Parameters
    ----------
    spectra : array-like
        Source density per spectrum and group, shaped ``(numberSpectra, numberGroups)``.
    sourceMap : array-like
        Spectrum index of every cell.
    """

    def __init__(self, numberGroups, mesh, spectra, sourceMap, quadrature=None):
        ExternalSource.__init__(self, numberGroups, mesh, quadrature)
        spectra = np.asarray(spectra, dtype=float)
        sourceMap = np.asarray(sourceMap, dtype=int)
        if spectra.ndim != 2 or spectra.shape[1] != numberGroups:
            raise InvalidConfiguration(
                f"Spectra must be shaped (spectra, {numberGroups}), got {spectra.shape}"
            )
        if sourceMap.shape != (mesh.numberCells(),):
            raise InvalidConfiguration(
                f"Source map needs {mesh.numberCells()} cells, got {sourceMap.shape}"
            )
        if sourceMap.min() < 0 or sourceMap.max() >= len(spectra):
            raise OutOfRange("Source map refers to a spectrum that does not exist")
        self._source = [spectra[sourceMap, g] for g in range(numberGroups)]

    def source(self, g):
        self._checkGroup(g)
        return self._source[g]


class ConstantSource(IsotropicSource):
    """
    Uniform isotropic source.

    Parameters
    ----------
    strength : float or array-like
        Scalar source density, either one value for all groups or one per group.
    """

    def __init__(self, numberGroups, mesh, strength, quadrature=None):
        strength = np.broadcast_to(np.asarray(strength, dtype=float), (numberGroups,))
        IsotropicSource.__init__(
            self,
            numberGroups,
            mesh,
            [strength],
            np.zeros(mesh.numberCells(), dtype=int),
            quadrature,
        )


class DiscreteSource(ExternalSource):
    """
    Angle-dependent source assigned by region.

    Parameters
    ----------
    spectra : array-like
        Angular source per spectrum, group and cardinal ordinate, shaped
        ``(numberSpectra, numberGroups, numberAngles)``.
    sourceMap : array-like
        Spectrum index of every cell.
    """

    discrete = True

    def __init__(self, numberGroups, mesh, quadrature, spectra, sourceMap):
        ExternalSource.__init__(self, numberGroups, mesh, quadrature)
        spectra = np.asarray(spectra, dtype=float)
        sourceMap = np.asarray(sourceMap, dtype=int)
        expected = (numberGroups, quadrature.numberAngles)
        if spectra.ndim != 3 or spectra.shape[1:] != expected:
            raise InvalidConfiguration(
                "Spectra must be shaped (spectra, {}, {}), got {}".format(
                    *expected, spectra.shape
                )
            )
        if sourceMap.shape != (mesh.numberCells(),):
            raise InvalidConfiguration(
                f"Source map needs {mesh.numberCells()} cells, got {sourceMap.shape}"
            )
        if sourceMap.min() < 0 or sourceMap.max() >= len(spectra):
            raise OutOfRange("Source map refers to a spectrum that does not exist")
        self._spectra = spectra
        self._sourceMap = sourceMap

    def source(self, g):
        """Angle-integrated source density."""
        self._checkGroup(g)
        q = self.quadrature
        weights = np.tile(q.weights, q.numberOctants)
        return self._spectra[self._sourceMap, g, :] @ weights

    def discreteSource(self, g, o, a):
        self._checkGroup(g)
        return self._spectra[self._sourceMap, g, self.quadrature.index(o, a)]
