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
Multigroup cross sections for a set of materials.

All data are stored as numpy arrays indexed first by material and then by group. The
scatter matrix ``sigmaS[m, g, gp]`` is the cross section for scattering *from* group
``gp`` *into* group ``g``.

After the data are set, :py:meth:`Material.finalize` computes the scatter bounds each
group needs when its in-scatter source is built:

* ``lower(g)``: the highest-energy group that downscatters into ``g`` (``g`` if none),
* ``upper(g)``: the lowest-energy group that scatters into ``g`` (``g`` if none),

and the upscatter cutoff, the first group receiving upscatter (the number of groups if
there is no upscatter at all).
"""
import numpy as np
from tabulate import tabulate

from snsweep import runLog
from snsweep.utils.customExceptions import InvalidConfiguration, OutOfRange


class Material:
    """
    Cross section container.

    Parameters
    ----------
    numberGroups : int
        Number of energy groups.
    numberMaterials : int
        Number of materials.
    downscatter : bool, optional
        Treat scattering as downscatter only. Switched on automatically by
        :py:meth:`finalize` when the data have no upscatter.
    """

    def __init__(self, numberGroups, numberMaterials, downscatter=False):
        if numberGroups < 1 or numberMaterials < 1:
            raise InvalidConfiguration(
                "A material needs at least one group and one material, got {} and {}".format(
                    numberGroups, numberMaterials
                )
            )
        self.numberGroups = numberGroups
        self.numberMaterials = numberMaterials
        self.downscatter = downscatter

        shape = (numberMaterials, numberGroups)
        self._sigmaT = np.zeros(shape)
        self._sigmaA = np.zeros(shape)
        self._nuSigmaF = np.zeros(shape)
        self._chi = np.zeros(shape)
        self._diffCoef = np.zeros(shape)
        self._sigmaS = np.zeros((numberMaterials, numberGroups, numberGroups))
        self._delta = None

        self._scatterBounds = np.zeros((numberGroups, 2), dtype=int)
        self._upscatterCutoff = numberGroups
        self._finalized = False

    def __repr__(self):
        return "<{} materials:{} groups:{}>".format(
            self.__class__.__name__, self.numberMaterials, self.numberGroups
        )

    # ----------------------------------------------------------------------
    # setters

    def _checkMaterial(self, m):
        if np.any(np.asarray(m) < 0) or np.any(np.asarray(m) >= self.numberMaterials):
            raise OutOfRange(
                f"Material {m} is out of range; there are {self.numberMaterials}"
            )

    def _checkGroup(self, g):
        if not 0 <= g < self.numberGroups:
            raise OutOfRange(f"Group {g} is out of range; there are {self.numberGroups}")

    def _set(self, data, name, m, value, g):
        self._checkMaterial(m)
        value = np.asarray(value, dtype=float)
        if np.any(value < 0.0):
            raise InvalidConfiguration(f"{name} must be non-negative, got {value}")
        if g is None:
            if value.shape != (self.numberGroups,):
                raise InvalidConfiguration(
                    "{} for material {} needs {} group values, got {}".format(
                        name, m, self.numberGroups, value.shape
                    )
                )
            data[m] = value
        else:
            self._checkGroup(g)
            data[m, g] = value
        self._finalized = False

    def setSigmaT(self, m, value, g=None):
        """Set the total cross section of one group, or of all groups if ``g`` is None."""
        self._set(self._sigmaT, "sigma_t", m, value, g)

    def setSigmaA(self, m, value, g=None):
        self._set(self._sigmaA, "sigma_a", m, value, g)

    def setNuSigmaF(self, m, value, g=None):
        self._set(self._nuSigmaF, "nu_sigma_f", m, value, g)

    def setChi(self, m, value, g=None):
        self._set(self._chi, "chi", m, value, g)

    def setDiffCoef(self, m, value, g=None):
        self._set(self._diffCoef, "diff_coef", m, value, g)

    def setSigmaS(self, m, g, value, gp=None):
        """
        Set scattering into group ``g``.

        With ``gp`` given, ``value`` is the cross section from ``gp`` into ``g``;
        otherwise it is the whole row of source groups.
        """
        self._checkGroup(g)
        self._set(self._sigmaS[:, g, :], "sigma_s", m, value, gp)

    def setDelta(self, delta):
        """
        Set the discrete generalized multigroup correction.

        Parameters
        ----------
        delta : array-like
            Correction indexed by ``[material, group, ordinate]``.
        """
        delta = np.asarray(delta, dtype=float)
        if delta.ndim != 3 or delta.shape[:2] != (self.numberMaterials, self.numberGroups):
            raise InvalidConfiguration(
                "Delta must be shaped (materials, groups, ordinates), got {}".format(
                    delta.shape
                )
            )
        self._delta = delta

    # ----------------------------------------------------------------------
    # getters

    def sigmaT(self, m, g):
        """Total cross section; ``m`` may be an array of material indices."""
        self._checkMaterial(m)
        self._checkGroup(g)
        return self._sigmaT[m, g]

    def sigmaA(self, m, g):
        self._checkMaterial(m)
        self._checkGroup(g)
        return self._sigmaA[m, g]

    def nuSigmaF(self, m, g):
        self._checkMaterial(m)
        self._checkGroup(g)
        return self._nuSigmaF[m, g]

    def chi(self, m, g):
        self._checkMaterial(m)
        self._checkGroup(g)
        return self._chi[m, g]

    def diffCoef(self, m, g):
        self._checkMaterial(m)
        self._checkGroup(g)
        return self._diffCoef[m, g]

    def sigmaS(self, m, g, gp):
        """Scatter cross section from ``gp`` into ``g``."""
        self._checkMaterial(m)
        self._checkGroup(g)
        self._checkGroup(gp)
        return self._sigmaS[m, g, gp]

    @property
    def hasDGM(self):
        """Whether a discrete generalized multigroup correction is set."""
        return self._delta is not None

    def delta(self, m, g, n):
        """Correction for material ``m``, group ``g`` and cardinal ordinate ``n``."""
        if self._delta is None:
            raise InvalidConfiguration("No delta correction has been set")
        self._checkMaterial(m)
        self._checkGroup(g)
        if not 0 <= n < self._delta.shape[2]:
            raise OutOfRange(f"Ordinate {n} is out of range for the delta correction")
        return self._delta[m, g, n]

    # ----------------------------------------------------------------------
    # scatter bounds

    def finalize(self):
        """Compute the scatter bounds and the upscatter cutoff."""
        nonzero = self._sigmaS > 0.0
        for g in range(self.numberGroups):
            sources = np.nonzero(np.any(nonzero[:, g, :], axis=0))[0]
            downscatter = sources[sources < g]
            self._scatterBounds[g, 0] = downscatter.min() if downscatter.size else g
            self._scatterBounds[g, 1] = max(g, sources.max()) if sources.size else g

        self._upscatterCutoff = self.numberGroups
        for g in range(self.numberGroups):
            if self._scatterBounds[g, 1] > g:
                self._upscatterCutoff = g
                break

        if self._upscatterCutoff == self.numberGroups:
            if not self.downscatter:
                runLog.warning(
                    "Upscatter is being turned off since no upscatter exists in the data.",
                    single=True,
                )
            self.downscatter = True

        self._finalized = True

    def _checkFinalized(self):
        if not self._finalized:
            raise InvalidConfiguration(
                "Material scatter bounds are not available until finalize() is called"
            )

    def lower(self, g):
        """Highest-energy group that downscatters into ``g``."""
        self._checkFinalized()
        self._checkGroup(g)
        return int(self._scatterBounds[g, 0])

    def upper(self, g):
        """Lowest-energy group that scatters into ``g``."""
        self._checkFinalized()
        self._checkGroup(g)
        return int(self._scatterBounds[g, 1])

    @property
    def upscatterCutoff(self):
        self._checkFinalized()
        return self._upscatterCutoff

    def display(self):
        """Log the cross sections of every material."""
        groups = list(range(self.numberGroups))
        for m in range(self.numberMaterials):
            rows = [
                ["sigma_t"] + self._sigmaT[m].tolist(),
                ["sigma_a"] + self._sigmaA[m].tolist(),
                ["nu_sigma_f"] + self._nuSigmaF[m].tolist(),
                ["chi"] + self._chi[m].tolist(),
            ]
            rows += [
                [f"sigma_s {g}<-"] + self._sigmaS[m, g].tolist() for g in groups
            ]
            runLog.info(
                "Material {}\n{}".format(
                    m, tabulate(rows, headers=["g"] + groups, floatfmt=".10f")
                )
            )
