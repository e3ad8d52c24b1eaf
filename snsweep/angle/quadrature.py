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
Angular quadratures and the octant topology of the discrete ordinates.

Directions are stored per octant: every octant holds the same positive direction cosines
:math:`(\mu, \eta, \xi)` and weights, and the sign of each cosine comes from the fixed
octant sign table. Octant :math:`k` has the signs

=======  ======  ======  ======
octant   x       y       z
=======  ======  ======  ======
0        \+      \+      \+
1        \-      \+      \+
2        \-      \-      \+
3        \+      \-      \+
4        \+      \+      \-
5        \-      \+      \-
6        \-      \-      \-
7        \+      \-      \-
=======  ======  ======  ======

Only the first :math:`2^d` octants are used in dimension :math:`d`. The weights over all
octants sum to the angular norm: 2 in 1D, where they integrate over :math:`\mu`, and
:math:`4\pi` in 2D and 3D. A 2D quadrature lives on the upper hemisphere and each of its
weights carries the mirror direction in :math:`-\xi` as well.

Within an octant the angles are ordered by ascending :math:`\mu`, then :math:`\eta`,
then :math:`\xi`. The cardinal index of angle ``a`` of octant ``o`` is
``o * numberAnglesOctant + a``.
"""
import itertools
import math

import numpy as np
from tabulate import tabulate

from snsweep import runLog
from snsweep.utils.customExceptions import InvalidConfiguration, OutOfRange

OCTANT_SIGN = np.array(
    [
        [1.0, 1.0, 1.0],
        [-1.0, 1.0, 1.0],
        [-1.0, -1.0, 1.0],
        [1.0, -1.0, 1.0],
        [1.0, 1.0, -1.0],
        [-1.0, 1.0, -1.0],
        [-1.0, -1.0, -1.0],
        [1.0, -1.0, -1.0],
    ]
)
OCTANT_SIGN.setflags(write=False)

# octants entering (incident) and leaving (outgoing) the mesh through each side, sides
# ordered LEFT, RIGHT, BOTTOM, TOP, SOUTH, NORTH
INCIDENT_OCTANTS = {
    1: ((0,), (1,)),
    2: ((0, 3), (2, 1), (1, 0), (3, 2)),
    3: ((4, 7, 0, 3), (5, 6, 2, 1), (1, 5, 0, 4), (6, 2, 7, 3), (3, 2, 0, 1), (6, 7, 5, 4)),
}
OUTGOING_OCTANTS = {
    1: ((1,), (0,)),
    2: ((2, 1), (0, 3), (3, 2), (1, 0)),
    3: ((5, 6, 2, 1), (4, 7, 0, 3), (6, 2, 7, 3), (1, 5, 0, 4), (6, 7, 5, 4), (3, 2, 0, 1)),
}

ANGULAR_NORM = {1: 2.0, 2: 4.0 * math.pi, 3: 4.0 * math.pi}

# level-symmetric sets: the first cosine and, per point class, the cosine levels of its
# points and the weight of each point (octant weights summing to one)
LEVEL_SYMMETRIC = {
    2: (0.5773503, (((1, 1, 1), 1.0),)),
    4: (0.3500212, (((1, 1, 2), 1.0 / 3.0),)),
    6: (0.2666355, (((1, 1, 3), 0.1761263), ((1, 2, 2), 0.1572071))),
    8: (
        0.2182179,
        (((1, 1, 4), 0.1209877), ((1, 2, 3), 0.0907407), ((2, 2, 2), 0.0925926)),
    ),
}


class Quadrature:
    """
    Base class for angular quadratures.

    Subclasses compute the positive direction cosines and the weights of a single octant,
    with the octant weights summing to one, and hand them to this constructor. The
    weights are rescaled here so that the full set sums to the angular norm.

    Parameters
    ----------
    dimension : int
        Spatial dimension, 1, 2 or 3.
    mu, eta, xi : array-like
        Positive direction cosines of the angles in one octant.
    weight : array-like
        Octant weights, summing to one.
    name : str
        Quadrature name used in logs.
    """

    def __init__(self, dimension, mu, eta, xi, weight, name):
        if dimension not in (1, 2, 3):
            raise InvalidConfiguration(
                f"The quadrature dimension must be 1, 2, or 3, got {dimension}"
            )
        self.dimension = dimension
        self.name = name
        self.numberOctants = 2**dimension
        self.numberAnglesOctant = len(weight)
        self.numberAngles = self.numberAnglesOctant * self.numberOctants
        if self.numberAnglesOctant == 0:
            raise InvalidConfiguration(f"{name} quadrature has no angles")

        # sort mu-major, then eta, then xi
        order = np.lexsort((np.asarray(xi), np.asarray(eta), np.asarray(mu)))
        scale = ANGULAR_NORM[dimension] / self.numberOctants / float(np.sum(weight))
        self._mu = np.asarray(mu, dtype=float)[order]
        self._eta = np.asarray(eta, dtype=float)[order]
        self._xi = np.asarray(xi, dtype=float)[order]
        self._weight = np.asarray(weight, dtype=float)[order] * scale
        for arr in (self._mu, self._eta, self._xi, self._weight):
            arr.setflags(write=False)

        self._octantSign = OCTANT_SIGN.copy()
        self._adjoint = False

    def __repr__(self):
        return "<{} {}D with {} angles>".format(
            self.__class__.__name__, self.dimension, self.numberAngles
        )

    @property
    def adjoint(self):
        return self._adjoint

    @property
    def angularNorm(self):
        """Sum of all the weights."""
        return ANGULAR_NORM[self.dimension]

    @property
    def octantSign(self):
        """The 8x3 table of octant signs, negated in adjoint mode."""
        return self._octantSign

    def setAdjoint(self, flag):
        """
        Switch between forward and adjoint directions.

        Every sign in the octant table is negated once per change of the flag, so setting
        the same value twice is a no-op and toggling twice restores the table.
        """
        flag = bool(flag)
        if flag == self._adjoint:
            return
        self._adjoint = flag
        self._octantSign *= -1.0

    def _checkOctantAngle(self, o, a):
        if not 0 <= o < self.numberOctants:
            raise OutOfRange(
                f"Octant {o} is out of range for a {self.dimension}D quadrature"
            )
        if not 0 <= a < self.numberAnglesOctant:
            raise OutOfRange(
                f"Angle {a} is out of range; there are {self.numberAnglesOctant} per octant"
            )

    def _checkSide(self, side):
        if not 0 <= side < 2 * self.dimension:
            raise OutOfRange(
                f"Side {side} is out of range for a {self.dimension}D quadrature"
            )

    def index(self, o, a):
        """Return the cardinal index of angle ``a`` in octant ``o``."""
        self._checkOctantAngle(o, a)
        return o * self.numberAnglesOctant + a

    def incidentOctants(self, side):
        """Octants whose directions enter the mesh through ``side``."""
        self._checkSide(side)
        return INCIDENT_OCTANTS[self.dimension][side]

    def outgoingOctants(self, side):
        """Octants whose directions leave the mesh through ``side``."""
        self._checkSide(side)
        return OUTGOING_OCTANTS[self.dimension][side]

    def weight(self, a):
        return self._weight[a]

    @property
    def weights(self):
        return self._weight

    def mu(self, o, a):
        """Signed x-direction cosine."""
        return self._octantSign[o, 0] * self._mu[a]

    def eta(self, o, a):
        """Signed y-direction cosine."""
        return self._octantSign[o, 1] * self._eta[a]

    def xi(self, o, a):
        """Signed z-direction cosine."""
        return self._octantSign[o, 2] * self._xi[a]

    @property
    def mus(self):
        """Positive x-direction cosines of one octant."""
        return self._mu

    @property
    def etas(self):
        return self._eta

    @property
    def xis(self):
        return self._xi

    def display(self):
        """Log the abscissa and weights of one octant."""
        if self.dimension == 1:
            headers = ["m", "mu", "wt"]
            rows = zip(range(self.numberAnglesOctant), self._mu, self._weight)
        else:
            headers = ["m", "mu", "eta", "xi", "wt"]
            rows = zip(
                range(self.numberAnglesOctant),
                self._mu,
                self._eta,
                self._xi,
                self._weight,
            )
        runLog.info(
            "{} abscissa and weights:\n{}\nThe sum of the weights is {:.13f}".format(
                self.name,
                tabulate(rows, headers=headers, floatfmt=".13f"),
                float(np.sum(self._weight)),
            )
        )


class GaussLegendre(Quadrature):
    """
    Gauss-Legendre quadrature for 1D slabs.

    ``order`` is the total number of angles and must be even; each half space gets the
    positive roots of the Legendre polynomial of that degree.
    """

    def __init__(self, order):
        if order < 2 or order % 2:
            raise InvalidConfiguration(
                f"Gauss-Legendre order must be a positive even number, got {order}"
            )
        x, w = np.polynomial.legendre.leggauss(order)
        mu = x[order // 2 :]
        weight = w[order // 2 :]
        zeros = np.zeros_like(mu)
        Quadrature.__init__(self, 1, mu, zeros, zeros, weight, "GaussLegendre")


class LevelSymmetric(Quadrature):
    """Level-symmetric quadrature of order 2, 4, 6 or 8 for 2D and 3D."""

    def __init__(self, order, dimension):
        if dimension not in (2, 3):
            raise InvalidConfiguration(
                f"LevelSymmetric is only for 2D or 3D, got dimension {dimension}"
            )
        if order not in LEVEL_SYMMETRIC:
            raise InvalidConfiguration(
                "Unsupported LevelSymmetric order {}; choose from {}".format(
                    order, sorted(LEVEL_SYMMETRIC)
                )
            )
        mu1, pointClasses = LEVEL_SYMMETRIC[order]
        levels = [mu1]
        if order > 2:
            delta = 2.0 * (1.0 - 3.0 * mu1**2) / (order - 2)
            levels = [math.sqrt(mu1**2 + i * delta) for i in range(order // 2)]

        mu, eta, xi, weight = [], [], [], []
        for pointLevels, pointWeight in pointClasses:
            for i, j, k in sorted(set(itertools.permutations(pointLevels))):
                mu.append(levels[i - 1])
                eta.append(levels[j - 1])
                xi.append(levels[k - 1])
                weight.append(pointWeight)
        Quadrature.__init__(
            self, dimension, mu, eta, xi, weight, f"LevelSymmetric S{order}"
        )


class ChebyshevLegendre(Quadrature):
    """
    Product quadrature for 2D and 3D.

    Polar cosines and weights are the positive Gauss-Legendre roots, azimuths are
    equally spaced within the octant with equal weights.
    """

    def __init__(self, dimension, numberPolarOctant, numberAzimuthOctant):
        if dimension not in (2, 3):
            raise InvalidConfiguration(
                f"ChebyshevLegendre is only for 2D or 3D, got dimension {dimension}"
            )
        if numberPolarOctant < 1 or numberAzimuthOctant < 1:
            raise InvalidConfiguration(
                "ChebyshevLegendre needs at least one polar and one azimuthal angle"
            )
        x, w = np.polynomial.legendre.leggauss(2 * numberPolarOctant)
        cosTheta = x[numberPolarOctant:]
        polarWeight = w[numberPolarOctant:]
        phi = (np.arange(numberAzimuthOctant) + 0.5) * (0.5 * math.pi) / numberAzimuthOctant

        mu, eta, xi, weight = [], [], [], []
        for ct, pw in zip(cosTheta, polarWeight):
            st = math.sqrt(1.0 - ct * ct)
            for p in phi:
                mu.append(st * math.cos(p))
                eta.append(st * math.sin(p))
                xi.append(ct)
                weight.append(pw / numberAzimuthOctant)
        Quadrature.__init__(self, dimension, mu, eta, xi, weight, "ChebyshevLegendre")
