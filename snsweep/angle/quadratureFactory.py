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

"""Build quadratures by family name."""
from snsweep import runLog
from snsweep.angle import quadrature
from snsweep.settings import sweepSettings
from snsweep.utils.customExceptions import InvalidConfiguration


def buildQuadrature(
    quadType,
    dimension,
    order=2,
    numberPolarOctant=1,
    numberAzimuthOctant=1,
    adjoint=False,
):
    """
    Build a quadrature.

    Parameters
    ----------
    quadType : str
        ``gausslegendre`` (1D only), ``levelsymmetric`` or ``chebyshevlegendre`` (2D and
        3D only).
    dimension : int
        Spatial dimension.
    order : int, optional
        Number of angles for Gauss-Legendre, SN order for level-symmetric sets.
    numberPolarOctant, numberAzimuthOctant : int, optional
        Angles per octant for product sets.
    adjoint : bool, optional
        Build the quadrature with adjoint (negated) octant signs.

    Raises
    ------
    InvalidConfiguration
        If the dimension is not 1, 2 or 3, if the family does not exist, if the family
        does not apply to the dimension, or if the order is unsupported.
    """
    if dimension not in (1, 2, 3):
        raise InvalidConfiguration(
            f"The quadrature dimension must be 1, 2, or 3, got {dimension}"
        )

    if quadType == sweepSettings.QUAD_GAUSS_LEGENDRE:
        if dimension != 1:
            raise InvalidConfiguration("GaussLegendre is only for 1D.")
        quad = quadrature.GaussLegendre(order)
    elif quadType == sweepSettings.QUAD_LEVEL_SYMMETRIC:
        if dimension == 1:
            raise InvalidConfiguration("LevelSymmetric is only for 2D or 3D.")
        quad = quadrature.LevelSymmetric(order, dimension)
    elif quadType == sweepSettings.QUAD_CHEBYSHEV_LEGENDRE:
        if dimension == 1:
            raise InvalidConfiguration("ChebyshevLegendre is only for 2D or 3D.")
        quad = quadrature.ChebyshevLegendre(
            dimension, numberPolarOctant, numberAzimuthOctant
        )
    else:
        raise InvalidConfiguration(
            "Unsupported quadrature `{}`; choose from {}".format(
                quadType, sweepSettings.QUAD_OPTIONS
            )
        )

    quad.setAdjoint(adjoint)
    runLog.debug(f"Built {quad}")
    return quad


def fromSettings(cs, dimension=None):
    """Build the quadrature described by a settings object."""
    dimension = cs[sweepSettings.CONF_DIMENSION] if dimension is None else dimension
    return buildQuadrature(
        cs[sweepSettings.CONF_QUAD_TYPE],
        dimension,
        order=cs[sweepSettings.CONF_QUAD_ORDER],
        numberPolarOctant=cs[sweepSettings.CONF_QUAD_NUMBER_POLAR_OCTANT],
        numberAzimuthOctant=cs[sweepSettings.CONF_QUAD_NUMBER_AZIMUTH_OCTANT],
        adjoint=cs[sweepSettings.CONF_ADJOINT],
    )
