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
Settings definitions and constants for the sweep engine.

These are the options an input collaborator passes down to the quadrature, the
boundary, the sweeper and the reference solvers.
"""

from typing import List

import voluptuous as vol

from snsweep.settings import setting

CONF_ADJOINT = "adjoint"
CONF_BC_BOTTOM = "bc_bottom"
CONF_BC_FIXED_FLUX = "bc_fixed_flux"
CONF_BC_LEFT = "bc_left"
CONF_BC_NORTH = "bc_north"
CONF_BC_RIGHT = "bc_right"
CONF_BC_SOUTH = "bc_south"
CONF_BC_TOP = "bc_top"
CONF_DIMENSION = "dimension"
CONF_EQUATION = "equation"
CONF_INNER_MAX_ITERS = "inner_max_iters"
CONF_INNER_SOLVER = "inner_solver"
CONF_INNER_TOLERANCE = "inner_tolerance"
CONF_NUMBER_GROUPS = "number_groups"
CONF_OUTER_MAX_ITERS = "outer_max_iters"
CONF_OUTER_TOLERANCE = "outer_tolerance"
CONF_QUAD_NUMBER_AZIMUTH_OCTANT = "quad_number_azimuth_octant"
CONF_QUAD_NUMBER_POLAR_OCTANT = "quad_number_polar_octant"
CONF_QUAD_ORDER = "quad_order"
CONF_QUAD_TYPE = "quad_type"
CONF_STORE_ANGULAR_FLUX = "store_angular_flux"
CONF_VERBOSITY = "verbosity"

# boundary condition settings in side order (LEFT, RIGHT, BOTTOM, TOP, SOUTH, NORTH)
BC_SETTINGS = (
    CONF_BC_LEFT,
    CONF_BC_RIGHT,
    CONF_BC_BOTTOM,
    CONF_BC_TOP,
    CONF_BC_SOUTH,
    CONF_BC_NORTH,
)
SIDE_NAMES = ("left", "right", "bottom", "top", "south", "north")

BC_VACUUM = "vacuum"
BC_REFLECT = "reflect"
BC_FIXED = "fixed"
BC_OPTIONS = [BC_VACUUM, BC_REFLECT, BC_FIXED]

QUAD_GAUSS_LEGENDRE = "gausslegendre"
QUAD_LEVEL_SYMMETRIC = "levelsymmetric"
QUAD_CHEBYSHEV_LEGENDRE = "chebyshevlegendre"
QUAD_OPTIONS = [QUAD_GAUSS_LEGENDRE, QUAD_LEVEL_SYMMETRIC, QUAD_CHEBYSHEV_LEGENDRE]

EQUATION_OPTIONS = ["dd", "sd", "sc"]
INNER_SOLVER_OPTIONS = ["SI", "GMRES"]
VERBOSITY_OPTIONS = ["debug", "extra", "info", "important", "warning", "error"]


def _positive(val):
    """Reject zero and negative counts."""
    if val <= 0:
        raise vol.Invalid(f"Must be positive, got {val}")
    return val


def _fixedFluxSchema():
    """Map of side name to a per-group list of isotropic incident angular fluxes."""
    return vol.Schema({vol.In(SIDE_NAMES): [vol.Coerce(float)]})


def defineSettings() -> List[setting.Setting]:
    """Return the list of sweep engine settings."""
    settings = [
        setting.Setting(
            CONF_NUMBER_GROUPS,
            default=1,
            label="Groups",
            description="Number of energy groups",
            schema=vol.All(vol.Coerce(int), _positive),
        ),
        setting.Setting(
            CONF_DIMENSION,
            default=1,
            label="Dimension",
            description="Spatial dimension of the problem; checked against the mesh",
            options=[1, 2, 3],
            schema=vol.All(vol.Coerce(int), vol.In([1, 2, 3])),
        ),
        setting.Setting(
            CONF_QUAD_TYPE,
            default=QUAD_GAUSS_LEGENDRE,
            label="Quadrature",
            description="Angular quadrature family",
            options=QUAD_OPTIONS,
            enforcedOptions=True,
        ),
        setting.Setting(
            CONF_QUAD_ORDER,
            default=2,
            label="Quadrature order",
            description=(
                "Total number of angles for Gauss-Legendre, or the SN order for "
                "level-symmetric sets"
            ),
            schema=vol.All(vol.Coerce(int), _positive),
        ),
        setting.Setting(
            CONF_QUAD_NUMBER_POLAR_OCTANT,
            default=1,
            label="Polar angles per octant",
            description="Number of polar angles per octant in product quadratures",
            schema=vol.All(vol.Coerce(int), _positive),
        ),
        setting.Setting(
            CONF_QUAD_NUMBER_AZIMUTH_OCTANT,
            default=1,
            label="Azimuths per octant",
            description="Number of azimuthal angles per octant in product quadratures",
            schema=vol.All(vol.Coerce(int), _positive),
        ),
        setting.Setting(
            CONF_EQUATION,
            default="dd",
            label="Cell equation",
            description=(
                "Spatial discretization of the streaming-collision balance: diamond "
                "difference (dd), step difference (sd) or step characteristic (sc, 1D only)"
            ),
            options=EQUATION_OPTIONS,
            enforcedOptions=True,
        ),
        setting.Setting(
            CONF_STORE_ANGULAR_FLUX,
            default=False,
            label="Store angular flux",
            description="Archive the discrete angular flux during each sweep",
        ),
        setting.Setting(
            CONF_BC_FIXED_FLUX,
            default={},
            label="Fixed boundary flux",
            description=(
                "Side name mapped to the per-group isotropic incident angular flux used "
                "by `fixed` boundary conditions"
            ),
            schema=_fixedFluxSchema(),
        ),
        setting.Setting(
            CONF_INNER_SOLVER,
            default="SI",
            label="Within-group solver",
            description="Within-group solver: source iteration (SI) or GMRES",
            options=INNER_SOLVER_OPTIONS,
            enforcedOptions=True,
        ),
        setting.Setting(
            CONF_INNER_TOLERANCE,
            default=1e-8,
            label="Inner tolerance",
            description="Convergence tolerance on the within-group scalar flux",
        ),
        setting.Setting(
            CONF_INNER_MAX_ITERS,
            default=1000,
            label="Inner iterations",
            description="Maximum number of within-group iterations",
            schema=vol.All(vol.Coerce(int), _positive),
        ),
        setting.Setting(
            CONF_OUTER_TOLERANCE,
            default=1e-8,
            label="Outer tolerance",
            description="Convergence tolerance on the multigroup scalar flux",
        ),
        setting.Setting(
            CONF_OUTER_MAX_ITERS,
            default=100,
            label="Outer iterations",
            description="Maximum number of multigroup (upscatter) iterations",
            schema=vol.All(vol.Coerce(int), _positive),
        ),
        setting.Setting(
            CONF_ADJOINT,
            default=False,
            label="Adjoint",
            description="Reverse the quadrature octant signs to solve the adjoint problem",
        ),
        setting.Setting(
            CONF_VERBOSITY,
            default="info",
            label="Verbosity",
            description="The run log verbosity",
            options=VERBOSITY_OPTIONS,
            enforcedOptions=True,
        ),
    ]

    for name, side in zip(BC_SETTINGS, SIDE_NAMES):
        settings.append(
            setting.Setting(
                name,
                default=BC_VACUUM,
                label=f"{side.capitalize()} boundary",
                description=f"Boundary condition on the {side} side of the mesh",
                options=BC_OPTIONS,
                enforcedOptions=True,
            )
        )

    return settings
