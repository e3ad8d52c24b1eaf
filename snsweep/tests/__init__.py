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
Shared test fixtures for snsweep.

The builders here assemble small but complete problems (mesh, material, quadrature,
boundary, source and sweeper) so the individual test modules can stay focused on the
behavior they check.
"""
import numpy as np

from snsweep.angle import quadratureFactory
from snsweep.geometry import mesh
from snsweep.material.material import Material
from snsweep.settings import Settings
from snsweep.sources.externalSource import ConstantSource
from snsweep.transport.boundary import Boundary
from snsweep.transport.state import State
from snsweep.transport.sweeper import buildSweeper
from snsweep.transport.sweepSource import SweepSource


def buildSettings(**newSettings):
    """Default settings with the given overrides."""
    return Settings().modified(newSettings=newSettings)


class TransportProblem:
    """
    Everything a sweep needs, wired together from a settings object.

    The material is finalized and the external sources are registered with the sweep
    source.
    """

    def __init__(self, cs, problemMesh, material, externalSources=()):
        self.cs = cs
        self.mesh = problemMesh
        self.material = material
        self.material.finalize()
        self.quadrature = quadratureFactory.fromSettings(cs, problemMesh.dimension)
        self.state = State.fromSettings(cs, problemMesh, self.quadrature)
        self.boundary = Boundary(cs, problemMesh, self.quadrature)
        self.sweepSource = SweepSource(
            self.state, problemMesh, material, self.quadrature
        )
        for source in externalSources:
            self.sweepSource.addExternalSource(source)
        self.sweeper = buildSweeper(
            cs,
            problemMesh,
            material,
            self.quadrature,
            self.state,
            self.boundary,
            self.sweepSource,
        )

    @property
    def components(self):
        """Positional arguments shared by the reference solvers."""
        return (
            self.cs,
            self.state,
            self.mesh,
            self.material,
            self.quadrature,
            self.boundary,
            self.sweepSource,
            self.sweeper,
        )


def buildOneGroupMaterial(sigmaT, sigmaS=0.0, numberMaterials=1):
    mat = Material(1, numberMaterials)
    for m in range(numberMaterials):
        mat.setSigmaT(m, [sigmaT])
        mat.setSigmaA(m, [sigmaT - sigmaS])
        mat.setSigmaS(m, 0, [sigmaS])
    return mat


def buildSlab(
    numberCells=20, length=10.0, sigmaT=1.0, sigmaS=0.0, strength=1.0, **newSettings
):
    """One-group homogeneous slab with a uniform isotropic source."""
    cs = buildSettings(**newSettings)
    slab = mesh.Mesh1D.fromFineMesh(
        [np.linspace(0.0, length, numberCells + 1)], np.zeros(numberCells, dtype=int)
    )
    material = buildOneGroupMaterial(sigmaT, sigmaS)
    source = ConstantSource(1, slab, strength)
    return TransportProblem(cs, slab, material, [source])


def buildSquare(sigmaT=1.0, sigmaS=0.0, strength=1.0, **newSettings):
    """
    One-group 20 cm square: 2x2 coarse regions of 10 cm split into 10x10 fine cells.

    Uses a two-angle-per-octant product quadrature and a uniform source.
    """
    settings = dict(
        dimension=2,
        quad_type="chebyshevlegendre",
        quad_number_polar_octant=1,
        quad_number_azimuth_octant=2,
    )
    settings.update(newSettings)
    cs = buildSettings(**settings)
    square = mesh.Mesh2D.fromCoarseMesh(
        [[10, 10], [10, 10]], [[0.0, 10.0, 20.0], [0.0, 10.0, 20.0]], [0, 0, 0, 0]
    )
    material = buildOneGroupMaterial(sigmaT, sigmaS)
    source = ConstantSource(1, square, strength)
    return TransportProblem(cs, square, material, [source])
