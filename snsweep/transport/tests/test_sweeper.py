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

"""Tests for the sweepers and cell equations."""
import math
import unittest

import numpy as np

from snsweep.angle import quadratureFactory
from snsweep.geometry import mesh
from snsweep.geometry.mesh import LEFT, RIGHT
from snsweep.sources.externalSource import ConstantSource
from snsweep.tests import (
    TransportProblem,
    buildOneGroupMaterial,
    buildSettings,
    buildSlab,
    buildSquare,
)
from snsweep.transport import equations
from snsweep.transport.sweeper import Sweeper1D, Sweeper2D, buildSweeper
from snsweep.utils.customExceptions import InvalidConfiguration


def _sweepOnce(problem, g=0):
    problem.sweepSource.buildFixed(g)
    problem.sweeper.setupGroup(g)
    return problem.sweeper.sweep(np.zeros(problem.mesh.numberCells()))


def _buildCube(**newSettings):
    settings = dict(dimension=3, quad_type="levelsymmetric", quad_order=2)
    settings.update(newSettings)
    cs = buildSettings(**settings)
    cube = mesh.Mesh3D.fromFineMesh(
        [np.arange(3.0), np.arange(3.0), np.arange(3.0)], np.zeros(8, dtype=int)
    )
    material = buildOneGroupMaterial(1.0)
    return TransportProblem(cs, cube, material, [ConstantSource(1, cube, 1.0)])


class TestSlabSweeps(unittest.TestCase):
    def test_attenuatedSource(self):
        """Exiting flux of a source-only slab is q / sigma (1 - exp(-sigma L / mu))."""
        p = buildSlab(
            numberCells=10,
            length=5.0,
            sigmaT=1.0,
            strength=2.0,
            equation="sc",
            quad_order=4,
        )
        phi = _sweepOnce(p)

        # angular source is the scalar source over the 1D angular norm of 2
        q = 1.0
        for a, mu in enumerate(p.quadrature.mus):
            expected = q * (1.0 - math.exp(-5.0 / mu))
            self.assertAlmostEqual(p.boundary[RIGHT, 0, a, 0], expected, places=10)
            self.assertAlmostEqual(p.boundary[LEFT, 1, a, 0], expected, places=10)
        assert np.allclose(phi, phi[::-1])
        self.assertEqual(p.sweeper.numberSweeps, 1)

    def test_fixedInflowAttenuation(self):
        p = buildSlab(
            numberCells=8,
            length=4.0,
            sigmaT=0.5,
            strength=0.0,
            equation="sc",
            quad_order=4,
            bc_left="fixed",
            bc_fixed_flux={"left": [1.0]},
        )
        p.boundary.set(0)
        _sweepOnce(p)
        for a, mu in enumerate(p.quadrature.mus):
            self.assertAlmostEqual(
                p.boundary[RIGHT, 0, a, 0], math.exp(-2.0 / mu), places=10
            )
            # nothing comes back through the vacuum right side
            self.assertEqual(p.boundary[RIGHT, 1, a, 0], 0.0)

    def test_stepDifferenceFirstCell(self):
        p = buildSlab(
            numberCells=4,
            length=2.0,
            sigmaT=1.0,
            strength=2.0,
            equation="sd",
            store_angular_flux=True,
        )
        _sweepOnce(p)
        mu = p.quadrature.mus[0]
        cx = mu / 0.5
        self.assertAlmostEqual(p.state.psi(0, 0, 0)[0], 1.0 / (1.0 + cx))
        self.assertAlmostEqual(p.state.psi(0, 1, 0)[3], 1.0 / (1.0 + cx))

    def test_reflectiveSlabReachesInfiniteMedium(self):
        """With all leakage reflected back, the flux converges to Q / sigma_a."""
        p = buildSlab(
            numberCells=10,
            length=2.0,
            sigmaT=1.0,
            sigmaS=0.5,
            strength=1.0,
            bc_left="reflect",
            bc_right="reflect",
        )
        p.sweepSource.buildFixed(0)
        p.sweeper.setupGroup(0)
        phi = np.zeros(10)
        newPhi = np.zeros(10)
        for _ in range(200):
            p.sweepSource.buildWithinGroupScatter(0, phi)
            p.sweeper.sweep(newPhi)
            p.boundary.update(0)
            phi[:] = newPhi
        assert np.allclose(phi, 2.0, rtol=1e-6)

    def test_adjointMatchesForwardForSymmetricSlab(self):
        forward = _sweepOnce(buildSlab(numberCells=6, quad_order=4))
        adjointProblem = buildSlab(numberCells=6, quad_order=4, adjoint=True)
        adjoint = _sweepOnce(adjointProblem)
        assert np.allclose(forward, adjoint)
        # in adjoint mode octant 0 enters through RIGHT
        self.assertGreater(adjointProblem.boundary[LEFT, 0, 0, 0], 0.0)
        self.assertEqual(adjointProblem.boundary[RIGHT, 0, 0, 0], 0.0)


class TestSquareSweep(unittest.TestCase):
    """2x2 coarse regions of 10x10 fine cells, vacuum all around, uniform source."""

    def setUp(self):
        self.p = buildSquare(store_angular_flux=True)
        self.phi = _sweepOnce(self.p).reshape(20, 20)

    def test_firstCornerCellsByHand(self):
        q = self.p.quadrature
        s = 1.0 / (4.0 * math.pi)
        for a in range(q.numberAnglesOctant):
            cx = 2.0 * q.mus[a]
            cy = 2.0 * q.etas[a]
            psi0 = s / (1.0 + cx + cy)
            self.assertAlmostEqual(self.p.state.psi(0, 0, a)[0], psi0, places=14)
            # the next cell along x sees the diamond-difference outflow 2 psi0
            psi1 = (s + cx * 2.0 * psi0) / (1.0 + cx + cy)
            self.assertAlmostEqual(self.p.state.psi(0, 0, a)[1], psi1, places=14)

    def test_symmetry(self):
        f = self.phi
        assert np.allclose(f, f[::-1, :])
        assert np.allclose(f, f[:, ::-1])
        assert np.allclose(f, f.T)

    def test_peakedAtCenter(self):
        f = self.phi
        self.assertAlmostEqual(f.min(), f[0, 0])
        self.assertGreater(f[9, 9], f[9, 0])
        self.assertGreater(f[9, 0], f[0, 0])

    def test_decreasesAwayFromCenter(self):
        f = _sweepOnce(buildSquare(sigmaT=0.1)).reshape(20, 20)
        row = f[9]
        self.assertTrue(np.all(np.diff(row[10:]) < 0.0))
        self.assertTrue(np.all(np.diff(row[:10]) > 0.0))


class TestCubeSweep(unittest.TestCase):
    def test_vacuumCubeIsSymmetric(self):
        p = _buildCube(store_angular_flux=True)
        f = _sweepOnce(p).reshape(2, 2, 2)
        assert np.allclose(f, f[::-1, :, :])
        assert np.allclose(f, f[:, ::-1, :])
        assert np.allclose(f, f[:, :, ::-1])
        # first cell of octant 0 sees vacuum on three faces
        q = p.quadrature
        s = 1.0 / (4.0 * math.pi)
        psi0 = s / (1.0 + 2.0 * (q.mus[0] + q.etas[0] + q.xis[0]))
        self.assertAlmostEqual(p.state.psi(0, 0, 0)[0], psi0, places=14)

    def test_reflectiveCubeReachesInfiniteMedium(self):
        sides = ("left", "right", "bottom", "top", "south", "north")
        p = _buildCube(**{f"bc_{side}": "reflect" for side in sides})
        p.sweepSource.buildFixed(0)
        p.sweeper.setupGroup(0)
        phi = np.zeros(8)
        for _ in range(50):
            p.sweeper.sweep(phi)
            p.boundary.update(0)
        assert np.allclose(phi, 1.0, rtol=1e-8)


class TestSweeperConstruction(unittest.TestCase):
    def setUp(self):
        self.p = buildSlab(numberCells=4)

    def test_buildSweeperPicksDimension(self):
        self.assertIsInstance(self.p.sweeper, Sweeper1D)
        self.assertIsInstance(buildSquare().sweeper, Sweeper2D)
        self.assertIsInstance(self.p.sweeper.equation, equations.Equation1DDiamond)

    def test_dimensionMismatch(self):
        p = self.p
        quad2D = quadratureFactory.buildQuadrature("levelsymmetric", 2, order=2)
        with self.assertRaises(InvalidConfiguration):
            buildSweeper(
                p.cs, p.mesh, p.material, quad2D, p.state, p.boundary, p.sweepSource
            )
        with self.assertRaises(InvalidConfiguration):
            Sweeper2D(
                p.cs,
                p.mesh,
                p.material,
                p.quadrature,
                p.state,
                p.boundary,
                p.sweepSource,
            )

    def test_stepCharacteristicIs1DOnly(self):
        with self.assertRaises(InvalidConfiguration):
            buildSquare(equation="sc")

    def test_updatePsiNeedsStorage(self):
        with self.assertRaises(InvalidConfiguration):
            self.p.sweeper.setUpdatePsi(True)
        self.p.sweeper.setUpdatePsi(False)

    def test_sweepNeedsGroup(self):
        with self.assertRaises(InvalidConfiguration):
            self.p.sweeper.sweep(np.zeros(4))

    def test_boundaryUpdatesCanBeDisabled(self):
        p = buildSlab(numberCells=4, bc_left="reflect", bc_right="reflect")
        p.sweeper.setUpdateBoundary(False)
        with p.boundary.frozen():
            _sweepOnce(p)
        # outgoing flux was written but never reflected
        self.assertGreater(p.boundary[RIGHT, 0, 0, 0], 0.0)
        self.assertEqual(p.boundary[RIGHT, 1, 0, 0], 0.0)

    def test_frozenBoundaryRejectsSingleAngleUpdates(self):
        p = buildSlab(numberCells=4, bc_left="reflect")
        with p.boundary.frozen():
            with self.assertRaises(InvalidConfiguration):
                _sweepOnce(p)


class TestEquations(unittest.TestCase):
    def test_thinCellLimit(self):
        cs = buildSettings(equation="sc")
        slab = mesh.Mesh1D.fromFineMesh([[0.0, 1.0]], [0])
        material = buildOneGroupMaterial(0.0)
        material.finalize()
        quad = quadratureFactory.fromSettings(cs)
        eq = equations.buildEquation("sc", slab, material, quad)
        eq.setupGroup(0)
        eq.setupAngle(0)
        mu = quad.mus[0]
        psi, psiOut = eq.solve(0, 0, 1.0, 0.5)
        self.assertAlmostEqual(psiOut, 0.5 + 1.0 / mu)
        self.assertAlmostEqual(psi, 0.5 * (0.5 + psiOut))

    def test_unknownEquation(self):
        sq = buildSquare()
        with self.assertRaises(InvalidConfiguration):
            equations.buildEquation("sc", sq.mesh, sq.material, sq.quadrature)
        with self.assertRaises(InvalidConfiguration):
            equations.buildEquation("xx", sq.mesh, sq.material, sq.quadrature)
