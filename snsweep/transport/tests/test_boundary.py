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

"""Tests for the boundary flux store and its conditions."""
import unittest

import numpy as np

from snsweep.angle import quadrature as quadratureModule
from snsweep.angle import quadratureFactory
from snsweep.geometry import mesh
from snsweep.geometry.mesh import BOTTOM, LEFT, NORTH, RIGHT, SOUTH, TOP
from snsweep.tests import buildSettings
from snsweep.transport import boundaryConditions
from snsweep.transport.boundary import INCIDENT, OUTGOING, Boundary
from snsweep.utils.customExceptions import (
    BoundaryFrozenError,
    InvalidConfiguration,
    OutOfRange,
)


def _buildBoundary(dimension, adjoint=False, **newSettings):
    """Small boundary: 3 cells in x, 2 in y, 4 in z (as far as the dimension goes)."""
    edges = [np.arange(4.0), np.arange(3.0), np.arange(5.0)][:dimension]
    meshClass = {1: mesh.Mesh1D, 2: mesh.Mesh2D, 3: mesh.Mesh3D}[dimension]
    numberCells = int(np.prod([len(e) - 1 for e in edges]))
    problemMesh = meshClass.fromFineMesh(edges, np.zeros(numberCells, dtype=int))
    if dimension == 1:
        settings = dict(quad_type="gausslegendre", quad_order=4)
    else:
        settings = dict(quad_type="levelsymmetric", quad_order=4)
    settings.update(dimension=dimension, adjoint=adjoint)
    settings.update(newSettings)
    cs = buildSettings(**settings)
    quad = quadratureFactory.fromSettings(cs)
    return Boundary(cs, problemMesh, quad)


class TestReflectivePairs(unittest.TestCase):
    def test_pairsCoverIncidentAndOutgoing(self):
        """Every outgoing octant pairs with exactly one incident octant on each side."""
        for dim, sides in boundaryConditions.REFLECTIVE_PAIRS.items():
            self.assertEqual(len(sides), 2 * dim)
            for side, pairs in enumerate(sides):
                incident = [inc for inc, _out in pairs]
                outgoing = [out for _inc, out in pairs]
                self.assertEqual(
                    sorted(incident),
                    sorted(quadratureModule.INCIDENT_OCTANTS[dim][side]),
                )
                self.assertEqual(
                    sorted(outgoing),
                    sorted(quadratureModule.OUTGOING_OCTANTS[dim][side]),
                )
                self.assertEqual(len(set(outgoing)), len(outgoing))

    def test_pairsDifferInNormalSignOnly(self):
        sign = quadratureModule.OCTANT_SIGN
        for dim, sides in boundaryConditions.REFLECTIVE_PAIRS.items():
            for side, pairs in enumerate(sides):
                normal = side // 2
                for inc, out in pairs:
                    for axis in range(dim):
                        if axis == normal:
                            self.assertEqual(sign[inc, axis], -sign[out, axis])
                        else:
                            self.assertEqual(sign[inc, axis], sign[out, axis])

    def test_incidentOctantsPointIntoTheMesh(self):
        sign = quadratureModule.OCTANT_SIGN
        for dim, sides in quadratureModule.INCIDENT_OCTANTS.items():
            for side, octants in enumerate(sides):
                inward = 1.0 if side % 2 == 0 else -1.0
                for o in octants:
                    self.assertEqual(sign[o, side // 2], inward)


class TestBoundaryStorage(unittest.TestCase):
    def test_faceShapes1D(self):
        b = _buildBoundary(1)
        self.assertEqual(b.numberSides, 2)
        self.assertEqual(np.shape(b[LEFT, 0, 0, 0]), ())
        self.assertEqual(b.boundaryFluxSize(LEFT), 2)

    def test_faceShapes2D(self):
        b = _buildBoundary(2)
        self.assertEqual(b[LEFT, 0, 0, 0].shape, (2,))
        self.assertEqual(b[BOTTOM, 0, 0, 0].shape, (3,))
        self.assertEqual(b.sideFlux(TOP).shape, (1, 4, 3, 3))
        # 2 octants x 3 angles x 2 face points
        self.assertEqual(b.boundaryFluxSize(RIGHT), 12)

    def test_faceShapes3D(self):
        b = _buildBoundary(3)
        self.assertEqual(b[LEFT, 0, 0, 0].shape, (2, 4))
        self.assertEqual(b[BOTTOM, 0, 0, 0].shape, (3, 4))
        self.assertEqual(b[NORTH, 0, 0, 0].shape, (3, 2))
        self.assertEqual(b.boundaryFluxSize(SOUTH), 4 * 3 * 6)

    def test_accessAndValue(self):
        b = _buildBoundary(2)
        b[LEFT, 3, 1, 0] = [1.0, 2.0]
        assert np.allclose(b.value(LEFT, 3, 1, 0), [1.0, 2.0])
        assert np.allclose(b[LEFT, 3, 0, 0], 0.0)

    def test_outOfRange(self):
        b = _buildBoundary(2)
        with self.assertRaises(OutOfRange):
            b[SOUTH, 0, 0, 0]
        with self.assertRaises(OutOfRange):
            b[LEFT, 4, 0, 0]
        with self.assertRaises(OutOfRange):
            b[LEFT, 0, 3, 0]
        with self.assertRaises(OutOfRange):
            b[LEFT, 0, 0, 1] = 1.0
        with self.assertRaises(OutOfRange):
            b.boundaryFluxSize(4)

    def test_clear(self):
        b = _buildBoundary(2, bc_left="reflect")
        for side in range(b.numberSides):
            b.sideFlux(side)[:] = 1.0
        b.clear(0)
        for side in range(b.numberSides):
            assert not b.sideFlux(side).any()

    def test_groupOutOfRange(self):
        b = _buildBoundary(2, bc_left="reflect")
        b.sideFlux(LEFT)[:] = 1.0
        for g in (-1, 1, 3):
            with self.assertRaises(OutOfRange):
                b.clear(g)
            with self.assertRaises(OutOfRange):
                b.set(g)
            with self.assertRaises(OutOfRange):
                b.update(g)
            with self.assertRaises(OutOfRange):
                b.update(g, 0, 0)
            with self.assertRaises(OutOfRange):
                b.getIncidentVector(g)
        # nothing was wrapped onto the last group
        assert np.all(b.sideFlux(LEFT) == 1.0)


class TestOrderedAccess(unittest.TestCase):
    def setUp(self):
        self.b = _buildBoundary(2)
        self.q = self.b.quadrature

    def test_orderedAngle(self):
        # incident octants on LEFT are (0, 3), outgoing on RIGHT are (0, 3) too
        self.assertEqual(self.b.orderedAngle(LEFT, 0, INCIDENT), self.q.index(0, 0))
        self.assertEqual(self.b.orderedAngle(LEFT, 3, INCIDENT), self.q.index(3, 0))
        self.assertEqual(self.b.orderedAngle(RIGHT, 4, OUTGOING), self.q.index(3, 1))
        self.assertEqual(self.b.orderedAngle(BOTTOM, 2, INCIDENT), self.q.index(1, 2))
        with self.assertRaises(OutOfRange):
            self.b.orderedAngle(LEFT, 6, INCIDENT)

    def test_incidentAndOutgoing(self):
        self.b.setIncident(LEFT, 4, 0, [2.0, 3.0])
        assert np.allclose(self.b[LEFT, 3, 1, 0], [2.0, 3.0])
        assert np.allclose(self.b.incident(LEFT, 4, 0), [2.0, 3.0])

        # outgoing octants on TOP are (1, 0), so ordered angle 0 is octant 1
        self.b.setOutgoing(TOP, 0, 0, 5.0)
        assert np.allclose(self.b[TOP, 1, 0, 0], 5.0)
        assert not self.b[TOP, 0, 0, 0].any()
        assert np.allclose(self.b.outgoing(TOP, 0, 0), 5.0)


class TestBoundaryConditions(unittest.TestCase):
    def test_conditionsFromSettings(self):
        b = _buildBoundary(2, bc_left="reflect", bc_top="reflect")
        self.assertIsInstance(b.condition(LEFT), boundaryConditions.Reflective)
        self.assertIsInstance(b.condition(RIGHT), boundaryConditions.Vacuum)
        self.assertTrue(b.hasReflective)
        self.assertTrue(b.isReflective(TOP))
        self.assertFalse(b.isReflective(BOTTOM))
        self.assertFalse(_buildBoundary(2).hasReflective)

    def test_reflectiveUpdateIsIdempotent(self):
        b = _buildBoundary(2, bc_left="reflect", bc_bottom="reflect")
        rng = np.random.default_rng(7)
        for side in (LEFT, BOTTOM):
            for o in b.outgoingOctants(side):
                b.sideFlux(side)[0, o] = rng.random(b.sideFlux(side)[0, o].shape)

        b.update(0)
        first = [b.sideFlux(side).copy() for side in range(b.numberSides)]
        b.update(0)
        for side in range(b.numberSides):
            assert np.array_equal(first[side], b.sideFlux(side))

        for inc, out in boundaryConditions.REFLECTIVE_PAIRS[2][LEFT]:
            assert np.array_equal(b.sideFlux(LEFT)[0, inc], b.sideFlux(LEFT)[0, out])
        # vacuum sides are untouched
        assert not b.sideFlux(RIGHT).any()

    def test_singleAngleUpdate(self):
        b = _buildBoundary(1, bc_left="reflect", bc_right="reflect")
        b[RIGHT, 0, 1, 0] = 3.0
        b[LEFT, 1, 0, 0] = 4.0

        b.update(0, 0, 1)
        self.assertEqual(b[RIGHT, 1, 1, 0], 3.0)
        self.assertEqual(b[RIGHT, 1, 0, 0], 0.0)
        # octant 0 is incident on LEFT, so LEFT is left alone
        self.assertEqual(b[LEFT, 0, 0, 0], 0.0)

        b.update(0, 1, 0)
        self.assertEqual(b[LEFT, 0, 0, 0], 4.0)

    def test_frozen(self):
        b = _buildBoundary(1, bc_left="reflect")
        self.assertFalse(b.isFrozen)
        with b.frozen():
            self.assertTrue(b.isFrozen)
            b.update(0)
            with self.assertRaises(BoundaryFrozenError):
                b.update(0, 1, 0)
        self.assertFalse(b.isFrozen)
        b.update(0, 1, 0)

    def test_adjointSwapsRoles(self):
        b = _buildBoundary(1, adjoint=True, bc_left="reflect")
        self.assertEqual(tuple(b.incidentOctants(LEFT)), (1,))
        self.assertEqual(tuple(b.outgoingOctants(LEFT)), (0,))
        self.assertEqual(b.condition(LEFT).pairs, ((1, 0),))

        b[LEFT, 0, 0, 0] = 2.0
        b.update(0)
        self.assertEqual(b[LEFT, 1, 0, 0], 2.0)

    def test_adjointSwitchedAfterBuild(self):
        b = _buildBoundary(1, bc_left="reflect")
        self.assertEqual(b.condition(LEFT).pairs, ((0, 1),))
        b.quadrature.setAdjoint(True)
        self.assertEqual(tuple(b.incidentOctants(LEFT)), (1,))
        self.assertEqual(b.condition(LEFT).pairs, ((1, 0),))

        b[LEFT, 0, 0, 0] = 7.0
        b.update(0)
        self.assertEqual(b[LEFT, 0, 0, 0], 7.0)
        self.assertEqual(b[LEFT, 1, 0, 0], 7.0)

        b[LEFT, 0, 1, 0] = 4.0
        b.update(0, 0, 1)
        self.assertEqual(b[LEFT, 1, 1, 0], 4.0)
        # octant 1 is incident in adjoint mode, so its update does nothing
        b[LEFT, 1, 0, 0] = 9.0
        b.update(0, 1, 0)
        self.assertEqual(b[LEFT, 0, 0, 0], 7.0)

        b.quadrature.setAdjoint(False)
        b[LEFT, 1, 0, 0] = 5.0
        b.update(0)
        self.assertEqual(b[LEFT, 0, 0, 0], 5.0)

    def test_fixed(self):
        b = _buildBoundary(
            2,
            number_groups=2,
            bc_left="fixed",
            bc_fixed_flux={"left": [2.0, 0.5]},
        )
        b.set(1)
        for o in b.incidentOctants(LEFT):
            assert np.allclose(b.sideFlux(LEFT)[1, o], 0.5)
        for o in b.outgoingOctants(LEFT):
            assert not b.sideFlux(LEFT)[1, o].any()
        assert not b.sideFlux(LEFT)[0].any()

    def test_fixedNeedsFlux(self):
        with self.assertRaises(InvalidConfiguration):
            _buildBoundary(1, bc_right="fixed")
        with self.assertRaises(InvalidConfiguration):
            _buildBoundary(
                1, number_groups=2, bc_right="fixed", bc_fixed_flux={"right": [1.0]}
            )


class TestIncidentVector(unittest.TestCase):
    def test_roundTrip(self):
        b = _buildBoundary(2, bc_left="reflect", bc_bottom="reflect")
        # LEFT: 2 octants x 3 angles x 2 points, BOTTOM: 2 x 3 x 3
        self.assertEqual(b.reflectiveIncidentSize, 30)

        b.setIncidentVector(0, np.arange(30.0))
        assert np.allclose(b.getIncidentVector(0), np.arange(30.0))
        assert np.allclose(b[LEFT, 0, 0, 0], [0.0, 1.0])
        assert np.allclose(b[BOTTOM, 1, 0, 0], [12.0, 13.0, 14.0])
        # outgoing slots are not part of the vector
        assert not b.sideFlux(LEFT)[0, 1].any()

    def test_sizeMismatch(self):
        b = _buildBoundary(1, bc_left="reflect")
        self.assertEqual(b.reflectiveIncidentSize, 2)
        with self.assertRaises(OutOfRange):
            b.setIncidentVector(0, np.zeros(3))

    def test_noReflectiveSides(self):
        b = _buildBoundary(1)
        self.assertEqual(b.getIncidentVector(0).size, 0)
