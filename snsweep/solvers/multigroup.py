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
Multigroup Gauss-Seidel.

Groups above the upscatter cutoff only receive scatter from higher energies, so a single
pass in group order solves them exactly. Groups at and below the cutoff are coupled by
upscatter and are swept repeatedly until the flux stops changing. In a multiplying fixed
source problem every group is coupled through fission and the whole group range is
iterated, with the fission density refreshed before each pass.
"""
from snsweep import runLog
from snsweep.settings import sweepSettings
from snsweep.solvers.withinGroup import buildWithinGroupSolver
from snsweep.utils import mathematics


class GaussSeidelMG:
    """
    Gauss-Seidel over energy groups with a within-group solver for each group.

    Parameters
    ----------
    cs : Settings
        Supplies the outer tolerance and iteration limit and selects the within-group
        solver.
    state, mesh, material, quadrature, boundary, sweepSource, sweeper
        The pieces of the transport problem being solved. The material must be
        finalized.
    fissionSource : FissionSource, optional
        Makes the problem multiplying; it is registered with the sweep source.
    """

    def __init__(
        self,
        cs,
        state,
        mesh,
        material,
        quadrature,
        boundary,
        sweepSource,
        sweeper,
        fissionSource=None,
    ):
        self.state = state
        self.material = material
        self.boundary = boundary
        self.sweepSource = sweepSource
        self.fissionSource = fissionSource
        self.tolerance = cs[sweepSettings.CONF_OUTER_TOLERANCE]
        self.maxIterations = cs[sweepSettings.CONF_OUTER_MAX_ITERS]
        self.withinGroup = buildWithinGroupSolver(
            cs, state, mesh, material, quadrature, boundary, sweepSource, sweeper
        )
        if fissionSource is not None:
            sweepSource.setFissionSource(fissionSource)
        self.numberIterations = 0
        self.converged = False

    @property
    def cutoff(self):
        """First group of the iterated block."""
        if self.fissionSource is not None:
            return 0
        return self.material.upscatterCutoff

    def _solveGroup(self, g):
        self.sweepSource.buildFixedWithScatter(g)
        self.boundary.set(g)
        self.withinGroup.solve(g)

    def solve(self):
        """Solve every group and leave the fluxes in the state."""
        numberGroups = self.material.numberGroups
        cutoff = self.cutoff
        runLog.info(
            "Solving {} groups with {} ({} downscatter-only)".format(
                numberGroups, self.withinGroup.__class__.__name__, cutoff
            )
        )

        for g in range(cutoff):
            self._solveGroup(g)

        self.numberIterations = 0
        self.converged = True
        if cutoff == numberGroups:
            return self.state.allPhi

        self.converged = False
        error = 0.0
        for iteration in range(1, self.maxIterations + 1):
            if self.fissionSource is not None:
                self.fissionSource.update()
            previous = [self.state.phi(g).copy() for g in range(cutoff, numberGroups)]
            for g in range(cutoff, numberGroups):
                self._solveGroup(g)
            error = max(
                mathematics.maxAbsDiff(self.state.phi(g), old)
                for g, old in zip(range(cutoff, numberGroups), previous)
            )
            runLog.extra(f"  Outer iteration {iteration:4d} error {error:.6e}")
            if error < self.tolerance:
                self.converged = True
                break
        self.numberIterations = iteration

        if self.converged:
            runLog.info(f"Outer iterations converged in {iteration}, error {error:.3e}")
        else:
            runLog.warning(
                "Outer iterations did not converge in {}, error {:.3e}".format(
                    self.maxIterations, error
                )
            )
        return self.state.allPhi
