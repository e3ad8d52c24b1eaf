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
Within-group solvers.

With the in-scatter and fixed sources of group :math:`g` held fixed, the within-group
problem is

.. math::

    (\mathbf{I} - \mathbf{D}\mathbf{L}^{-1}\mathbf{M}\mathbf{S})\phi
        = \mathbf{D}\mathbf{L}^{-1} q \, ,

where :math:`\mathbf{L}^{-1}` is a sweep, :math:`\mathbf{M}` the moment-to-discrete
operator, :math:`\mathbf{D}` the quadrature integration and :math:`\mathbf{S}` the
self-scatter. :py:class:`SourceIteration` solves it by Richardson iteration, one sweep
per iteration. :py:class:`WithinGroupGMRES` hands the operator to a Krylov solver,
with the incident flux on reflective sides carried as extra unknowns.

Both expect the caller to have built the fixed source of the group and applied
``boundary.set(g)``.
"""
import numpy as np
from scipy.sparse.linalg import LinearOperator, gmres

from snsweep import runLog
from snsweep.settings import sweepSettings
from snsweep.utils import mathematics


class WithinGroupSolver:
    """
    Base within-group solver.

    Parameters
    ----------
    cs : Settings
        Supplies the inner tolerance and iteration limit.
    state, mesh, material, quadrature, boundary, sweepSource, sweeper
        The pieces of the transport problem being solved.
    """

    def __init__(
        self, cs, state, mesh, material, quadrature, boundary, sweepSource, sweeper
    ):
        self.state = state
        self.mesh = mesh
        self.material = material
        self.quadrature = quadrature
        self.boundary = boundary
        self.sweepSource = sweepSource
        self.sweeper = sweeper
        self.tolerance = cs[sweepSettings.CONF_INNER_TOLERANCE]
        self.maxIterations = cs[sweepSettings.CONF_INNER_MAX_ITERS]
        self.numberIterations = 0
        self.converged = False

    def __repr__(self):
        return "<{} tol:{} max:{}>".format(
            self.__class__.__name__, self.tolerance, self.maxIterations
        )

    def solve(self, g):
        """Solve group ``g`` and store the flux in the state."""
        raise NotImplementedError


class SourceIteration(WithinGroupSolver):
    """Source iteration with single-angle boundary updates during each sweep."""

    def __init__(
        self, cs, state, mesh, material, quadrature, boundary, sweepSource, sweeper
    ):
        WithinGroupSolver.__init__(
            self, cs, state, mesh, material, quadrature, boundary, sweepSource, sweeper
        )
        self.sweeper.setUpdateBoundary(True)

    def solve(self, g):
        self.sweeper.setupGroup(g)
        phi = self.state.phi(g).copy()
        newPhi = np.empty_like(phi)

        self.converged = False
        error = 0.0
        for iteration in range(1, self.maxIterations + 1):
            self.sweepSource.buildWithinGroupScatter(g, phi)
            self.sweeper.sweep(newPhi)
            self.boundary.update(g)
            error = mathematics.maxAbsDiff(newPhi, phi)
            phi[:] = newPhi
            runLog.debug(
                f"    SI group {g:3d} iteration {iteration:5d} error {error:.6e}"
            )
            if error < self.tolerance:
                self.converged = True
                break
        self.numberIterations = iteration

        if self.converged:
            runLog.extra(
                f"  SI group {g} converged in {iteration} iterations, error {error:.3e}"
            )
        else:
            runLog.warning(
                "SI group {} did not converge in {} iterations, error {:.3e}".format(
                    g, self.maxIterations, error
                )
            )
        self.state.setPhi(g, phi)
        return phi


class _IterationCounter:
    """GMRES callback counting iterations and logging the residual."""

    def __init__(self, g):
        self.g = g
        self.numberIterations = 0

    def __call__(self, residual):
        self.numberIterations += 1
        runLog.debug(
            f"    GMRES group {self.g:3d} iteration {self.numberIterations:5d} "
            f"residual {residual:.6e}"
        )


class WithinGroupGMRES(WithinGroupSolver):
    """
    Within-group solve with GMRES.

    The Krylov vector is the scalar flux followed by the incident flux of every
    reflective side (see
    :py:meth:`~snsweep.transport.boundary.Boundary.getIncidentVector`). Applying the
    operator is a sweep of the self-scatter source alone, with the boundary frozen so
    nothing but the Krylov vector feeds the incident flux.

    Parameters
    ----------
    preconditioner : LinearOperator, optional
        Passed to GMRES as ``M``.
    """

    #: GMRES restart length
    restart = 20

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
        preconditioner=None,
    ):
        WithinGroupSolver.__init__(
            self, cs, state, mesh, material, quadrature, boundary, sweepSource, sweeper
        )
        self.preconditioner = preconditioner
        self.sweeper.setUpdateBoundary(False)
        self._numberMoments = mesh.numberCells()

    @property
    def size(self):
        """Length of the Krylov vector."""
        return self._numberMoments + self.boundary.reflectiveIncidentSize

    def _split(self, x):
        return x[: self._numberMoments], x[self._numberMoments :]

    def _apply(self, g, x):
        """Return ``(I - T) x`` for the within-group transport operator ``T``."""
        x = np.asarray(x, dtype=float).ravel()
        phi, incident = self._split(x)
        self.boundary.clear(g)
        self.boundary.setIncidentVector(g, incident)
        self.sweepSource.buildWithinGroupScatter(g, phi)
        newPhi = np.empty(self._numberMoments)
        with self.boundary.frozen(), self.sweepSource.scatterOnly():
            self.sweeper.sweep(newPhi)
        self.boundary.update(g)
        return x - np.concatenate((newPhi, self.boundary.getIncidentVector(g)))

    def _buildRightHandSide(self, g):
        """One sweep of the fixed source with no reflected incident flux."""
        self.boundary.clear(g)
        self.boundary.set(g)
        self.sweepSource.buildWithinGroupScatter(g, np.zeros(self._numberMoments))
        phi = np.empty(self._numberMoments)
        with self.boundary.frozen():
            self.sweeper.sweep(phi)
        self.boundary.update(g)
        return np.concatenate((phi, self.boundary.getIncidentVector(g)))

    def solve(self, g):
        self.sweeper.setupGroup(g)
        x0 = np.concatenate((self.state.phi(g), self.boundary.getIncidentVector(g)))
        b = self._buildRightHandSide(g)

        operator = LinearOperator(
            (self.size, self.size), matvec=lambda x: self._apply(g, x), dtype=float
        )
        counter = _IterationCounter(g)
        x, info = gmres(
            operator,
            b,
            x0=x0,
            rtol=self.tolerance,
            atol=0.0,
            restart=self.restart,
            maxiter=self.maxIterations,
            M=self.preconditioner,
            callback=counter,
            callback_type="pr_norm",
        )
        self.numberIterations = counter.numberIterations
        self.converged = info == 0
        if self.converged:
            runLog.extra(
                f"  GMRES group {g} converged in {self.numberIterations} iterations"
            )
        else:
            runLog.warning(
                "GMRES group {} did not converge in {} iterations".format(
                    g, self.numberIterations
                )
            )

        # one last sweep with the full source leaves the outgoing boundary flux and
        # the angular flux consistent with the solution
        phi, incident = self._split(x)
        self.boundary.clear(g)
        self.boundary.set(g)
        self.boundary.setIncidentVector(g, incident)
        self.sweepSource.buildWithinGroupScatter(g, phi)
        with self.boundary.frozen():
            self.sweeper.sweep(phi)
        self.boundary.update(g)
        self.state.setPhi(g, phi)
        return phi


WITHIN_GROUP_SOLVERS = {"SI": SourceIteration, "GMRES": WithinGroupGMRES}


def buildWithinGroupSolver(
    cs, state, mesh, material, quadrature, boundary, sweepSource, sweeper
):
    """Build the within-group solver named by the ``inner_solver`` setting."""
    solverClass = WITHIN_GROUP_SOLVERS[cs[sweepSettings.CONF_INNER_SOLVER]]
    solver = solverClass(
        cs, state, mesh, material, quadrature, boundary, sweepSource, sweeper
    )
    runLog.debug(f"Built {solver}")
    return solver
