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

"""Preconditioners for the Krylov solvers."""
import numpy as np
import scipy.sparse
from scipy.sparse.linalg import LinearOperator

from snsweep.utils.customExceptions import InvalidConfiguration


class JacobiPreconditioner(LinearOperator):
    """
    Inverse of the diagonal of a matrix.

    A zero on the diagonal is replaced by 1.0 so the preconditioner is always defined.

    Parameters
    ----------
    matrix : scipy.sparse matrix or array-like
        Square matrix to precondition.
    """

    def __init__(self, matrix):
        matrix = scipy.sparse.csr_matrix(matrix)
        if matrix.shape[0] != matrix.shape[1]:
            raise InvalidConfiguration(
                f"Jacobi preconditioning needs a square matrix, got {matrix.shape}"
            )
        diagonal = matrix.diagonal()
        self.inverseDiagonal = np.ones_like(diagonal, dtype=float)
        nonzero = diagonal != 0.0
        self.inverseDiagonal[nonzero] = 1.0 / diagonal[nonzero]
        super().__init__(dtype=float, shape=matrix.shape)

    def _matvec(self, x):
        return self.inverseDiagonal * np.asarray(x).ravel()

    def _rmatvec(self, x):
        return self._matvec(x)
