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
Structured Cartesian meshes.

A mesh is a tensor product of fine-mesh cells along each axis. Cells are numbered with a
single cardinal index that runs fastest in x, then y, then z::

    index(i, j, k) = i + j * nx + k * nx * ny

Meshes are usually built from coarse regions, each split into a number of equal fine
cells, with an integer property (most importantly the material) assigned per coarse
region. Named fine-mesh maps of integer properties travel with the mesh; the
``MATERIAL`` map always exists.

Axes beyond the mesh dimension are given a single cell of unit width so that 1D and 2D
meshes can be indexed the same way as 3D ones.
"""
import numpy as np
from tabulate import tabulate

from snsweep import runLog
from snsweep.utils import mathematics
from snsweep.utils.customExceptions import InvalidConfiguration, OutOfRange

LEFT, RIGHT, BOTTOM, TOP, SOUTH, NORTH = range(6)
SIDE_LABELS = ("LEFT", "RIGHT", "BOTTOM", "TOP", "SOUTH", "NORTH")

MATERIAL = "MATERIAL"
COARSEMESH = "COARSEMESH"


def _expandCoarseWidths(fineMeshes, coarseEdges):
    """Return fine widths for one axis given fine counts per coarse region."""
    fineMeshes = np.asarray(fineMeshes, dtype=int)
    coarseEdges = np.asarray(coarseEdges, dtype=float)
    if len(coarseEdges) != len(fineMeshes) + 1:
        raise InvalidConfiguration(
            "Need one more coarse edge than coarse regions, got {} edges and {} regions".format(
                len(coarseEdges), len(fineMeshes)
            )
        )
    if np.any(fineMeshes <= 0):
        raise InvalidConfiguration(
            f"Fine mesh counts must be positive, got {fineMeshes.tolist()}"
        )
    coarseWidths = np.diff(coarseEdges)
    return np.repeat(coarseWidths / fineMeshes, fineMeshes)


class Mesh:
    """
    Abstract Cartesian mesh.

    Use the dimension-specific subclasses, or their ``fromCoarseMesh`` and
    ``fromFineMesh`` constructors.

    Parameters
    ----------
    fineEdges : list of array-like
        Fine-mesh edges, one sequence per axis, strictly increasing.
    materialMap : array-like
        Material index of every fine cell, in cardinal order.
    """

    DIMENSION = None

    def __init__(self, fineEdges, materialMap):
        if self.DIMENSION is None:
            raise InvalidConfiguration(
                "Mesh is abstract; use Mesh1D, Mesh2D or Mesh3D"
            )
        if len(fineEdges) != self.DIMENSION:
            raise InvalidConfiguration(
                "{} needs edges for {} axes, got {}".format(
                    self.__class__.__name__, self.DIMENSION, len(fineEdges)
                )
            )

        self._widths = []
        for axis, edges in enumerate(fineEdges):
            edges = np.asarray(edges, dtype=float)
            if len(edges) < 2 or not mathematics.isMonotonic(edges, "<"):
                raise InvalidConfiguration(
                    f"Mesh edges along axis {axis} must be strictly increasing: {edges}"
                )
            self._widths.append(np.diff(edges))
        while len(self._widths) < 3:
            self._widths.append(np.ones(1))

        self._numberCellsAxis = tuple(len(w) for w in self._widths)
        self._numberCells = int(np.prod(self._numberCellsAxis))
        self._meshMaps = {}
        self.addMeshMap(MATERIAL, materialMap)

    @classmethod
    def fromCoarseMesh(cls, fineMeshes, coarseEdges, coarseMaterialMap):
        """
        Build a mesh from coarse regions split into equal fine cells.

        Parameters
        ----------
        fineMeshes : list of array-like
            Per axis, the number of fine cells in each coarse region.
        coarseEdges : list of array-like
            Per axis, the coarse region edges.
        coarseMaterialMap : array-like
            Material index of every coarse region, in cardinal order.
        """
        if len(fineMeshes) != len(coarseEdges):
            raise InvalidConfiguration(
                "Fine mesh counts and coarse edges must cover the same axes"
            )
        fineEdges = []
        for counts, edges in zip(fineMeshes, coarseEdges):
            widths = _expandCoarseWidths(counts, edges)
            fineEdges.append(edges[0] + np.concatenate(([0.0], np.cumsum(widths))))

        # material map is filled in below, once the coarse-to-fine map exists
        numberFine = int(np.prod([int(np.sum(c)) for c in fineMeshes]))
        mesh = cls(fineEdges, np.zeros(numberFine, dtype=int))
        mesh._coarseCounts = [np.asarray(c, dtype=int) for c in fineMeshes]
        mesh.addMeshMap(COARSEMESH, mesh._coarseToFine())
        mesh.addCoarseMeshMap(MATERIAL, coarseMaterialMap)
        return mesh

    @classmethod
    def fromFineMesh(cls, fineEdges, materialMap):
        """Build a mesh directly from fine-mesh edges and a fine material map."""
        return cls(fineEdges, materialMap)

    def _coarseToFine(self):
        """Map every fine cell to the cardinal index of its coarse region."""
        axes = []
        for axis in range(3):
            if axis < self.DIMENSION:
                counts = self._coarseCounts[axis]
                axes.append(np.repeat(np.arange(len(counts)), counts))
            else:
                axes.append(np.zeros(1, dtype=int))
        ncx = len(self._coarseCounts[0])
        ncy = len(self._coarseCounts[1]) if self.DIMENSION > 1 else 1
        cx, cy, cz = axes
        coarse = cx[None, None, :] + ncx * cy[None, :, None] + ncx * ncy * cz[:, None, None]
        return coarse.ravel()

    @property
    def dimension(self):
        return self.DIMENSION

    @property
    def numberCellsX(self):
        return self._numberCellsAxis[0]

    @property
    def numberCellsY(self):
        return self._numberCellsAxis[1]

    @property
    def numberCellsZ(self):
        return self._numberCellsAxis[2]

    def numberCells(self, dim=None):
        """Return the total cell count, or the count along axis ``dim``."""
        if dim is None:
            return self._numberCells
        self._checkAxis(dim)
        return self._numberCellsAxis[dim]

    def _checkAxis(self, dim):
        if not 0 <= dim < self.DIMENSION:
            raise OutOfRange(
                f"Axis {dim} is out of range for a {self.DIMENSION}D mesh"
            )

    def width(self, dim, ijk):
        """Return the width of cell ``ijk`` along axis ``dim``."""
        self._checkAxis(dim)
        if not 0 <= ijk < self._numberCellsAxis[dim]:
            raise OutOfRange(f"Cell {ijk} is out of range along axis {dim}")
        return self._widths[dim][ijk]

    def widths(self, dim):
        """Return all cell widths along an axis, including the unit-width padding axes."""
        if not 0 <= dim < 3:
            raise OutOfRange(f"Axis {dim} is out of range")
        return self._widths[dim]

    def dx(self, i):
        return self.width(0, i)

    def dy(self, j):
        return self.width(1, j)

    def dz(self, k):
        return self.width(2, k)

    def index(self, i, j=0, k=0):
        """Return the cardinal index of cell ``(i, j, k)``."""
        nx, ny, nz = self._numberCellsAxis
        if not (0 <= i < nx and 0 <= j < ny and 0 <= k < nz):
            raise OutOfRange(
                f"Cell ({i}, {j}, {k}) is outside a {nx}x{ny}x{nz} mesh"
            )
        return i + j * nx + k * nx * ny

    def addCoarseMeshMap(self, key, coarseMap):
        """
        Add a map of coarse-region integer properties.

        Only meshes built with :py:meth:`fromCoarseMesh` know their coarse regions.
        """
        if not self.meshMapExists(COARSEMESH):
            raise InvalidConfiguration(
                f"Cannot add coarse mesh map `{key}` to a mesh built from fine edges"
            )
        coarseMap = np.asarray(coarseMap, dtype=int)
        numberCoarse = int(np.prod([len(c) for c in self._coarseCounts]))
        if coarseMap.size != numberCoarse:
            raise InvalidConfiguration(
                "Coarse mesh map `{}` has {} entries but there are {} coarse regions".format(
                    key, coarseMap.size, numberCoarse
                )
            )
        self._meshMaps[key] = coarseMap[self._meshMaps[COARSEMESH]]

    def addMeshMap(self, key, meshMap):
        """Add (or overwrite) a map of fine-mesh integer properties."""
        meshMap = np.asarray(meshMap, dtype=int)
        if meshMap.size != self._numberCells:
            raise InvalidConfiguration(
                "Mesh map `{}` has {} entries but the mesh has {} cells".format(
                    key, meshMap.size, self._numberCells
                )
            )
        self._meshMaps[key] = meshMap.ravel()

    def meshMapExists(self, key):
        return key in self._meshMaps

    def meshMap(self, key):
        """Return the fine-mesh map stored under ``key``."""
        if key not in self._meshMaps:
            raise InvalidConfiguration(
                "No mesh map `{}`; available maps are {}".format(
                    key, sorted(self._meshMaps)
                )
            )
        return self._meshMaps[key]

    def display(self):
        """Log a summary of the mesh."""
        rows = [
            (axis, self._numberCellsAxis[i], float(np.sum(self._widths[i])))
            for i, axis in enumerate("xyz"[: self.DIMENSION])
        ]
        runLog.info(
            "{}D mesh with {} cells\n{}".format(
                self.DIMENSION,
                self._numberCells,
                tabulate(rows, headers=["Axis", "Cells", "Length (cm)"]),
            )
        )

    def __repr__(self):
        return "<{} {}>".format(
            self.__class__.__name__,
            "x".join(str(n) for n in self._numberCellsAxis[: self.DIMENSION]),
        )


class Mesh1D(Mesh):
    DIMENSION = 1


class Mesh2D(Mesh):
    DIMENSION = 2


class Mesh3D(Mesh):
    DIMENSION = 3
