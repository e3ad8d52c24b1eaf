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
snsweep: a discrete-ordinates (SN) sweep engine for structured Cartesian meshes.

The package is organized from the leaves up:

* :py:mod:`snsweep.angle` holds the angular quadratures and the octant topology,
* :py:mod:`snsweep.geometry` and :py:mod:`snsweep.material` hold the mesh and cross
  section collaborators,
* :py:mod:`snsweep.transport` holds the boundary flux store, the sweep source and the
  sweepers,
* :py:mod:`snsweep.solvers` holds reference within-group and multigroup iterations that
  drive the sweepers.

Run-wide concerns follow the usual pattern: log through :py:mod:`snsweep.runLog`,
configure through :py:class:`snsweep.settings.caseSettings.Settings`.
"""
from snsweep import context
from snsweep import runLog
from snsweep.meta import __version__

__all__ = ["__version__", "context", "runLog"]
