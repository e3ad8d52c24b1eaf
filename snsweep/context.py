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
Module containing global constants that reflect the executing context of snsweep.

Only a handful of things live here: where the package sits on disk, where run logs go,
and the process rank. Sweeps are always run in a single process, so the rank is fixed
at zero; it is kept so the run log can label worker output the same way everywhere.
"""

import os

ROOT = os.path.abspath(os.path.dirname(__file__))

# MPI_RANK represents the index of the CPU that is running. snsweep does not decompose
# the problem, so this is always the primary.
MPI_RANK = 0

LOG_DIR = os.path.join(os.getcwd(), "logs")
