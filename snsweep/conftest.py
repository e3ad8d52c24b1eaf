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
Per-directory pytest plugin configuration used only during development/testing.

Tests must be invoked via pytest for this to have any affect, for example::

    $ pytest snsweep

"""
from snsweep import runLog


def pytest_sessionstart(session):
    print("Initializing the snsweep test environment")
    bootstrapTestEnv()


def bootstrapTestEnv():
    """Keep solver progress out of the test output; tests that check logs capture them."""
    runLog.setVerbosity("warning")
