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
Settings are the key-value pairs that configure the quadrature, the boundary conditions,
the sweeper and the reference solvers.

A :py:class:`~snsweep.settings.caseSettings.Settings` object can be loaded from and
written to a YAML file with a top-level ``settings:`` section.
"""

from snsweep.settings.caseSettings import Settings
from snsweep.settings.setting import Setting


def isBoolSetting(setting: Setting) -> bool:
    """Return whether the passed setting represents a boolean value."""
    return isinstance(setting.default, bool)
