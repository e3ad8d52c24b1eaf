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
Reading and writing of settings files.

Settings files are YAML with a single top-level ``settings:`` mapping of setting name to
value. They are read and written with ``ruamel.yaml``.
"""

import collections
import os

import ruamel.yaml.comments
from ruamel.yaml import YAML

from snsweep import runLog
from snsweep.utils.customExceptions import InvalidSettingsFileError

WRITE_SHORT = "short"
WRITE_FULL = "full"


class Roots:
    """XML/YAML roots used in the settings files."""

    CUSTOM = "settings"


class SettingsReader:
    """
    Process settings files into a settings object.

    Parameters
    ----------
    cs : Settings
        The settings object to read into
    """

    def __init__(self, cs):
        self.cs = cs
        self.inputPath = "<stream>"
        self.invalidSettings = set()

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.inputPath}>"

    def readFromFile(self, path, handleInvalids=True):
        """Load file and read it."""
        ext = os.path.splitext(path)[1].lower()
        if ext not in (".yaml", ".yml"):
            raise InvalidSettingsFileError(path, f"{ext} is the wrong extension")

        with open(path, "r") as f:
            self.inputPath = path
            try:
                self.readFromStream(f, handleInvalids)
            except InvalidSettingsFileError:
                raise
            except Exception as ee:
                raise InvalidSettingsFileError(path, str(ee)) from ee

    def readFromStream(self, stream, handleInvalids=True):
        """Read from a file-like stream."""
        self._readYaml(stream)
        if handleInvalids:
            self._checkInvalidSettings()

    def _readYaml(self, stream):
        """Read settings from a YAML stream."""
        yaml = YAML(typ="rt")
        yaml.allow_duplicate_keys = False
        tree = yaml.load(stream)
        if not isinstance(tree, dict) or Roots.CUSTOM not in tree:
            raise InvalidSettingsFileError(
                self.inputPath,
                "Missing the `settings:` header required in YAML settings",
            )

        for settingName, settingVal in (tree[Roots.CUSTOM] or {}).items():
            self._applySettings(settingName, settingVal)

    def _checkInvalidSettings(self):
        if not self.invalidSettings:
            return
        invalidNames = "\n\t".join(sorted(self.invalidSettings))
        runLog.warning(
            "Ignoring {} invalid settings in {}:\n\t{}".format(
                len(self.invalidSettings), self.inputPath, invalidNames
            )
        )

    def _applySettings(self, name, val):
        """Add a setting, if it is valid. Capture invalid settings."""
        if name not in self.cs:
            self.invalidSettings.add(name)
        else:
            # the value is coerced into the expected type by the setting schema
            self.cs[name] = val


class SettingsWriter:
    """
    Writes settings out to files.

    This can write in two styles:

    short
        setting values that are not their defaults only
    full
        all setting values regardless of default status
    """

    def __init__(self, settingsInstance, style=WRITE_SHORT):
        self.cs = settingsInstance
        self.style = style
        if style not in {WRITE_SHORT, WRITE_FULL}:
            raise ValueError(f"Invalid supplied setting writing style {style}")

    def writeYaml(self, stream):
        """Write settings to YAML file."""
        settingData = self._getSettingDataToWrite()
        yaml = YAML()
        yaml.default_flow_style = False
        yaml.indent(mapping=2, sequence=4, offset=2)
        # CommentedMap avoids the !!omap tag ordered dicts would get
        yaml.dump({Roots.CUSTOM: ruamel.yaml.comments.CommentedMap(settingData)}, stream)

    def _getSettingDataToWrite(self):
        """Make an ordered dict with all settings slated for being written."""
        settingData = collections.OrderedDict()
        for settingName, settingObject in sorted(
            self.cs.items(), key=lambda item: item[0].lower()
        ):
            if self.style == WRITE_SHORT and not settingObject.offDefault:
                continue
            settingData[settingName] = settingObject.dump()

        return settingData
