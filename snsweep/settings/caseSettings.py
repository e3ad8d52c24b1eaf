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
This defines a Settings object that acts mostly like a dictionary. It records the options
that configure a sweep calculation: the number of groups, the quadrature, the cell
equation, the boundary conditions and the reference solver tolerances.

A Settings object can be saved as or loaded from a YAML file.
"""

import io
import os
from copy import copy, deepcopy

from snsweep import runLog
from snsweep.settings import settingsIO
from snsweep.settings.sweepSettings import CONF_VERBOSITY, defineSettings
from snsweep.utils.customExceptions import NonexistentSetting


class Settings:
    """
    A container for run settings.

    Setting values are accessed by keys, like a dictionary. Unknown keys raise
    :py:class:`~snsweep.utils.customExceptions.NonexistentSetting`.
    """

    defaultCaseTitle = "snsweep"

    def __init__(self, fName=None):
        """
        Instantiate a Settings object.

        Parameters
        ----------
        fName : str, optional
            Path to a valid yaml settings file that will be loaded
        """
        self.path = ""
        self.__settings = {s.name: s for s in defineSettings()}

        if fName:
            self.loadFromInputFile(fName)

    @property
    def inputDirectory(self):
        """Getter for settings file path."""
        if not self.path:
            return os.getcwd()
        return os.path.dirname(self.path)

    @property
    def caseTitle(self):
        if not self.path:
            return self.defaultCaseTitle
        return os.path.splitext(os.path.basename(self.path))[0]

    @caseTitle.setter
    def caseTitle(self, value):
        self.path = os.path.join(self.inputDirectory, value + ".yaml")

    def __contains__(self, key):
        return key in self.__settings

    def __repr__(self):
        total = len(self.__settings.keys())
        altered = sum(1 for s in self.__settings.values() if s.offDefault)

        return "<{} name:{} total:{} altered:{}>".format(
            self.__class__.__name__, self.caseTitle, total, altered
        )

    def __getitem__(self, key):
        if key not in self.__settings:
            raise NonexistentSetting(key)
        return self.__settings[key].value

    def __setitem__(self, key, val):
        if key not in self.__settings:
            raise NonexistentSetting(key)
        self.__settings[key].setValue(val)

    def getSetting(self, key, default=None):
        """
        Return a copy of an actual Setting object, instead of just its value.

        Notes
        -----
        This is used very rarely, try to organize your code to only need a Setting value.
        """
        if key in self.__settings:
            return copy(self.__settings[key])
        elif default is not None:
            return default
        else:
            raise NonexistentSetting(key)

    def keys(self):
        return self.__settings.keys()

    def values(self):
        return self.__settings.values()

    def items(self):
        return self.__settings.items()

    def duplicate(self):
        """Return a duplicate copy of this settings object."""
        return deepcopy(self)

    def revertToDefaults(self):
        """Sets every setting back to its default value."""
        for setting in self.__settings.values():
            setting.revertToDefault()

    def modified(self, caseTitle=None, newSettings=None):
        """
        Return a new Settings object containing the provided modifications.

        Parameters
        ----------
        caseTitle : str, optional
            The case title of the new object
        newSettings : dict, optional
            Setting names mapped to new values
        """
        settings = self.duplicate()

        if caseTitle:
            settings.caseTitle = caseTitle

        for key, val in (newSettings or {}).items():
            settings[key] = val

        return settings

    def loadFromInputFile(self, fName, handleInvalids=True, setPath=True):
        """
        Read in settings from an input YAML file.

        Passes the reader back out in case you want to know something about how the reading
        went, like which settings in the file were not recognized.
        """
        reader = settingsIO.SettingsReader(self)
        reader.readFromFile(fName, handleInvalids)
        self.initLogVerbosity()
        if setPath:
            self.path = os.path.abspath(fName)

        return reader

    def loadFromString(self, string, handleInvalids=True):
        """Read in settings from a YAML string."""
        reader = settingsIO.SettingsReader(self)
        reader.readFromStream(io.StringIO(string), handleInvalids=handleInvalids)
        self.initLogVerbosity()

        return reader

    def initLogVerbosity(self):
        """
        Central location to init logging verbosity.

        Notes
        -----
        This means that loading a Settings file sets the global logging level of the entire
        code base.
        """
        runLog.setVerbosity(self[CONF_VERBOSITY])

    def writeToYamlFile(self, fName, style="short"):
        """
        Write settings to a yaml file.

        Notes
        -----
        This resets the current CS's path to the newly written absolute path.

        Parameters
        ----------
        fName : str
            the file to write to
        style : str (optional)
            ``short`` writes only settings that differ from their defaults, ``full`` writes
            them all
        """
        self.path = os.path.abspath(fName)
        with open(self.path, "w") as stream:
            writer = self.writeToYamlStream(stream, style)

        return writer

    def writeToYamlStream(self, stream, style="short"):
        """Write settings in yaml format to an arbitrary stream."""
        writer = settingsIO.SettingsWriter(self, style=style)
        writer.writeYaml(stream)
        return writer
