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
System to handle basic configuration settings.

Notes
-----
Rather than having subclasses for each setting type, we simply derive the type based on
the type of the default, and we enforce it with schema validation. This also allows for
more complex schema validation for settings that are dictionaries (e.g. the fixed
boundary flux table).
"""

import copy

import voluptuous as vol

from snsweep import runLog
from snsweep.utils.customExceptions import InvalidConfiguration


class Setting:
    """
    A particular setting.

    Setting objects hold all associated information of a setting and should typically be
    accessed through the Settings class methods rather than directly.
    """

    def __init__(
        self,
        name,
        default,
        description=None,
        label=None,
        options=None,
        schema=None,
        enforcedOptions=False,
    ):
        """
        Initialize a Setting object.

        Parameters
        ----------
        name : str
            the setting's name
        default : object
            The setting's default value
        description : str, optional
            The description of the setting
        label : str, optional
            a shorter description, used in log tables
        options : list, optional
            Legal values
        schema : callable, optional
            A function that gets called with the configuration VALUES that build this
            setting. The callable will either raise an exception, safely modify/update,
            or leave unchanged the value. If left blank, a type check will be performed
            against the default.
        enforcedOptions : bool, optional
            Require that the value be one of the valid options.
        """
        self.name = name
        self.description = description or name
        self.label = label or name
        self.options = options
        self.enforcedOptions = enforcedOptions

        self._default = default
        self._setSchema(schema)
        self._value = copy.deepcopy(default)  # break link from _default

    @property
    def underlyingType(self):
        """Useful in categorizing settings."""
        return type(self._default)

    def _setSchema(self, schema):
        """Apply or auto-derive schema of the value."""
        if schema:
            self.schema = schema
        elif self.options and self.enforcedOptions:
            self.schema = vol.Schema(vol.In(self.options))
        elif isinstance(self.default, bool):
            # Coerce(bool) would turn the string "False" into True
            self.schema = vol.Schema(bool)
        elif isinstance(self.default, list) and self.default:
            # Coerce all values to the type of the first entry so mixed floats and ints
            # work.
            self.schema = vol.Schema([vol.Coerce(type(self.default[0]))])
        else:
            self.schema = vol.Schema(vol.Coerce(type(self.default)))

    @property
    def default(self):
        return self._default

    @property
    def value(self):
        return self._value

    @value.setter
    def value(self, val):
        """
        Set the value directly.

        Notes
        -----
        Can't just decorate ``setValue`` with ``@value.setter`` because some callers use
        setting.value=val and others use setting.setValue(val).
        """
        return self.setValue(val)

    @property
    def offDefault(self):
        """Return True if the setting is not the default value for that setting."""
        return self._value != self._default

    def setValue(self, val):
        """
        Set value of a setting.

        This validates it against its value schema on the way in.
        """
        try:
            val = self.schema(val)
        except vol.Invalid as ee:
            runLog.error(f"Error in setting {self.name}, val: {val}.")
            raise InvalidConfiguration(
                f"Invalid value {val!r} for setting `{self.name}`: {ee}"
            ) from ee

        self._value = val

    def revertToDefault(self):
        """Revert a setting back to its default."""
        self._value = copy.deepcopy(self._default)

    def dump(self):
        """Return a serializable version of this setting's value."""
        return self._value

    def __repr__(self):
        return "<{} {} value:{} default:{}>".format(
            self.__class__.__name__, self.name, self.value, self.default
        )
