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
Globally accessible exception definitions for better granularity on exception behavior
and exception handling behavior.

Two kinds of failure matter inside the sweep engine:

* :py:class:`InvalidConfiguration` is raised while objects are being built (a bad
  dimension, a quadrature family used in the wrong dimension, an equation the sweeper
  cannot handle, a setting value outside its schema). It is fatal to the calling solve.
* :py:class:`OutOfRange` is raised by accessors when a caller passes an index outside
  the sizes fixed at construction. It is a caller bug and is never clamped.
"""


class SnSweepError(Exception):
    """Base class for all snsweep errors."""


class InvalidConfiguration(SnSweepError, ValueError):
    """An object could not be built from the given options."""


class OutOfRange(SnSweepError, IndexError):
    """An index passed to an accessor is outside the sizes set at construction."""


class BoundaryFrozenError(InvalidConfiguration):
    """A single-angle boundary update was requested while the boundary is frozen."""


# ---------------------------------------------------


class SettingException(SnSweepError):
    """Standardize behavior of setting-family errors."""

    def __init__(self, msg):
        SnSweepError.__init__(self, msg)


class NonexistentSetting(SettingException, KeyError):
    """Exception raised when a non existent setting is asked for."""

    def __init__(self, setting):
        SettingException.__init__(
            self, "Attempted to locate non-existent setting {}.".format(setting)
        )

    def __str__(self):
        # KeyError would otherwise wrap the message in quotes
        return self.args[0]


class InvalidSettingsFileError(SettingException):
    """Not a valid settings file."""

    def __init__(self, path, customMsgEnd=""):
        msg = "Attempted to load an invalid settings file from: {}. ".format(path)
        msg += customMsgEnd

        SettingException.__init__(self, msg)


class NonexistentSettingsFileError(SettingException):
    """Settings file does not exist."""

    def __init__(self, path):
        SettingException.__init__(
            self, "Attempted to load settings file, cannot locate file: {}".format(path)
        )
