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

r"""
This module handles logging of console output (e.g. warnings, information, errors)
during an snsweep run.

The default way of calling the global snsweep logger is to just import it:

.. code::

    from snsweep import runLog

You can then log things with the module-level functions:

.. code::

    runLog.info('information here')
    runLog.warning('source iteration did not converge', single=True)
    runLog.error('extra error info here')
    raise SomeException  # runLog.error() implies that the code will crash!

Or change the log level:

.. code::

    runLog.setVerbosity('debug')

Messages logged with ``single=True`` are only printed the first time they are seen
(keyed on ``label`` if given, else on the message), which keeps warnings raised inside
iteration loops from flooding the output. ``warningReport()`` prints how many times each
de-duplicated warning was hit.
"""
import collections
import logging
import operator
import os
import sys
import time

from snsweep import context

# global constants
_ADD_LOG_METHOD_STR = """def {0}(self, message, *args, **kws):
    if self.isEnabledFor({1}):
        self._log({1}, message, args, **kws)
logging.Logger.{0} = {0}"""
_WHITE_SPACE = " " * 6
OS_SECONDS_TIMEOUT = 2 * 60
SEP = "|"
STDOUT_LOGGER_NAME = "SNSWEEP"


class _RunLog:
    """
    Handles all the logging.

    Everything goes to stdout formatted like log statements, and optionally to a file
    in the log directory once :py:meth:`startLog` has been called.
    """

    LOG_FILE_NAME = "{0}.log"

    def __init__(self, mpiRank=0):
        """
        Build a log object.

        Parameters
        ----------
        mpiRank : int
            Rank of the process doing the logging. Only used to label the level
            prefixes; snsweep runs in a single process, so this is normally 0.
        """
        self._mpiRank = mpiRank
        self._verbosity = logging.INFO
        self.logLevels = None
        self._logLevelNumbers = []
        self.logger = None

        self.setNullLoggers()
        self._setLogLevels()

    def setNullLoggers(self):
        """Set the logger to a handler-fixed null logger."""
        self.logger = NullLogger("NULL")

    def _setLogLevels(self):
        """Fill the logLevels dict with custom level strings."""
        _rank = "" if self._mpiRank == 0 else "-{:>03d}".format(self._mpiRank)
        self.logLevels = collections.OrderedDict(
            [
                ("debug", (logging.DEBUG, "[dbug{}] ".format(_rank))),
                ("extra", (15, "[xtra{}] ".format(_rank))),
                ("info", (logging.INFO, "[info{}] ".format(_rank))),
                ("important", (25, "[impt{}] ".format(_rank))),
                ("warning", (logging.WARNING, "[warn{}] ".format(_rank))),
                ("error", (logging.ERROR, "[err {}] ".format(_rank))),
                ("header", (100, "")),
            ]
        )
        self._logLevelNumbers = sorted([l[0] for l in self.logLevels.values()])
        global _WHITE_SPACE
        _WHITE_SPACE = " " * len(max([l[1] for l in self.logLevels.values()]))

        for longLogString, (logValue, shortLogString) in self.logLevels.items():
            logging.addLevelName(logValue, shortLogString)

            # custom levels become constants on the logging module, e.g. logging.EXTRA
            try:
                getattr(logging, longLogString.upper())
            except AttributeError:
                setattr(logging, longLogString.upper(), logValue)

            # and methods on the Logger class: LOG.extra("message")
            try:
                getattr(logging.Logger, longLogString)
            except AttributeError:
                exec(_ADD_LOG_METHOD_STR.format(longLogString, logValue))

    def log(self, msgType, msg, single=False, label=None, **kwargs):
        """
        Wrapper around logger.log() used by all the module-level message passers.

        Converts the level name to its number and passes the de-duplication data along.
        """
        msgLevel = msgType if isinstance(msgType, int) else self.logLevels[msgType][0]
        msg = str(msg)
        self.logger.log(msgLevel, msg, single=single, label=label)

    def getDuplicatesFilter(self):
        """Find the no-duplicates filter on the top-level logger, if it exists."""
        if not self.logger or not isinstance(self.logger, logging.Logger):
            return None

        return self.logger.getDuplicatesFilter()

    def clearSingleWarnings(self):
        """Reset the single warned list so we get messages again."""
        dupsFilter = self.getDuplicatesFilter()
        if dupsFilter:
            dupsFilter.singleMessageCounts.clear()
            dupsFilter.singleWarningMessageCounts.clear()

    def warningReport(self):
        """Summarize all warnings for the run."""
        self.logger.warningReport()

    def getLogVerbosityRank(self, level):
        """Return integer verbosity rank given the string verbosity name."""
        try:
            return self.logLevels[level][0]
        except KeyError:
            log_strs = list(self.logLevels.keys())
            raise KeyError(
                "{} is not a valid verbosity level: {}".format(level, log_strs)
            )

    def setVerbosity(self, level):
        """
        Sets the minimum output verbosity for the logger.

        Any message with a higher verbosity than this will be emitted.

        Parameters
        ----------
        level : int or str
            The level to set the log output verbosity to.
            Valid numbers are 0-100 and valid strings are keys of logLevels

        Examples
        --------
        >>> setVerbosity('debug') -> sets to 10
        >>> setVerbosity(0) -> sets to 10
        """
        if isinstance(level, str):
            self._verbosity = self.getLogVerbosityRank(level)
        elif isinstance(level, int):
            # Snap to a canonical level, otherwise the logging module silently drops
            # nearly everything.
            if level in self._logLevelNumbers:
                self._verbosity = level
            elif level < self._logLevelNumbers[0]:
                self._verbosity = self._logLevelNumbers[0]
            else:
                for i in range(len(self._logLevelNumbers) - 1, -1, -1):
                    if level >= self._logLevelNumbers[i]:
                        self._verbosity = self._logLevelNumbers[i]
                        break
        else:
            raise TypeError("Invalid verbosity rank {}.".format(level))

        if self.logger is not None:
            for handler in self.logger.handlers:
                handler.setLevel(self._verbosity)
            self.logger.setLevel(self._verbosity)

    def getVerbosity(self):
        """Return the global runLog verbosity."""
        return self._verbosity

    def startLog(self, name, logDir=None):
        """
        Open the main logger for a named run.

        In addition to stdout, messages are written to ``<logDir>/<name>.log``.
        """
        self.logger = logging.getLogger(
            STDOUT_LOGGER_NAME + SEP + name + SEP + str(self._mpiRank)
        )

        logDir = context.LOG_DIR if logDir is None else logDir
        createLogDir(logDir)
        filePath = os.path.join(logDir, _RunLog.LOG_FILE_NAME.format(name))
        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == filePath
            for h in self.logger.handlers
        ):
            handler = logging.FileHandler(filePath, delay=True)
            handler.setFormatter(logging.Formatter(RunLogger.FMT))
            self.logger.addHandler(handler)

        # re-apply any pre-existing verbosity to the new handlers
        self.setVerbosity(self._verbosity)


def close():
    """End use of the log: close any file handlers and restore the null logger."""
    if LOG.logger:
        _ = [h.close() for h in LOG.logger.handlers]

    LOG.setNullLoggers()


# Here are all the module-level functions that should be used for most outputs.
# They use the Log object behind the scenes.
def raw(msg):
    """Print raw text without any special functionality."""
    LOG.log("header", msg, single=False, label=msg)


def extra(msg, single=False, label=None):
    LOG.log("extra", msg, single=single, label=label)


def debug(msg, single=False, label=None):
    LOG.log("debug", msg, single=single, label=label)


def info(msg, single=False, label=None):
    LOG.log("info", msg, single=single, label=label)


def important(msg, single=False, label=None):
    LOG.log("important", msg, single=single, label=label)


def warning(msg, single=False, label=None):
    LOG.log("warning", msg, single=single, label=label)


def error(msg, single=False, label=None):
    LOG.log("error", msg, single=single, label=label)


def header(msg, single=False, label=None):
    LOG.log("header", msg, single=single, label=label)


def warningReport():
    LOG.warningReport()


def setVerbosity(level):
    LOG.setVerbosity(level)


def getVerbosity():
    return LOG.getVerbosity()


# ---------------------------------------


class DeduplicationFilter(logging.Filter):
    """
    Important logging filter.

    * allow users to turn off duplicate warnings
    * handles special indentation rules for our logs
    """

    def __init__(self, *args, **kwargs):
        logging.Filter.__init__(self, *args, **kwargs)
        self.singleMessageCounts = {}
        self.singleWarningMessageCounts = {}

    def filter(self, record):
        msg = str(record.msg)
        single = getattr(record, "single", False)
        label = getattr(record, "label", msg)
        label = msg if label is None else label

        if single:
            if record.levelno in (logging.WARNING, logging.CRITICAL):
                if label not in self.singleWarningMessageCounts:
                    self.singleWarningMessageCounts[label] = 1
                else:
                    self.singleWarningMessageCounts[label] += 1
                    return False
            else:
                if label not in self.singleMessageCounts:
                    self.singleMessageCounts[label] = 1
                else:
                    self.singleMessageCounts[label] += 1
                    return False

        # indent continuation lines of multi-line messages under the level prefix
        record.msg = msg.rstrip().replace("\n", "\n" + _WHITE_SPACE)
        return True


class RunLogger(logging.Logger):
    """Custom Logger that gives users the option to de-duplicate warnings."""

    FMT = "%(levelname)s%(message)s"

    def __init__(self, *args, **kwargs):
        # the name may carry the rank after a separator: "SNSWEEP|caseTitle|0"
        if SEP in args[0]:
            args = (".".join(args[0].split(SEP)[0:2]),)

        logging.Logger.__init__(self, *args, **kwargs)
        self.allowStopDuplicates()

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.INFO)
        self.setLevel(logging.INFO)

        form = logging.Formatter(RunLogger.FMT)
        handler.setFormatter(form)
        self.addHandler(handler)

    def log(self, msgType, msg, single=False, label=None, **kwargs):
        """
        Wrapper around logger.log() that converts level names to numbers and attaches
        the de-duplication data.
        """
        msgLevel = msgType if isinstance(msgType, int) else LOG.logLevels[msgType][0]
        logging.Logger.log(
            self, msgLevel, str(msg), extra={"single": single, "label": label}
        )

    def _log(self, *args, **kwargs):
        """
        Wrapper around the standard library Logger._log() method.

        Makes sure the single/label data is always present for de-duplication.
        """
        if "extra" not in kwargs or kwargs["extra"] is None:
            kwargs["extra"] = {}

        if "single" not in kwargs["extra"]:
            msg = args[1]
            single = kwargs.pop("single", False)
            label = kwargs.pop("label", None)
            label = msg if label is None else label

            kwargs["extra"]["single"] = single
            kwargs["extra"]["label"] = label

        logging.Logger._log(self, *args, **kwargs)

    def allowStopDuplicates(self):
        """Add the de-duplication filter, once."""
        for f in self.filters:
            if isinstance(f, DeduplicationFilter):
                return
        self.addFilter(DeduplicationFilter())

    def getDuplicatesFilter(self):
        """This object should have a no-duplicates filter. If it exists, find it."""
        for f in self.filters:
            if isinstance(f, DeduplicationFilter):
                return f

        return None

    def warningReport(self):
        """Summarize all warnings for the run."""
        self.info("----- Final Warning Count --------")
        self.info("  {0:^10s}   {1:^25s}".format("COUNT", "LABEL"))

        dupsFilter = self.getDuplicatesFilter()
        if dupsFilter is None or not dupsFilter.singleWarningMessageCounts:
            self.info("  {0:^10s}   {1:^25s}".format(str(0), str("None Found")))
            self.info("------------------------------------")
            return

        for label, count in sorted(
            dupsFilter.singleWarningMessageCounts.items(), key=operator.itemgetter(1)
        ):
            self.info("  {0:^10s}   {1:^25s}".format(str(count), str(label)))
        self.info("------------------------------------")


class NullLogger(RunLogger):
    """
    Placeholder for logging before or after the span of a normal run.

    It forwards all logging to stdout, but keeps the formatting and de-duplication
    tools of the run log.
    """

    def __init__(self, name):
        RunLogger.__init__(self, name)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(RunLogger.FMT))
        self.handlers = [handler]

    def addHandler(self, *args, **kwargs):
        """Ensure this STAYS a null logger."""
        pass


# Setting the default logging class to be ours
logging.setLoggerClass(RunLogger)


def createLogDir(logDir: str = None) -> None:
    """A helper method to create the log directory."""
    if logDir is None:
        logDir = context.LOG_DIR

    if not os.path.exists(logDir):
        try:
            os.makedirs(logDir)
        except FileExistsError:
            # If we hit this race condition, we still win.
            return

    # potentially, wait for directory to be created
    secondsWait = 0.5
    loopCounter = 0
    while not os.path.exists(logDir):
        loopCounter += 1
        if loopCounter > (OS_SECONDS_TIMEOUT / secondsWait):
            raise OSError("Was unable to create the log directory: {}".format(logDir))

        time.sleep(secondsWait)


def logFactory():
    """Create the default logging object."""
    return _RunLog(int(context.MPI_RANK))


LOG = logFactory()
