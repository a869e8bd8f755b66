#!/usr/bin/env python3
"""
Error types raised by the experiments compiler.

Every failure surfaced to a caller is an ExperimentsCompilerError carrying a
human-readable message. The CLI turns these into exit status 1.
"""


class ExperimentsCompilerError(Exception):
    """Base class for all compiler failures."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(ExperimentsCompilerError):
    """Malformed input document, failed validation, or failed rollout merge."""


class UnsupportedModeError(InvalidArgumentError):
    """Output generation was asked for a mode nobody renders."""

    def __init__(self, mode):
        super().__init__(f"Unsupported mode: {mode}")
        self.mode = mode


class OutputWriteError(ExperimentsCompilerError):
    """Generated content could not be persisted."""

    def __init__(self, message, path):
        super().__init__(message)
        self.path = str(path)


class ConfigError(ExperimentsCompilerError):
    """Reference tables could not be loaded or are malformed."""


class DebugExperimentsError(ExperimentsCompilerError):
    """Some experiment still defaults to debug-only on a release branch."""

    def __init__(self, experiments):
        names = ', '.join(experiments)
        super().__init__(f"Experiments default to debug-only: {names}")
        self.experiments = list(experiments)
