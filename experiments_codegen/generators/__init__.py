"""
Output generator package.

One rendering core (base.ExperimentsOutputGenerator) parameterized by the
dialect each build mode selects, plus the supplementary test and Bazel
outputs.
"""

import sys

from ..errors import UnsupportedModeError
from .base import Dialect, ExperimentsOutputGenerator, snake_to_pascal
from .dialects import GOOGLE3, MODES, OSS


SUPPORTED_MODES = tuple(MODES)


def check_mode(mode):
    """Raise UnsupportedModeError unless mode is a known build mode."""
    if mode not in MODES:
        print(f"ERROR: Unsupported mode: {mode}", file=sys.stderr)
        raise UnsupportedModeError(mode)


def get_output_generator(compiler, mode, header_file_path=''):
    """Factory function to get the generator for a build mode."""
    check_mode(mode)
    dialect, sub_mode = MODES[mode]
    return ExperimentsOutputGenerator(compiler, dialect, sub_mode, header_file_path)


__all__ = [
    'Dialect',
    'ExperimentsOutputGenerator',
    'GOOGLE3',
    'OSS',
    'SUPPORTED_MODES',
    'check_mode',
    'get_output_generator',
    'snake_to_pascal',
]
