"""
Build-time compiler from experiment and rollout YAML to experiment accessors.
"""

from .compiler import ExperimentsCompiler
from .config import load_reference_tables
from .definitions import ExperimentDefinition, RolloutSpecification
from .errors import (
    ConfigError,
    DebugExperimentsError,
    ExperimentsCompilerError,
    InvalidArgumentError,
    OutputWriteError,
    UnsupportedModeError,
)

__version__ = "0.1.0"

__all__ = [
    'ConfigError',
    'DebugExperimentsError',
    'ExperimentDefinition',
    'ExperimentsCompiler',
    'ExperimentsCompilerError',
    'InvalidArgumentError',
    'OutputWriteError',
    'RolloutSpecification',
    'UnsupportedModeError',
    'load_reference_tables',
]
