#!/usr/bin/env python3
"""
Experiments Compiler
Compiles an experiment catalogue and its rollout specification (YAML) into
the experiments header and source, plus the optional test source and Bazel
experiment lists.

Usage:
    compiler = ExperimentsCompiler(**load_reference_tables())
    compiler.add_experiment_definition(experiments_yaml)
    compiler.add_rollout_specification(rollouts_yaml)
    compiler.generate_experiments_hdr('experiments.h', 'grpc_oss_production')
    compiler.generate_experiments_src('experiments.cc', 'src/core/lib/experiments/experiments.h',
                                      'grpc_oss_production')
"""

import sys
from types import MappingProxyType

from .config.validation import EXPERIMENT_SCHEMA, ROLLOUT_SCHEMA, validate_against_schema
from .definitions import (
    DEBUG_DEFAULT,
    ExperimentDefinition,
    RolloutSpecification,
    normalize_experiment_node,
)
from .errors import DebugExperimentsError, InvalidArgumentError
from .generators import check_mode, get_output_generator
from .generators.extras import DEFAULT_TEST_HEADER, generate_bzl, generate_test_source
from .utils import parse_yaml_nodes, write_to_file


def _entry_label(node, index):
    name = node.get('name')
    return f"'{name}'" if name else f"#{index}"


class ExperimentsCompiler:
    """
    Owns every experiment of one run and the reference tables output is written in.

    The tables are copied on construction and exposed read-only.
    """

    def __init__(self, defaults, platforms_define, final_return, final_define,
                 bzl_list_for_defaults):
        self._defaults = MappingProxyType(dict(defaults))
        self._platforms_define = MappingProxyType(dict(platforms_define))
        self._final_return = MappingProxyType(dict(final_return))
        self._final_define = MappingProxyType(dict(final_define))
        self._bzl_list_for_defaults = MappingProxyType(dict(bzl_list_for_defaults))
        self._experiment_definitions = {}

    @property
    def defaults(self):
        return self._defaults

    @property
    def platforms_define(self):
        return self._platforms_define

    @property
    def final_return(self):
        return self._final_return

    @property
    def final_define(self):
        return self._final_define

    @property
    def bzl_list_for_defaults(self):
        return self._bzl_list_for_defaults

    @property
    def experiment_definitions(self):
        return MappingProxyType(self._experiment_definitions)

    def add_experiment_definition(self, experiments_yaml_content):
        """
        Add every experiment in a catalogue document.

        Definitions that fail validation are still kept (they refuse rollouts
        and report invalid); decode failures stop the whole document.

        Raises:
            InvalidArgumentError: unparsable YAML, an entry missing required
            keys, or a name already in the catalogue
        """
        for index, node in enumerate(parse_yaml_nodes(experiments_yaml_content)):
            if not isinstance(node, dict):
                continue
            node = normalize_experiment_node(node)

            is_valid, errors = validate_against_schema(node, EXPERIMENT_SCHEMA)
            if not is_valid:
                raise InvalidArgumentError(
                    f"Invalid experiment definition {_entry_label(node, index)}: " + '; '.join(errors))

            definition, _ = ExperimentDefinition.from_node(node)
            if definition.name in self._experiment_definitions:
                raise InvalidArgumentError(f"Duplicate experiment definition: {definition.name}")
            self._experiment_definitions[definition.name] = definition

    def add_rollout_specification(self, experiments_rollout_yaml_content):
        """
        Attach every rollout in a rollout document to its experiment.

        Raises:
            InvalidArgumentError: unparsable YAML, a malformed entry, an entry
            with neither default_value nor platform_value, an unknown
            experiment, or a rollout the experiment refused
        """
        for index, node in enumerate(parse_yaml_nodes(experiments_rollout_yaml_content)):
            if not isinstance(node, dict):
                continue

            is_valid, errors = validate_against_schema(node, ROLLOUT_SCHEMA)
            if not is_valid:
                raise InvalidArgumentError(
                    f"Invalid rollout specification {_entry_label(node, index)}: " + '; '.join(errors))

            rollout = RolloutSpecification.from_node(node)
            experiment = self._experiment_definitions.get(rollout.name)
            if experiment is None:
                raise InvalidArgumentError(
                    f"Rollout specification for unknown experiment: {rollout.name}")

            success, errors = experiment.add_rollout_specification(
                self._defaults, self._platforms_define, rollout)
            if not success:
                raise InvalidArgumentError(
                    f"Failed to add rollout specification for experiment: {rollout.name} "
                    f"({'; '.join(errors)})")

    def validate(self, check_expiry=False, today=None):
        """
        Validate every experiment and the experiments they require.

        Returns: (is_valid, error_messages)
        """
        errors = []
        for name, experiment in self._experiment_definitions.items():
            if not experiment.is_valid(check_expiry=check_expiry, today=today):
                errors.append(f"Experiment {name or '<unnamed>'} is invalid")
            for requirement in experiment.requirements:
                if requirement not in self._experiment_definitions:
                    errors.append(f"Experiment {name} requires unknown experiment {requirement}")

        return len(errors) == 0, errors

    def debug_experiments(self):
        """Names of experiments defaulting to debug-only on any platform."""
        return [
            name for name, experiment in self._experiment_definitions.items()
            if any(experiment.default_value(platform) == DEBUG_DEFAULT
                   for platform in self._platforms_define)
        ]

    def ensure_no_debug_experiments(self):
        """Raise DebugExperimentsError if any experiment still defaults to debug-only."""
        names = self.debug_experiments()
        if names:
            for name in names:
                print(f"ERROR: Default for experiment {name} is debug", file=sys.stderr)
            raise DebugExperimentsError(names)

    def render_experiments_hdr(self, mode):
        """Header text for mode. Raises UnsupportedModeError for unknown modes."""
        return get_output_generator(self, mode).generate_header()

    def render_experiments_src(self, header_file_path, mode):
        """
        Source text for mode.

        Raises UnsupportedModeError for unknown modes and InvalidArgumentError
        when an experiment requires one missing from the catalogue.
        """
        return get_output_generator(self, mode, header_file_path).generate_source()

    def generate_experiments_hdr(self, output_file, mode):
        """Render the header and write it to output_file."""
        write_to_file(output_file, self.render_experiments_hdr(mode))

    def generate_experiments_src(self, output_file, header_file_path, mode):
        """Render the source including header_file_path and write it to output_file."""
        write_to_file(output_file, self.render_experiments_src(header_file_path, mode))

    def generate_test(self, output_file, header_file_path=DEFAULT_TEST_HEADER):
        """Render the gtest source checking every accessor and write it to output_file."""
        write_to_file(output_file, generate_test_source(self, header_file_path))

    def generate_experiments_bzl(self, output_file, mode):
        """Render the Bazel experiment lists and write them to output_file."""
        check_mode(mode)
        write_to_file(output_file, generate_bzl(self))

