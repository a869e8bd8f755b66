#!/usr/bin/env python3
"""
Shared rendering core for experiment headers and sources.

A Dialect describes what differs between output families (banner, include
guard, namespace, whether the production/test mode matters). The rendering
itself lives once, in ExperimentsOutputGenerator.
"""

import sys
from dataclasses import dataclass
from textwrap import indent

from ..banner import CODEGEN_PLACEHOLDER_TEXT, get_copyright, put_banner
from ..errors import InvalidArgumentError


FALLBACK_PLATFORM = 'posix'
FINAL_MACRO = 'GRPC_EXPERIMENTS_ARE_FINAL'
INCLUDED_MACRO_PREFIX = 'GRPC_EXPERIMENT_IS_INCLUDED_'
DEBUG_ONLY_EXPRESSION = 'kDefaultForDebugOnly'
NUM_EXPERIMENTS = 'kNumExperiments'
GITHUB_PATH_FRAGMENT = '.github'


@dataclass(frozen=True)
class Dialect:
    """Conventions of one family of generated experiment files."""
    name: str
    generated_by: str
    include_guard: str
    namespace: str = 'grpc_core'
    test_include_guard: str = ''
    header_includes: tuple = (
        '<grpc/support/port_platform.h>',
        '"src/core/lib/experiments/config.h"',
    )
    mode_aware: bool = False


def snake_to_pascal(snake_case):
    """new_car_project -> NewCarProject"""
    return ''.join(part[:1].upper() + part[1:] for part in snake_case.split('_'))


def macro_name(experiment_name):
    return INCLUDED_MACRO_PREFIX + experiment_name.upper()


C_ESCAPES = {
    '\\': '\\\\',
    '"': '\\"',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}


def c_string_literal(text):
    """Quote text as a C string literal; other control characters become octal escapes."""
    escaped = ""
    for char in text:
        if char in C_ESCAPES:
            escaped += C_ESCAPES[char]
        elif ord(char) < 0x20 or ord(char) == 0x7f:
            escaped += f"\\{ord(char):03o}"
        else:
            escaped += char
    return f'"{escaped}"'


def strip_github_fragment(header_file_path):
    """Hosted-mirror header paths carry a .github segment the build layout does not."""
    return header_file_path.replace(GITHUB_PATH_FRAGMENT, '', 1)


def platform_chain(platforms_define, render_arm):
    """
    Render a preprocessor chain with one arm per guarded platform.

    The fallback platform becomes the trailing #else arm; with no other
    platforms it is rendered without any conditional.
    """
    guarded = [(p, guard) for p, guard in platforms_define.items() if p != FALLBACK_PLATFORM]
    if not guarded:
        return render_arm(FALLBACK_PLATFORM)

    output = ""
    for index, (platform, guard) in enumerate(guarded):
        directive = '#if' if index == 0 else '#elif'
        output += f"{directive} defined({guard})\n"
        output += render_arm(platform)
    output += "#else\n"
    output += render_arm(FALLBACK_PLATFORM)
    output += "#endif\n"
    return output


class ExperimentsOutputGenerator:
    """
    Renders the experiments header and source for a compiled set of experiments.

    Experiments come out in catalogue order (enum ids, accessors, metadata
    rows) and platform arms in reference table order, not alphabetically.

    Args:
        compiler: ExperimentsCompiler holding the experiments and reference tables
        dialect: Dialect of the output family
        mode: 'production' or 'test'; ignored unless dialect.mode_aware
        header_file_path: include path of the header, used by the source
    """

    def __init__(self, compiler, dialect, mode='', header_file_path=''):
        self.compiler = compiler
        self.dialect = dialect
        self.mode = mode if dialect.mode_aware else ''
        self.header_file_path = header_file_path

    @property
    def experiments(self):
        return list(self.compiler.experiment_definitions.values())

    @property
    def is_test_mode(self):
        return self.mode == 'test'

    @property
    def metadata_var_name(self):
        return 'g_test_experiment_metadata' if self.is_test_mode else 'g_experiment_metadata'

    @property
    def include_guard(self):
        if self.is_test_mode and self.dialect.test_include_guard:
            return self.dialect.test_include_guard
        return self.dialect.include_guard

    def banner(self, with_placeholder_text):
        lines = [f" Auto generated by {self.dialect.generated_by}"]
        if with_placeholder_text:
            lines.append(indent(CODEGEN_PLACEHOLDER_TEXT, " "))
        return get_copyright("//") + put_banner("//", lines) + "\n"

    def generate_header(self):
        return self.banner(with_placeholder_text=True) + self._render_header()

    def generate_source(self):
        self._check_requirements()
        return self.banner(with_placeholder_text=False) + self._render_source()

    def _check_requirements(self):
        """Required experiments become kExperimentId references, so each must be catalogued."""
        known = self.compiler.experiment_definitions
        unknown = [
            f"{experiment.name} requires {requirement}"
            for experiment in self.experiments
            for requirement in experiment.requirements
            if requirement not in known
        ]
        if unknown:
            message = "Unknown required experiments: " + ', '.join(unknown)
            print(f"ERROR: {message}", file=sys.stderr)
            raise InvalidArgumentError(message)

    # Header

    def _render_header_for_platform(self, platform):
        final_define = self.compiler.final_define
        final_return = self.compiler.final_return

        output = ""
        for experiment in self.experiments:
            token = experiment.default_value(platform)
            define_fmt = final_define.get(token)
            if define_fmt:
                output += (define_fmt % macro_name(experiment.name)) + "\n"
            output += (f"inline bool Is{snake_to_pascal(experiment.name)}Enabled() "
                       f"{{ {final_return[token]} }}\n")
        return output

    def _render_header(self):
        guard = self.include_guard
        namespace = self.dialect.namespace

        output = f"#ifndef {guard}\n"
        output += f"#define {guard}\n\n"
        for include in self.dialect.header_includes:
            output += f"#include {include}\n"
        output += "\n"
        output += f"namespace {namespace} {{\n\n"

        output += f"#ifdef {FINAL_MACRO}\n\n"
        output += platform_chain(self.compiler.platforms_define, self._render_header_for_platform)

        output += "\n#else\n\n"
        output += "enum ExperimentIds {\n"
        for experiment in self.experiments:
            output += f"  kExperimentId{snake_to_pascal(experiment.name)},\n"
        output += f"  {NUM_EXPERIMENTS}\n"
        output += "};\n"
        for experiment in self.experiments:
            pascal = snake_to_pascal(experiment.name)
            output += f"#define {macro_name(experiment.name)}\n"
            output += (f"inline bool Is{pascal}Enabled() "
                       f"{{ return IsExperimentEnabled<kExperimentId{pascal}>(); }}\n")
        output += "\n"
        output += f"extern const ExperimentMetadata {self.metadata_var_name}[{NUM_EXPERIMENTS}];\n\n"
        output += f"#endif  // {FINAL_MACRO}\n"

        output += f"}}  // namespace {namespace}\n\n"
        output += f"#endif  // {guard}\n"
        return output

    # Source

    def _render_source_for_platform(self, platform):
        defaults = self.compiler.defaults
        namespace = self.dialect.namespace

        output = "namespace {\n"
        default_for_debug_only = False
        for experiment in self.experiments:
            name = experiment.name
            output += f"const char* const description_{name} =\n"
            output += f"    {c_string_literal(experiment.description)};\n"
            output += f"const char* const additional_constraints_{name} =\n"
            output += f"    {c_string_literal(experiment.additional_constraints(platform))};\n"
            if experiment.requirements:
                required = ', '.join(
                    f"static_cast<uint8_t>({namespace}::kExperimentId{snake_to_pascal(r)})"
                    for r in experiment.requirements
                )
                output += f"const uint8_t required_experiments_{name}[] = {{{required}}};\n"
            if defaults[experiment.default_value(platform)] == DEBUG_ONLY_EXPRESSION:
                default_for_debug_only = True

        if default_for_debug_only:
            output += "#ifdef NDEBUG\n"
            output += f"const bool {DEBUG_ONLY_EXPRESSION} = false;\n"
            output += "#else\n"
            output += f"const bool {DEBUG_ONLY_EXPRESSION} = true;\n"
            output += "#endif\n"
        output += "}  // namespace\n\n"

        output += f"namespace {namespace} {{\n\n"
        output += f"const ExperimentMetadata {self.metadata_var_name}[] = {{\n"
        for experiment in self.experiments:
            name = experiment.name
            required = f"required_experiments_{name}" if experiment.requirements else 'nullptr'
            fuzzing = 'true' if experiment.allow_in_fuzzing_config else 'false'
            output += (f"    {{{c_string_literal(name)}, description_{name}, "
                       f"additional_constraints_{name}, {required}, "
                       f"{len(experiment.requirements)}, "
                       f"{defaults[experiment.default_value(platform)]}, {fuzzing}}},\n")
        output += "};\n\n"
        output += f"}}  // namespace {namespace}\n"
        return output

    def _render_source(self):
        any_requires = any(experiment.requirements for experiment in self.experiments)

        output = "#include <grpc/support/port_platform.h>\n\n"
        if any_requires:
            output += "#include <stdint.h>\n\n"
        output += f"#include \"{strip_github_fragment(self.header_file_path)}\"\n\n"

        output += f"#ifndef {FINAL_MACRO}\n\n"
        output += platform_chain(self.compiler.platforms_define, self._render_source_for_platform)
        output += f"\n#endif  // {FINAL_MACRO}\n"
        return output
