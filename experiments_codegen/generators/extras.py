#!/usr/bin/env python3
"""
Supplementary outputs: the gtest source checking every accessor, and the
Bazel list of experiments per platform, default and test tag.
"""

from collections import defaultdict

from ..banner import get_copyright, put_banner
from .base import (
    FINAL_MACRO,
    macro_name,
    platform_chain,
    snake_to_pascal,
    strip_github_fragment,
)


GENERATED_BY = 'tools/codegen/core/gen_experiments.py'
DEFAULT_TEST_HEADER = 'test/core/experiments/fixtures/experiments.h'


def generate_test_source(compiler, header_file_path=DEFAULT_TEST_HEADER):
    """
    Render a gtest source asserting each IsXEnabled() matches its rollout.

    Only meaningful when experiments are tunable at runtime, so the tests are
    compiled out under GRPC_EXPERIMENTS_ARE_FINAL.
    """
    experiments = list(compiler.experiment_definitions.values())
    final_return = compiler.final_return

    def expected_values(platform):
        output = ""
        for experiment in experiments:
            body = final_return[experiment.default_value(platform)]
            output += (f"bool GetExperiment{snake_to_pascal(experiment.name)}ExpectedValue() "
                       f"{{ {body} }}\n")
        return output

    output = get_copyright("//")
    output += put_banner("//", [f" Auto generated by {GENERATED_BY}"]) + "\n"
    output += "#include <grpc/support/port_platform.h>\n\n"
    output += "#include \"gtest/gtest.h\"\n"
    output += "#include \"src/core/lib/experiments/config.h\"\n"
    output += f"#include \"{strip_github_fragment(header_file_path)}\"\n\n"
    output += f"#ifndef {FINAL_MACRO}\n\n"
    output += platform_chain(compiler.platforms_define, expected_values)
    output += "\n"

    for experiment in experiments:
        pascal = snake_to_pascal(experiment.name)
        output += f"TEST(ExperimentsTest, {pascal}) {{\n"
        output += f"#ifdef {macro_name(experiment.name)}\n"
        output += (f"  ASSERT_EQ(grpc_core::Is{pascal}Enabled(), "
                   f"GetExperiment{pascal}ExpectedValue());\n")
        output += "#else\n"
        output += f"  ASSERT_FALSE(grpc_core::Is{pascal}Enabled());\n"
        output += "#endif\n"
        output += "}\n\n"

    output += f"#endif  // {FINAL_MACRO}\n\n"
    output += "int main(int argc, char** argv) {\n"
    output += "  testing::InitGoogleTest(&argc, argv);\n"
    output += "  grpc_core::LoadTestOnlyExperimentsFromMetadata(\n"
    output += "      grpc_core::g_test_experiment_metadata, grpc_core::kNumExperiments);\n"
    output += "  return RUN_ALL_TESTS();\n"
    output += "}\n"
    return output


def _tags_by_list(compiler, platform):
    """bzl list name -> test tag -> sorted experiment names, for one platform."""
    lists = {
        list_name: defaultdict(list)
        for list_name in compiler.bzl_list_for_defaults.values()
        if list_name
    }
    for experiment in compiler.experiment_definitions.values():
        list_name = compiler.bzl_list_for_defaults.get(experiment.default_value(platform))
        if not list_name:
            continue
        for tag in experiment.test_tags:
            lists[list_name][tag].append(experiment.name)
    return lists


def generate_bzl(compiler):
    """Render the Starlark description of experiments used by the test rules."""
    experiments = compiler.experiment_definitions

    output = get_copyright("#")
    output += put_banner("#", [f" Auto generated by {GENERATED_BY}"]) + "\n"
    output += '"""Dictionary of tags to experiments so we know when to test different experiments."""\n\n'

    output += "EXPERIMENT_ENABLES = {\n"
    for name, experiment in experiments.items():
        enables = sorted(set(experiment.requirements) | {name})
        output += f"    \"{name}\": \"{','.join(enables)}\",\n"
    output += "}\n\n"

    output += "EXPERIMENT_POLLERS = [\n"
    for name, experiment in experiments.items():
        if experiment.uses_polling:
            output += f"    \"{name}\",\n"
    output += "]\n\n"

    output += "EXPERIMENTS = {\n"
    for platform in sorted(compiler.platforms_define):
        output += f"    \"{platform}\": {{\n"
        for list_name, tags in _tags_by_list(compiler, platform).items():
            output += f"        \"{list_name}\": {{\n"
            for tag in sorted(tags):
                output += f"            \"{tag}\": [\n"
                for name in sorted(tags[tag]):
                    output += f"                \"{name}\",\n"
                output += "            ],\n"
            output += "        },\n"
        output += "    },\n"
    output += "}\n"
    return output
