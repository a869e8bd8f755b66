"""
Tests for the generated gtest source and Bazel experiment lists.
"""

from ..generators.extras import generate_bzl, generate_test_source


class TestGenerateTestSource:
    """Tests for the accessor test source."""

    def test_one_test_per_experiment(self, compiler):
        """Each experiment gets a test guarded by its inclusion macro."""
        source = generate_test_source(compiler)
        assert 'TEST(ExperimentsTest, Foo) {\n#ifdef GRPC_EXPERIMENT_IS_INCLUDED_FOO\n' in source
        assert ('  ASSERT_EQ(grpc_core::IsBarBazEnabled(), '
                'GetExperimentBarBazExpectedValue());\n') in source
        assert '  ASSERT_FALSE(grpc_core::IsFooEnabled());\n' in source

    def test_expected_values_per_platform(self, compiler):
        """Expected values come from final_return in every platform arm."""
        source = generate_test_source(compiler)
        assert source.count('bool GetExperimentFooExpectedValue() { return true; }') == 3
        assert '#if defined(GPR_WINDOWS)\n' in source

    def test_includes(self, compiler):
        """The fixture header is included, minus any .github segment."""
        source = generate_test_source(compiler, 'grpc.github/test/experiments.h')
        assert '#include "grpc/test/experiments.h"' in source
        assert '#include "gtest/gtest.h"' in source
        assert source.rstrip().endswith('}')


class TestGenerateBzl:
    """Tests for the Bazel experiment lists."""

    def test_enables(self, compiler):
        """Each experiment enables itself and its requirements."""
        bzl = generate_bzl(compiler)
        assert 'EXPERIMENT_ENABLES = {\n    "foo": "foo",\n    "bar_baz": "bar_baz,foo",\n}' in bzl

    def test_pollers(self, compiler):
        """Only polling experiments are listed as pollers."""
        bzl = generate_bzl(compiler)
        assert 'EXPERIMENT_POLLERS = [\n    "bar_baz",\n]' in bzl

    def test_experiments_by_platform(self, compiler):
        """Experiments are grouped by platform, default list and test tag."""
        bzl = generate_bzl(compiler)
        expected_posix = (
            '    "posix": {\n'
            '        "off": {\n'
            '        },\n'
            '        "on": {\n'
            '            "core_end2end_test": [\n'
            '                "foo",\n'
            '            ],\n'
            '        },\n'
            '        "dbg": {\n'
            '            "core_end2end_test": [\n'
            '                "bar_baz",\n'
            '            ],\n'
            '            "event_engine_client_test": [\n'
            '                "bar_baz",\n'
            '            ],\n'
            '        },\n'
            '    },\n'
        )
        assert expected_posix in bzl
        assert bzl.index('"ios": {') < bzl.index('"posix": {') < bzl.index('"windows": {')

    def test_broken_experiments_omitted(self, empty_compiler):
        """Defaults without a list name are left out."""
        empty_compiler.add_experiment_definition("""
- name: flaky
  description: Broken for now.
  owner: o
  expiry: 2025-03-01
  uses_polling: false
  allow_in_fuzzing_config: false
  test_tags: [core_end2end_test]
""")
        empty_compiler.add_rollout_specification("- name: flaky\n  default_value: broken\n")
        bzl = generate_bzl(empty_compiler)
        assert '"flaky",\n' not in bzl.split('EXPERIMENTS = {')[1]
