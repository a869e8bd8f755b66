"""
Pytest fixtures for experiments compiler tests.
"""

import pytest

from ..compiler import ExperimentsCompiler
from ..config import load_reference_tables


EXPERIMENTS_YAML = """
- name: foo
  description: Enables the foo code path.
  owner: alice@example.com
  expiry: 2025-03-01
  uses_polling: false
  allow_in_fuzzing_config: true
  test_tags: [core_end2end_test]
- name: bar_baz
  description: Rewrites "bar" handling.
  owner: bob@example.com
  expiry: 2025-04-15
  uses_polling: true
  allow_in_fuzzing_config: false
  test_tags: [core_end2end_test, event_engine_client_test]
"""

ROLLOUTS_YAML = """
- name: foo
  default_value: true
- name: bar_baz
  platform_value:
    windows: "false"
    ios: "false"
    posix: "true"
  requirements: [foo]
"""

FOO_ONLY_EXPERIMENTS_YAML = """
- name: foo
  description: Enables the foo code path.
  owner: alice@example.com
  expiry: 2025-03-01
  uses_polling: false
  allow_in_fuzzing_config: true
  test_tags: []
"""

FOO_ONLY_ROLLOUTS_YAML = """
- name: foo
  default_value: "true"
"""


@pytest.fixture(autouse=True)
def no_config_override(monkeypatch):
    """Keep a developer's override file out of the tests."""
    monkeypatch.delenv('EXPERIMENTS_CODEGEN_CONFIG', raising=False)


@pytest.fixture
def reference_tables():
    """Packaged reference tables."""
    return load_reference_tables()


@pytest.fixture
def empty_compiler(reference_tables) -> ExperimentsCompiler:
    """Compiler with no experiments yet."""
    return ExperimentsCompiler(**reference_tables)


@pytest.fixture
def foo_compiler(empty_compiler) -> ExperimentsCompiler:
    """Compiler holding only foo, enabled everywhere."""
    empty_compiler.add_experiment_definition(FOO_ONLY_EXPERIMENTS_YAML)
    empty_compiler.add_rollout_specification(FOO_ONLY_ROLLOUTS_YAML)
    return empty_compiler


@pytest.fixture
def compiler(empty_compiler) -> ExperimentsCompiler:
    """Compiler holding foo and bar_baz, where bar_baz requires foo."""
    empty_compiler.add_experiment_definition(EXPERIMENTS_YAML)
    empty_compiler.add_rollout_specification(ROLLOUTS_YAML)
    return empty_compiler
