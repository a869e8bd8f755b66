"""
Tests for the command line entry point.
"""

import pytest

from ..cli import main
from .conftest import EXPERIMENTS_YAML, ROLLOUTS_YAML


@pytest.fixture
def inputs(tmp_path):
    """Experiment and rollout files on disk."""
    experiments = tmp_path / 'experiments.yaml'
    rollouts = tmp_path / 'rollouts.yaml'
    experiments.write_text(EXPERIMENTS_YAML)
    rollouts.write_text(ROLLOUTS_YAML)
    return experiments, rollouts


class TestMain:
    """Tests for experiments-codegen."""

    def test_generates_all_outputs(self, inputs, tmp_path, capsys):
        """Every requested output is written."""
        experiments, rollouts = inputs
        out = tmp_path / 'out'
        out.mkdir()
        main([
            '--experiments', str(experiments),
            '--rollouts', str(rollouts),
            '--mode', 'grpc_oss_test',
            '--header', str(out / 'experiments.h'),
            '--source', str(out / 'experiments.cc'),
            '--header-path', 'test/core/experiments/fixtures/experiments.h',
            '--test', str(out / 'experiments_test.cc'),
            '--bzl', str(out / 'experiments.bzl'),
        ])
        assert sorted(p.name for p in out.iterdir()) == [
            'experiments.bzl', 'experiments.cc', 'experiments.h', 'experiments_test.cc']
        source = (out / 'experiments.cc').read_text()
        assert '#include "test/core/experiments/fixtures/experiments.h"' in source
        assert 'g_test_experiment_metadata' in source
        assert '[OK] 2 experiments validated' in capsys.readouterr().out

    def test_check_writes_nothing(self, inputs, tmp_path):
        """--check only validates."""
        experiments, rollouts = inputs
        header = tmp_path / 'experiments.h'
        main(['--experiments', str(experiments), '--rollouts', str(rollouts),
              '--check', '--header', str(header)])
        assert not header.exists()

    def test_debug_experiments_fail(self, inputs, capsys):
        """--no-dbg-experiments exits 1 when something defaults to debug."""
        experiments, rollouts = inputs
        with pytest.raises(SystemExit) as exc_info:
            main(['--experiments', str(experiments), '--rollouts', str(rollouts),
                  '--no-dbg-experiments'])
        assert exc_info.value.code == 1
        assert 'ERROR: Experiments default to debug-only: bar_baz' in capsys.readouterr().err

    def test_invalid_catalogue_fails(self, tmp_path, capsys):
        """A freeze-window expiry exits 1 with the validation errors."""
        experiments = tmp_path / 'experiments.yaml'
        rollouts = tmp_path / 'rollouts.yaml'
        experiments.write_text(EXPERIMENTS_YAML.replace('2025-03-01', '2025-11-20'))
        rollouts.write_text(ROLLOUTS_YAML)
        with pytest.raises(SystemExit) as exc_info:
            main(['--experiments', str(experiments), '--rollouts', str(rollouts)])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert '  - Experiment foo is invalid' in err
        assert 'ERROR: Experiment validation failed (1 errors)' in err

    def test_missing_input(self, tmp_path, capsys):
        """An unreadable input exits 1."""
        with pytest.raises(SystemExit) as exc_info:
            main(['--experiments', str(tmp_path / 'none.yaml'),
                  '--rollouts', str(tmp_path / 'none.yaml')])
        assert exc_info.value.code == 1
        assert 'ERROR: Failed to read' in capsys.readouterr().err

    def test_unknown_mode_rejected_by_parser(self, inputs):
        """argparse refuses modes outside the supported set."""
        experiments, rollouts = inputs
        with pytest.raises(SystemExit) as exc_info:
            main(['--experiments', str(experiments), '--rollouts', str(rollouts),
                  '--mode', 'bogus_mode'])
        assert exc_info.value.code == 2
