#!/usr/bin/env python3
"""
Experiments code generator
Reads the experiment catalogue and rollout specification and writes the
experiments header/source (and optionally the test source and Bazel lists).
"""

import argparse
import sys

from .compiler import ExperimentsCompiler
from .config import load_reference_tables
from .errors import ExperimentsCompilerError
from .generators import SUPPORTED_MODES
from .utils import read_text


def build_parser():
    parser = argparse.ArgumentParser(
        description='Generate experiment accessors from experiment and rollout YAML.')
    parser.add_argument('--experiments', required=True, help='Experiment catalogue YAML')
    parser.add_argument('--rollouts', required=True, help='Rollout specification YAML')
    parser.add_argument('--mode', default='grpc_oss_production', choices=SUPPORTED_MODES,
                        help='Output family and production/test variant')
    parser.add_argument('--header', help='Write the generated header here')
    parser.add_argument('--source', help='Write the generated source here')
    parser.add_argument('--header-path',
                        help='Include path of the header used by the source (default: --header)')
    parser.add_argument('--test', help='Write the generated gtest source here')
    parser.add_argument('--bzl', help='Write the generated Bazel experiment lists here')
    parser.add_argument('--config', help='Reference tables override YAML')
    parser.add_argument('--check', action='store_true',
                        help='Only validate (with expiry warnings), write nothing')
    parser.add_argument('--no-dbg-experiments', action='store_true',
                        help='Fail if any experiment defaults to debug-only')
    return parser


def run(args):
    """Compile and generate per args. Raises ExperimentsCompilerError on failure."""
    compiler = ExperimentsCompiler(**load_reference_tables(args.config))
    compiler.add_experiment_definition(read_text(args.experiments))
    compiler.add_rollout_specification(read_text(args.rollouts))

    is_valid, errors = compiler.validate(check_expiry=args.check)
    if not is_valid:
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        raise ExperimentsCompilerError(f"Experiment validation failed ({len(errors)} errors)")
    print(f"[OK] {len(compiler.experiment_definitions)} experiments validated")

    if args.no_dbg_experiments:
        compiler.ensure_no_debug_experiments()

    if args.check:
        return

    if args.header:
        compiler.generate_experiments_hdr(args.header, args.mode)
        print(f"[OK] Header written: {args.header}")
    if args.source:
        header_path = args.header_path or args.header or ''
        compiler.generate_experiments_src(args.source, header_path, args.mode)
        print(f"[OK] Source written: {args.source}")
    if args.test:
        compiler.generate_test(args.test)
        print(f"[OK] Test written: {args.test}")
    if args.bzl:
        compiler.generate_experiments_bzl(args.bzl, args.mode)
        print(f"[OK] Bazel lists written: {args.bzl}")


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        run(args)
    except ExperimentsCompilerError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
