#!/usr/bin/env python3
"""
Output families for generated experiment files.
"""

from .base import Dialect


GOOGLE3 = Dialect(
    name='grpc_google3',
    generated_by='tools/codegen/core/gen_experiments_grpc_google3.cc',
    include_guard='GRPC_SRC_CORE_LIB_EXPERIMENTS_EXPERIMENTS_H',
)

OSS = Dialect(
    name='grpc_oss',
    generated_by='tools/codegen/core/gen_experiments_grpc_oss.cc',
    include_guard='GRPC_SRC_CORE_LIB_EXPERIMENTS_EXPERIMENTS_H',
    test_include_guard='GRPC_TEST_CORE_EXPERIMENTS_FIXTURES_EXPERIMENTS_H',
    mode_aware=True,
)

# Build mode -> (dialect, production/test mode passed to the generator)
MODES = {
    'grpc_google3': (GOOGLE3, ''),
    'grpc_oss_production': (OSS, 'production'),
    'grpc_oss_test': (OSS, 'test'),
}
