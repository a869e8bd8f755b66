#!/usr/bin/env python3
"""
Reference table loading.

The packaged reference-tables.yaml describes the vocabulary generated code is
written in. An override document can be merged on top of it:
- load_reference_tables(path): merges the given file
- EXPERIMENTS_CODEGEN_CONFIG=<file>: merges that file when no path is given
"""

import os
from pathlib import Path

import yaml

from ..errors import ConfigError
from ..utils import deep_merge, load_yaml
from .validation import validate_reference_tables


DEFAULT_TABLES_PATH = Path(__file__).parent / 'reference-tables.yaml'
CONFIG_ENV_VAR = 'EXPERIMENTS_CODEGEN_CONFIG'

TABLE_NAMES = ('defaults', 'platforms_define', 'final_return', 'final_define', 'bzl_list_for_defaults')


def normalize_token(value):
    """YAML booleans become the lower-case tokens used as table keys."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def _normalize_tables(config):
    normalized = dict(config)
    for table_name in TABLE_NAMES:
        table = config.get(table_name)
        if isinstance(table, dict):
            normalized[table_name] = {normalize_token(k): v for k, v in table.items()}
    return normalized


def _load_document(path):
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Reference tables file not found: {path}")
    try:
        document = load_yaml(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigError(f"Reference tables file must hold a mapping: {path}")
    return _normalize_tables(document)


def load_reference_tables(override_path=None):
    """
    Load the reference tables with an optional override merged on top.

    Returns:
        dict with one mapping per table name, ready to pass to
        ExperimentsCompiler(**tables)

    Raises:
        ConfigError: a file is missing or malformed, or the merged tables
        fail validation
    """
    tables = _load_document(DEFAULT_TABLES_PATH)

    if override_path is None:
        override_path = os.environ.get(CONFIG_ENV_VAR, '').strip() or None
    if override_path:
        tables = deep_merge(tables, _load_document(override_path))

    is_valid, errors = validate_reference_tables(tables)
    if not is_valid:
        raise ConfigError("Invalid reference tables: " + '; '.join(errors))

    return {name: tables[name] for name in TABLE_NAMES}
