#!/usr/bin/env python3
"""
Document Validation
Validates catalogue entries, rollout entries and reference tables against
their JSON schemas, and checks the reference tables agree with each other.
"""

import json
from pathlib import Path

import jsonschema


SCHEMA_DIR = Path(__file__).parent.parent / 'schemas'

EXPERIMENT_SCHEMA = 'experiment-schema.json'
ROLLOUT_SCHEMA = 'rollout-schema.json'
REFERENCE_TABLES_SCHEMA = 'reference-tables-schema.json'

_schema_cache = {}


def load_schema(schema_name):
    """Load a packaged JSON schema by file name."""
    if schema_name not in _schema_cache:
        with open(SCHEMA_DIR / schema_name, 'r') as f:
            _schema_cache[schema_name] = json.load(f)
    return _schema_cache[schema_name]


def validate_against_schema(instance, schema_name):
    """
    Validate one decoded YAML node against a packaged schema.
    Returns (is_valid, errors_list)
    """
    schema = load_schema(schema_name)
    validator = jsonschema.Draft7Validator(schema)

    errors = []
    for error in sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path]):
        error_path = ' -> '.join(str(p) for p in error.path) if error.path else 'root'
        errors.append(f"Schema validation failed at '{error_path}': {error.message}")

    return len(errors) == 0, errors


def validate_reference_tables(tables):
    """
    Validate the reference tables document.

    Beyond the schema, every default token must have an accessor body in
    final_return, since both generated branches look it up.

    Returns: (is_valid, error_messages)
    """
    is_valid, errors = validate_against_schema(tables, REFERENCE_TABLES_SCHEMA)
    if not is_valid:
        return False, errors

    for token in tables['defaults']:
        if token not in tables['final_return']:
            errors.append(f"Default token '{token}' has no final_return entry")

    for token, template in tables['final_define'].items():
        if template and template.count('%s') != 1:
            errors.append(f"final_define entry for '{token}' must contain exactly one %s")

    return len(errors) == 0, errors
