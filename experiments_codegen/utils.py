#!/usr/bin/env python3
"""
Shared helpers - YAML loading, config merging, and writing generated files.
"""

import sys
from pathlib import Path

import yaml

from .errors import InvalidArgumentError, OutputWriteError


def load_yaml(file_path):
    """Load YAML file and return contents."""
    with open(file_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f)


def read_text(file_path):
    """Read an input document, turning I/O failures into InvalidArgumentError."""
    try:
        return Path(file_path).read_text(encoding='utf-8')
    except OSError as e:
        raise InvalidArgumentError(f"Failed to read {file_path}: {e.strerror}") from e
    except UnicodeDecodeError as e:
        raise InvalidArgumentError(f"Failed to read {file_path}: not valid UTF-8 ({e.reason})") from e


def parse_yaml_nodes(yaml_content):
    """
    Parse every YAML document in yaml_content into a flat list of nodes.

    A document holding a list contributes each of its items; any other
    document contributes itself. Empty documents are dropped.

    Raises:
        InvalidArgumentError: the text is not valid YAML
    """
    try:
        documents = list(yaml.safe_load_all(yaml_content))
    except yaml.YAMLError as e:
        raise InvalidArgumentError(f"Failed to parse yaml: {e}") from e

    nodes = []
    for document in documents:
        if document is None:
            continue
        if isinstance(document, list):
            nodes.extend(document)
        else:
            nodes.append(document)
    return nodes


def deep_merge(base, override):
    """Deep merge override dict into base dict."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def write_to_file(output_file, contents):
    """
    Write generated contents to output_file.

    Contents are written as UTF-8. Nothing is written when the contents
    cannot be encoded or the file cannot be opened. A failure while writing
    or closing is still reported, even though the file may then hold some
    of the contents.

    Raises:
        OutputWriteError: encode, open, write or close failed
    """
    try:
        data = contents.encode('utf-8')
    except UnicodeEncodeError as e:
        print(f"ERROR: Failed to encode contents for file: {output_file}", file=sys.stderr)
        raise OutputWriteError(f"Failed to encode contents for file: {output_file}", output_file) from e

    try:
        outfile = open(output_file, 'wb')
    except OSError as e:
        print(f"ERROR: Failed to open file: {output_file}", file=sys.stderr)
        raise OutputWriteError(f"Failed to open file: {output_file}", output_file) from e

    try:
        with outfile:
            outfile.write(data)
    except OSError as e:
        print(f"ERROR: Failed to write file: {output_file}", file=sys.stderr)
        raise OutputWriteError(f"Failed to write file: {output_file}", output_file) from e
