"""
Configuration and validation package.

This package contains modules for loading the reference tables generated
code is written against and for validating input documents.
"""

from .loader import load_reference_tables, normalize_token

__all__ = ['loader', 'validation', 'load_reference_tables', 'normalize_token']
