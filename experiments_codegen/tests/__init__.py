"""Tests for the experiments compiler."""
