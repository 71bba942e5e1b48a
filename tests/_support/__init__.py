"""
Test support utilities for async-base-iterator tests.

This module provides helpers that don't fit as pytest fixtures but are
useful across multiple test files.
"""
