"""
Tests package - Test suite for the secret generator operator.

Contains:
- unit/: Unit tests for individual components
"""
