"""Test suite for formbind.

This package contains tests for:
- Converters (coercion and constraint rules)
- Key resolvers and data sources
- Field properties (lazy, memoized resolution)
- The schema engine (eager/lazy creation, nested forms)
- Descriptors and JSON Schema export
- Request binding and settings
"""
