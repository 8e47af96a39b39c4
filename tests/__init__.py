"""Test suite for gqlform.

This package contains tests for:
- GraphQL document introspection and variable building
- Action registry building and identity-keyed caching
- Hook parsing and dispatch
- Field validation and server-side validation errors
- Action lifecycle state machine and change events
- Layered configuration and providers
- FormRuntime end-to-end scenarios against a fake client
"""
