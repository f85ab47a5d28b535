"""
Tests for the credential service: schema creation, startup retry, the
store, the service rules and the HTTP endpoints.
"""
