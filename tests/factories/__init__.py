"""
Test Data Factories

Stub entities and stub factories standing in for an implementation under
test. Stub factories echo the properties they receive, so tests control
the returned objects entirely through fixtures and overrides.
"""
