"""
Unit tests for the retrying transport.

Test individual components in isolation:
- Attempt record (invariants, convenience accessors)
- Retry policies (DefaultRetryer decisions)
- Retry loop (sync and async transports, draining, delays)
- Client factories and settings
"""
