"""
SHIELDPOOL Test Suite
=====================

Test organization:
- tests/unit/          - Unit tests per component
- tests/integration/   - End-to-end pool scenarios

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
    pytest -m "not slow"            # Skip full-capacity tests
    pytest --cov=shieldpool         # With coverage
"""
