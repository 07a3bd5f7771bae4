# A5Vault Test Suite
"""
Test suite including:
- Unit tests (generator, packing, tracing)
- Integration tests (command line)
- Security tests (invalid inputs)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
