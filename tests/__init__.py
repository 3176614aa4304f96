"""
Test suite for the Poultry Farm Operations backend.

Test Organization:
- conftest.py - shared users, farm, warehouse, batch and catalog fixtures
- integration/ - API and service integration tests, one module per app
"""
