"""
DevShelf Test Suite
===================

Test Organization
-----------------
- tests/unit/          : Fast unit tests for the engine, service and infrastructure
- tests/unit/domain/   : Domain model tests (snapshots, badges, definitions)

Testing Philosophy
------------------
- The progress engine is pure: test it directly, no mocks needed
- The service is tested against in-memory collaborators from conftest.py
- Use pytest markers to categorize and selectively run tests
- Follow AAA pattern: Arrange, Act, Assert
"""
