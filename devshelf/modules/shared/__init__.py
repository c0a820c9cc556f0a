"""
Shared building blocks for DevShelf modules.

- constants: progression constants (reward table, level curve base)
- formulas: pure level and streak arithmetic
- exceptions: domain exception hierarchy
- base_service: base class for async services

Import from the submodules directly; this package deliberately re-exports
nothing so that infrastructure modules can import the exception hierarchy
without pulling in the service layer.
"""
