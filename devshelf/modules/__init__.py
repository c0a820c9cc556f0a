"""
DevShelf feature modules.

- shared: constants, formulas, exceptions and the service base class
- progress: the progress and achievement engine and its service
"""
