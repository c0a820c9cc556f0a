"""
DevShelf domain layer.

Frozen value objects for progress snapshots, achievement definitions and the
domain events the progress engine emits.
"""
