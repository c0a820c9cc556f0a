"""
DevShelf core infrastructure.

Configuration, structured logging, the event bus and the infrastructure
exception hierarchy. Nothing in this package knows about XP, levels or
achievements.
"""
