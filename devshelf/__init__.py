"""
DevShelf progress engine.

XP, levels, streaks and achievements for the DevShelf learning-resource
library. The pure engine lives in ``devshelf.modules.progress``; the async
orchestration service and its collaborator protocols sit beside it.
"""

__version__ = "1.0.0"
