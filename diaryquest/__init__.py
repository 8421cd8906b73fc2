"""
diaryquest: activity logging backend with a deterministic streak and achievement engine.
"""

__version__ = "0.3.0"
