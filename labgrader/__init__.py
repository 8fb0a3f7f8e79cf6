"""
Lab grader: automated submission checks for classroom repositories

Resolves when a student really submitted from git history, ignoring bot and
grader-infrastructure commits, and checks whether the submitted code compiles
and runs inside a time-bounded sandbox.
"""

__version__ = "0.1.0"
