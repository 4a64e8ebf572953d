"""
vocab-mastery: spaced-repetition mastery engine for vocabulary learning.

Decides when each (learner, item) pair is due, how retention state evolves
after each answer, and how lesson and review sessions are built and scored.
"""

__version__ = "1.0.0"
