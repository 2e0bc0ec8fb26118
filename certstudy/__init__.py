"""
certstudy - adaptive study-scheduling engine for certification-exam prep.

Decides which flashcards a learner should see next and keeps the mastery
state (confidence ratings, quiz aggregates) that drives that decision.
"""

__version__ = "1.0.0"
