"""Trivia quiz core: question catalog, session state machine and high scores."""

__version__ = "1.0.0"
