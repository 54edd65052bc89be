"""
Exception hierarchy for the timed quiz game.
"""


class QuizGameError(Exception):
    """Base exception for quiz game errors."""
    pass


class ConfigurationError(QuizGameError):
    """Raised when settings or the question file make a session impossible."""
    pass


class EmptyInputError(ConfigurationError):
    """Raised when a question set would contain no questions."""
    pass


class InputStreamError(QuizGameError):
    """Raised when the console input stream is closed or unreadable."""
    pass
