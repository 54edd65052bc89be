"""
Configuration manager for quiz settings and parameters.
"""
import json
import logging
import math
import re
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError
from .models import QuizSettings

_DURATION_UNITS = {
    'ns': 1e-9,
    'us': 1e-6,
    'µs': 1e-6,
    'ms': 1e-3,
    's': 1.0,
    'm': 60.0,
    'h': 3600.0,
}
_DURATION_PART = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)')


def parse_duration(text: str) -> float:
    """
    Parse a duration string into seconds.

    Accepts Go-style durations such as ``30s``, ``1m30s``, ``500ms`` or
    ``1h``, and bare numbers which are read as seconds.

    Raises:
        ValueError: If the text is not a valid duration
    """
    value = text.strip()
    if not value:
        raise ValueError("Duration cannot be empty")

    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ValueError(f"Invalid duration: {text!r}")
        return seconds

    sign = 1.0
    if value[0] in '+-':
        sign = -1.0 if value[0] == '-' else 1.0
        value = value[1:]

    total = 0.0
    position = 0
    while position < len(value):
        match = _DURATION_PART.match(value, position)
        if not match:
            raise ValueError(f"Invalid duration: {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position == 0:
        raise ValueError(f"Invalid duration: {text!r}")
    return sign * total


def format_duration(seconds: float) -> str:
    """Format seconds the way durations are shown to the player (e.g. ``1m30s``)."""
    if seconds < 60:
        return f"{seconds:g}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{int(minutes)}m{secs:g}s"
    hours, minutes = divmod(int(minutes), 60)
    return f"{hours}h{minutes}m{secs:g}s"


class ConfigManager:
    """Manages quiz settings, the optional JSON config file and logging options."""

    # Default configuration values
    DEFAULT_FILE_PATH = "problems.csv"
    DEFAULT_SHUFFLE = False
    DEFAULT_TOTAL_QUESTIONS = 0  # Use all questions by default
    DEFAULT_TIME_LIMIT = 30.0
    DEFAULT_DELIMITER = ","
    DEFAULT_LOG_LEVEL = "WARNING"

    VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._settings = QuizSettings(
            file_path=self.DEFAULT_FILE_PATH,
            shuffle=self.DEFAULT_SHUFFLE,
            total_questions=self.DEFAULT_TOTAL_QUESTIONS,
            time_limit=self.DEFAULT_TIME_LIMIT,
            seed=None,
            delimiter=self.DEFAULT_DELIMITER
        )
        self._logging_config: Dict[str, Any] = {'level': self.DEFAULT_LOG_LEVEL, 'log_directory': None}

    def get_quiz_settings(self) -> QuizSettings:
        """
        Get current quiz settings.

        Returns:
            Copy of the current QuizSettings
        """
        return QuizSettings(
            file_path=self._settings.file_path,
            shuffle=self._settings.shuffle,
            total_questions=self._settings.total_questions,
            time_limit=self._settings.time_limit,
            seed=self._settings.seed,
            delimiter=self._settings.delimiter
        )

    def get_logging_config(self) -> Dict[str, Any]:
        return dict(self._logging_config)

    def set_file_path(self, file_path: str) -> Dict[str, any]:
        """
        Set the path of the question file.

        Args:
            file_path: Path to a delimited question file

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(file_path, str) or not file_path.strip():
            error_msg = "Question file path cannot be empty"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ Question file path cannot be empty"
            }

        self._settings.file_path = file_path
        self.logger.info(f"Question file set to {file_path}")
        return {
            'success': True,
            'message': f"Question file set to {file_path}",
            'user_message': f"✅ Questions will be loaded from {file_path}"
        }

    def set_shuffle(self, shuffle: bool) -> Dict[str, any]:
        """
        Set whether questions should be shuffled.

        Args:
            shuffle: True for random order, False for file order

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(shuffle, bool):
            error_msg = f"Shuffle must be a boolean, got {type(shuffle).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected true/false, got {type(shuffle).__name__}"
            }

        self._settings.shuffle = shuffle
        order_type = "random" if shuffle else "file"
        self.logger.info(f"Question order set to {order_type}")
        return {
            'success': True,
            'message': f"Question order set to {order_type}",
            'user_message': f"✅ Questions will be asked in {order_type} order"
        }

    def set_total_questions(self, count: int) -> Dict[str, any]:
        """
        Set the number of questions to ask.

        Args:
            count: Number of questions, 0 to use every question in the file

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if isinstance(count, bool) or not isinstance(count, int):
            error_msg = f"Question count must be an integer, got {type(count).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(count).__name__}"
            }

        if count < 0:
            error_msg = "Question count cannot be negative"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ Question count cannot be negative (use 0 for all questions)"
            }

        self._settings.total_questions = count
        message = "Question count set to use all available questions" if count == 0 else f"Question count set to {count}"
        self.logger.info(message)
        return {
            'success': True,
            'message': message,
            'user_message': f"✅ {message}"
        }

    def set_time_limit(self, time_limit: Any) -> Dict[str, any]:
        """
        Set the time limit for the whole test.

        Args:
            time_limit: Seconds as a number, or a duration string such as "1m30s"

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if isinstance(time_limit, str):
            try:
                seconds = parse_duration(time_limit)
            except ValueError as e:
                error_msg = str(e)
                self.logger.error(error_msg)
                return {
                    'success': False,
                    'error': error_msg,
                    'user_message': f"❌ Invalid time limit: {time_limit} (try 30s or 1m30s)"
                }
        elif isinstance(time_limit, (int, float)) and not isinstance(time_limit, bool):
            seconds = float(time_limit)
        else:
            error_msg = f"Time limit must be a number or duration string, got {type(time_limit).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a duration, got {type(time_limit).__name__}"
            }

        if not math.isfinite(seconds) or seconds <= 0:
            error_msg = "Time limit must be greater than zero"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ Time limit must be greater than zero"
            }

        self._settings.time_limit = seconds
        self.logger.info(f"Time limit set to {seconds} seconds")
        return {
            'success': True,
            'message': f"Time limit set to {seconds} seconds",
            'user_message': f"✅ Time limit set to {format_duration(seconds)}"
        }

    def set_seed(self, seed: Optional[int]) -> Dict[str, any]:
        """
        Set the seed used when shuffling questions.

        Args:
            seed: Integer seed, or None for an unpredictable order
        """
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            error_msg = f"Seed must be an integer, got {type(seed).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid seed: Expected a number, got {type(seed).__name__}"
            }

        self._settings.seed = seed
        self.logger.info(f"Shuffle seed set to {seed}")
        return {
            'success': True,
            'message': f"Shuffle seed set to {seed}",
            'user_message': f"✅ Shuffle seed set to {seed}"
        }

    def set_delimiter(self, delimiter: str) -> Dict[str, any]:
        """
        Set the column delimiter of the question file.

        Args:
            delimiter: A single character other than a quote or newline
        """
        if not isinstance(delimiter, str) or len(delimiter) != 1 or delimiter in '"\r\n':
            error_msg = f"Delimiter must be a single character other than a quote or newline, got {delimiter!r}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid delimiter: {delimiter!r}"
            }

        self._settings.delimiter = delimiter
        self.logger.info(f"Delimiter set to {delimiter!r}")
        return {
            'success': True,
            'message': f"Delimiter set to {delimiter!r}",
            'user_message': f"✅ Delimiter set to {delimiter!r}"
        }

    def set_log_level(self, level: str) -> Dict[str, any]:
        """Set the logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""
        if not isinstance(level, str) or level.upper() not in self.VALID_LOG_LEVELS:
            error_msg = f"Invalid log level: {level}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Log level must be one of {', '.join(self.VALID_LOG_LEVELS)}"
            }

        self._logging_config['level'] = level.upper()
        return {
            'success': True,
            'message': f"Log level set to {level.upper()}",
            'user_message': f"✅ Log level set to {level.upper()}"
        }

    def apply(self, **overrides: Any) -> None:
        """
        Apply several settings at once.

        Keyword names match the setter names without the ``set_`` prefix.
        Values of None are ignored.

        Raises:
            ConfigurationError: On the first setting that fails validation
        """
        for name, value in overrides.items():
            if value is None:
                continue
            setter = getattr(self, f"set_{name}", None)
            if setter is None:
                raise ConfigurationError(f"Unknown setting: {name}")
            result = setter(value)
            if not result['success']:
                raise ConfigurationError(result['error'])

    def load_config_file(self, path: str) -> None:
        """
        Load settings from a JSON config file.

        Expected structure (all keys optional)::

            {
                "quiz": {"file_path": "problems.csv", "shuffle": false,
                         "total_questions": 0, "time_limit": "30s",
                         "seed": null, "delimiter": ","},
                "logging": {"level": "INFO", "log_directory": "./logs/"}
            }

        Raises:
            ConfigurationError: If the file is missing, not valid JSON, or holds invalid settings
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read {config_path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigurationError(f"{config_path} must contain a JSON object")

        quiz_config = config.get('quiz', {})
        if not isinstance(quiz_config, dict):
            raise ConfigurationError("'quiz' section must be an object")
        self.apply(**quiz_config)

        log_config = config.get('logging', {})
        if not isinstance(log_config, dict):
            raise ConfigurationError("'logging' section must be an object")
        if 'level' in log_config:
            result = self.set_log_level(log_config['level'])
            if not result['success']:
                raise ConfigurationError(result['error'])
        if log_config.get('log_directory'):
            self._logging_config['log_directory'] = str(log_config['log_directory'])

        self.logger.info(f"Loaded configuration from {config_path}")

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        validation_result = {
            "valid": True,
            "issues": []
        }

        if not self._settings.file_path or not str(self._settings.file_path).strip():
            validation_result["valid"] = False
            validation_result["issues"].append("Invalid question file path: empty")

        if not isinstance(self._settings.total_questions, int) or self._settings.total_questions < 0:
            validation_result["valid"] = False
            validation_result["issues"].append(
                f"Invalid question count: {self._settings.total_questions}"
            )

        if not isinstance(self._settings.time_limit, (int, float)) or self._settings.time_limit <= 0:
            validation_result["valid"] = False
            validation_result["issues"].append(
                f"Invalid time limit: {self._settings.time_limit}"
            )

        if not isinstance(self._settings.delimiter, str) or len(self._settings.delimiter) != 1:
            validation_result["valid"] = False
            validation_result["issues"].append(
                f"Invalid delimiter: {self._settings.delimiter!r}"
            )

        return validation_result

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        question_count_str = (
            str(self._settings.total_questions)
            if self._settings.total_questions
            else "all available"
        )
        order_str = "random" if self._settings.shuffle else "file order"

        return (
            f"Quiz Settings:\n"
            f"• Question file: {self._settings.file_path}\n"
            f"• Questions: {question_count_str}\n"
            f"• Order: {order_str}\n"
            f"• Time limit: {format_duration(self._settings.time_limit)}"
        )
