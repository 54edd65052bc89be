"""
Data manager for delimited question files.
"""
import csv
import logging
import os
import random
from pathlib import Path
from typing import Dict, List, Optional, Union

from .exceptions import ConfigurationError, EmptyInputError
from .models import QuestionRecord
from .question_set import QuestionSet


class DataManager:
    """Loads and validates two-column question files."""

    MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

    def __init__(self, delimiter: str = ","):
        """
        Initialize DataManager.

        Args:
            delimiter: Single character separating the prompt and answer columns
        """
        self.delimiter = delimiter
        self.logger = logging.getLogger(__name__)
        self.last_loaded_path: Optional[Path] = None
        self.records_in_file = 0
        self.records_used = 0

    def load_questions(
        self,
        path: Union[str, Path],
        max_count: int = 0,
        shuffle: bool = False,
        rng: Optional[random.Random] = None
    ) -> QuestionSet:
        """
        Load a question file into a QuestionSet.

        Args:
            path: Path to the delimited question file
            max_count: Number of questions to use, 0 for all of them
            shuffle: Whether to randomize question order
            rng: Random source for shuffling

        Returns:
            QuestionSet built from the file

        Raises:
            ConfigurationError: If the file cannot be read or a record is malformed
            EmptyInputError: If the file holds no records
        """
        file_path = Path(path)
        self._check_file_access(file_path)

        records = self._read_records(file_path)
        if not records:
            raise EmptyInputError(f"No questions found in {file_path}")

        self.records_in_file = len(records)

        # 0 or more than available both mean "use every record"
        if max_count <= 0 or max_count > len(records):
            max_count = len(records)
        selected = records[:max_count]

        question_set = QuestionSet.build(selected, shuffle=shuffle, rng=rng)

        self.last_loaded_path = file_path
        self.records_used = len(question_set)
        self.logger.info(
            f"Loaded {self.records_used} of {self.records_in_file} questions from {file_path}"
            + (" (shuffled)" if shuffle else "")
        )
        return question_set

    def _check_file_access(self, file_path: Path) -> None:
        if not file_path.exists():
            self.logger.error(f"Question file not found: {file_path}")
            raise ConfigurationError(f"Question file not found: {file_path}")

        if not file_path.is_file():
            raise ConfigurationError(f"Question path is not a file: {file_path}")

        if not os.access(file_path, os.R_OK):
            raise ConfigurationError(f"Permission denied: Cannot read {file_path}")

        file_size = file_path.stat().st_size
        if file_size > self.MAX_FILE_SIZE:
            raise ConfigurationError(
                f"File too large ({file_size / 1024 / 1024:.1f}MB). "
                f"Maximum size is {self.MAX_FILE_SIZE / 1024 / 1024}MB"
            )

    def _read_records(self, file_path: Path) -> List[QuestionRecord]:
        """
        Read and validate every record in the file.

        Blank lines are skipped. Every other line must hold exactly two fields.
        """
        records = []
        try:
            with open(file_path, 'r', encoding='utf-8', newline='') as f:
                reader = csv.reader(f, delimiter=self.delimiter)
                for row in reader:
                    if not row:
                        continue
                    self.validate_record(row, reader.line_num)
                    records.append(QuestionRecord(prompt=row[0], correct_answer=row[1]))
        except csv.Error as e:
            self.logger.error(f"Invalid delimited data in {file_path}: {e}")
            raise ConfigurationError(f"Invalid delimited data in {file_path}: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigurationError(f"{file_path} is not valid UTF-8 text: {e}") from e
        except OSError as e:
            self.logger.error(f"Failed to read question file {file_path}: {e}")
            raise ConfigurationError(f"Failed to read question file {file_path}: {e}") from e

        return records

    def validate_record(self, row: List[str], line_number: int) -> None:
        """
        Validate that a parsed row has exactly two fields.

        Raises:
            ConfigurationError: If the row has any other number of fields
        """
        if len(row) != 2:
            self.logger.error(f"Line {line_number} has {len(row)} fields, expected 2")
            raise ConfigurationError(
                f"Line {line_number}: expected 2 fields (question{self.delimiter}answer), got {len(row)}"
            )

    def get_loading_summary(self) -> Dict[str, any]:
        """
        Get a summary of the last load operation.

        Returns:
            Dictionary with loading statistics
        """
        return {
            'file_path': str(self.last_loaded_path) if self.last_loaded_path else None,
            'records_in_file': self.records_in_file,
            'records_used': self.records_used,
            'delimiter': self.delimiter
        }
