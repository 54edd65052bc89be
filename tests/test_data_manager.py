"""
Unit tests for DataManager class.
"""
import random
import shutil
import tempfile
import unittest
from pathlib import Path

from timed_quiz.data_manager import DataManager
from timed_quiz.exceptions import ConfigurationError, EmptyInputError
from timed_quiz.models import QuestionRecord
from tests.test_fixtures import TestFixtures


class TestDataManager(unittest.TestCase):
    """Test cases for loading delimited question files."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.data_manager = DataManager()
        self.rows = [list(record) for record in TestFixtures.create_sample_records()]

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_load_questions_maps_columns(self):
        path = TestFixtures.write_csv(self.temp_dir, self.rows)

        question_set = self.data_manager.load_questions(path)

        self.assertEqual(len(question_set), 5)
        self.assertEqual(question_set[0], QuestionRecord("5+5", "10"))
        self.assertEqual(question_set[3].prompt, "What is the capital of France?")
        self.assertEqual(question_set[3].correct_answer, "Paris")

    def test_load_questions_accepts_string_path(self):
        path = TestFixtures.write_csv(self.temp_dir, self.rows)

        question_set = self.data_manager.load_questions(str(path))

        self.assertEqual(len(question_set), 5)

    def test_load_questions_handles_quoted_commas(self):
        path = TestFixtures.write_csv(self.temp_dir, [["what 2+2, sir?", "4"]])

        question_set = self.data_manager.load_questions(path)

        self.assertEqual(question_set[0].prompt, "what 2+2, sir?")

    def test_max_count_truncates_in_file_order(self):
        path = TestFixtures.write_csv(self.temp_dir, self.rows)

        question_set = self.data_manager.load_questions(path, max_count=2)

        self.assertEqual([r.prompt for r in question_set], ["5+5", "1+1"])

    def test_max_count_zero_uses_all(self):
        path = TestFixtures.write_csv(self.temp_dir, self.rows)

        question_set = self.data_manager.load_questions(path, max_count=0)

        self.assertEqual(len(question_set), 5)

    def test_max_count_exceeding_records_uses_all(self):
        path = TestFixtures.write_csv(self.temp_dir, self.rows)

        question_set = self.data_manager.load_questions(path, max_count=50)

        self.assertEqual(len(question_set), 5)

    def test_truncation_happens_before_shuffle(self):
        path = TestFixtures.write_csv(self.temp_dir, self.rows)

        question_set = self.data_manager.load_questions(
            path, max_count=3, shuffle=True, rng=random.Random(5)
        )

        self.assertEqual(
            sorted(r.prompt for r in question_set),
            sorted(["5+5", "1+1", "8+3"])
        )

    def test_blank_lines_are_skipped(self):
        path = Path(self.temp_dir) / "blank_lines.csv"
        path.write_text("1+1,2\n\n2+2,4\n", encoding='utf-8')

        question_set = self.data_manager.load_questions(path)

        self.assertEqual(len(question_set), 2)

    def test_answers_are_not_trimmed(self):
        path = Path(self.temp_dir) / "spaces.csv"
        path.write_text("1+1, 2\n", encoding='utf-8')

        question_set = self.data_manager.load_questions(path)

        self.assertEqual(question_set[0].correct_answer, " 2")

    def test_custom_delimiter(self):
        path = TestFixtures.write_csv(self.temp_dir, [["a;b", "c"], ["d", "e"]], delimiter="|")

        question_set = DataManager(delimiter="|").load_questions(path)

        self.assertEqual(question_set[0], QuestionRecord("a;b", "c"))

    def test_missing_file_raises_configuration_error(self):
        with self.assertRaises(ConfigurationError) as context:
            self.data_manager.load_questions(Path(self.temp_dir) / "missing.csv")

        self.assertIn("not found", str(context.exception))

    def test_directory_path_raises_configuration_error(self):
        with self.assertRaises(ConfigurationError):
            self.data_manager.load_questions(self.temp_dir)

    def test_empty_file_raises_empty_input_error(self):
        path = Path(self.temp_dir) / "empty.csv"
        path.write_text("", encoding='utf-8')

        with self.assertRaises(EmptyInputError):
            self.data_manager.load_questions(path)

    def test_record_with_one_field_is_rejected(self):
        path = Path(self.temp_dir) / "short.csv"
        path.write_text("1+1,2\njust a question\n", encoding='utf-8')

        with self.assertRaises(ConfigurationError) as context:
            self.data_manager.load_questions(path)

        self.assertIn("Line 2", str(context.exception))

    def test_record_with_three_fields_is_rejected(self):
        path = Path(self.temp_dir) / "long.csv"
        path.write_text("1+1,2,extra\n", encoding='utf-8')

        with self.assertRaises(ConfigurationError):
            self.data_manager.load_questions(path)

    def test_loading_summary(self):
        path = TestFixtures.write_csv(self.temp_dir, self.rows)
        self.data_manager.load_questions(path, max_count=2)

        summary = self.data_manager.get_loading_summary()

        self.assertEqual(summary['file_path'], str(path))
        self.assertEqual(summary['records_in_file'], 5)
        self.assertEqual(summary['records_used'], 2)
        self.assertEqual(summary['delimiter'], ",")


if __name__ == '__main__':
    unittest.main()
