"""
Integration tests running whole quizzes through the command-line entry point.
"""
import io
import json
import random
import re
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from timed_quiz.cli import build_parser, main
from tests.test_fixtures import StalledInput, TestFixtures


class TestCommandLine(unittest.TestCase):
    """End-to-end quiz runs with scripted console input."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.csv_path = TestFixtures.write_csv(
            self.temp_dir, [list(r) for r in TestFixtures.create_arithmetic_records()]
        )
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.stalled = []

    def tearDown(self):
        for stream in self.stalled:
            stream.release()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _run(self, argv, stdin):
        with redirect_stderr(self.err):
            return main(argv, stdin=stdin, stdout=self.out)

    def test_full_quiz_all_correct(self):
        stdin = io.StringIO("Ada\n\n4\n6\n10\n")

        status = self._run(["-filepath", str(self.csv_path)], stdin)

        output = self.out.getvalue()
        self.assertEqual(status, 0)
        self.assertIn("Welcome to the Quiz Game", output)
        self.assertIn("You answered all 3 questions in", output)
        self.assertIn("You got 3 questions right and 0 questions wrong.", output)
        self.assertIn("Your score is 100.00% Ada!", output)

    def test_full_quiz_one_wrong(self):
        stdin = io.StringIO("Ada\n\n4\n7\n10\n")

        status = self._run([f"--filepath={self.csv_path}"], stdin)

        self.assertEqual(status, 0)
        self.assertIn("You got 2 questions right and 1 questions wrong.", self.out.getvalue())

    def test_total_questions_limits_quiz(self):
        stdin = io.StringIO("Ada\n\n4\n")

        status = self._run(["-filepath", str(self.csv_path), "-totalquestions", "1"], stdin)

        self.assertEqual(status, 0)
        self.assertIn("There are 1 questions in the test.", self.out.getvalue())
        self.assertIn("Your score is 100.00% Ada!", self.out.getvalue())

    def test_timeout_reports_and_exits_zero(self):
        stdin = StalledInput(["Ada\n", "\n", "4\n"])
        self.stalled.append(stdin)

        status = self._run(["-filepath", str(self.csv_path), "-timelimit=300ms"], stdin)

        output = self.out.getvalue()
        self.assertEqual(status, 0)
        self.assertIn("Time's Up Ada!", output)
        self.assertIn("You answered 1 questions out of a total of 3 questions in 0.30 seconds.", output)
        self.assertIn("Your score is 33.33% Ada!", output)

    def test_missing_file_exits_non_zero(self):
        status = self._run(["-filepath", str(Path(self.temp_dir) / "missing.csv")], io.StringIO(""))

        self.assertEqual(status, 1)
        self.assertIn("Unable to load questions", self.err.getvalue())
        self.assertNotIn("Welcome", self.out.getvalue())

    def test_empty_file_exits_non_zero(self):
        empty = Path(self.temp_dir) / "empty.csv"
        empty.write_text("", encoding='utf-8')

        status = self._run(["-filepath", str(empty)], io.StringIO("Ada\n"))

        self.assertEqual(status, 1)
        self.assertIn("No questions found", self.err.getvalue())

    def test_invalid_time_limit_exits_non_zero(self):
        status = self._run(["-filepath", str(self.csv_path), "-timelimit", "0s"], io.StringIO(""))

        self.assertEqual(status, 1)
        self.assertIn("greater than zero", self.err.getvalue())

    def test_closed_input_exits_non_zero(self):
        status = self._run(["-filepath", str(self.csv_path)], io.StringIO("Ada\n\n4\n"))

        self.assertEqual(status, 1)
        self.assertIn("Unable to administer test", self.err.getvalue())

    def test_bare_help_word_prints_usage(self):
        status = self._run(["help"], io.StringIO(""))

        self.assertEqual(status, 0)
        self.assertIn("quiz - play a quiz game", self.out.getvalue())
        self.assertIn("-timelimit", self.out.getvalue())

    def test_help_flags_print_usage_to_output(self):
        for flag in ["-h", "-help", "--help"]:
            with self.subTest(flag=flag):
                out = io.StringIO()
                with redirect_stdout(io.StringIO()) as process_stdout:
                    with redirect_stderr(io.StringIO()):
                        status = main([flag], stdin=io.StringIO(""), stdout=out)

                self.assertEqual(status, 0)
                self.assertIn("-filepath", out.getvalue())
                self.assertEqual(process_stdout.getvalue(), "")

    def _eight_question_file(self):
        rows = [[f"{n}+{n}", str(2 * n)] for n in range(1, 9)]
        csv_path = TestFixtures.write_csv(self.temp_dir, rows, name="eight.csv")
        answers = "".join(f"{2 * n}\n" for n in range(1, 9))
        return csv_path, [row[0] for row in rows], answers

    def _asked_prompts(self):
        return re.findall(r"\d+\. (\d+\+\d+) = ", self.out.getvalue())

    def test_shuffle_false_keeps_file_order(self):
        csv_path, file_order, answers = self._eight_question_file()

        status = self._run(["-filepath", str(csv_path), "-shuffle=false", "-seed", "11"],
                           io.StringIO("Ada\n\n" + answers))

        self.assertEqual(status, 0)
        self.assertEqual(self._asked_prompts(), file_order)

    def test_shuffle_true_with_seed_shuffles(self):
        csv_path, file_order, answers = self._eight_question_file()
        expected = list(file_order)
        random.Random(11).shuffle(expected)

        status = self._run(["-filepath", str(csv_path), "-shuffle=true", "-seed", "11"],
                           io.StringIO("Ada\n\n" + answers))

        self.assertEqual(status, 0)
        self.assertEqual(self._asked_prompts(), expected)

    def test_bool_flag_spellings(self):
        parser = build_parser()
        for value, expected in [("1", True), ("T", True), ("True", True), ("0", False), ("f", False), ("FALSE", False)]:
            with self.subTest(value=value):
                self.assertIs(parser.parse_args([f"-shuffle={value}"]).shuffle, expected)
        self.assertIs(parser.parse_args(["-shuffle", "-seed", "3"]).shuffle, True)
        self.assertIsNone(parser.parse_args([]).shuffle)

    def test_invalid_bool_flag_is_rejected(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as context:
                build_parser().parse_args(["-shuffle=maybe"])
        self.assertEqual(context.exception.code, 2)

    def test_config_file_supplies_settings(self):
        config_path = Path(self.temp_dir) / "config.json"
        config_path.write_text(json.dumps({
            "quiz": {"file_path": str(self.csv_path), "total_questions": 2}
        }), encoding='utf-8')

        status = self._run(["-config", str(config_path)], io.StringIO("Ada\n\n4\n6\n"))

        self.assertEqual(status, 0)
        self.assertIn("You answered all 2 questions in", self.out.getvalue())

    def test_seeded_shuffle_is_reproducible(self):
        rows = [[f"{n}+{n}", str(2 * n)] for n in range(1, 9)]
        csv_path = TestFixtures.write_csv(self.temp_dir, rows, name="eight.csv")
        answers = "".join(f"{2 * n}\n" for n in range(1, 9))

        prompts = []
        for _ in range(2):
            self.out = io.StringIO()
            self._run(["-filepath", str(csv_path), "-shuffle", "-seed", "11"],
                      io.StringIO("Ada\n\n" + answers))
            prompts.append(re.findall(r"\d+\. (\d+\+\d+) = ", self.out.getvalue()))

        self.assertEqual(len(prompts[0]), 8)
        self.assertEqual(prompts[0], prompts[1])


if __name__ == '__main__':
    unittest.main()
