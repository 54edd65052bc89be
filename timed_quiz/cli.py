"""
Command-line entry point for the timed quiz game.
"""
import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from .config_manager import ConfigManager
from .data_manager import DataManager
from .exceptions import ConfigurationError, InputStreamError
from .quiz_engine import SessionEngine
from .reporter import render_report

logger = logging.getLogger(__name__)

HELP_WORDS = {"help", "-h", "-help", "--help"}
TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool(text: str) -> bool:
    """Parse a boolean flag value such as true, F or 0."""
    if text in TRUE_WORDS:
        return True
    if text in FALSE_WORDS:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value {text!r}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="quiz",
        description="quiz - play a quiz game",
        epilog="Flags accept one or two dashes, e.g. -timelimit=1m30s or --timelimit 90",
        add_help=False
    )
    # Help is answered in main() before parsing; listed here for the usage text
    p.add_argument("-h", "-help", "--help", dest="help", action="store_true", help="Print this help text")
    p.add_argument("-filepath", "--filepath", dest="file_path", default=None,
                   help="A CSV file containing quiz questions (default \"problems.csv\")")
    p.add_argument("-shuffle", "--shuffle", dest="shuffle", nargs="?", const=True, type=parse_bool,
                   default=None, metavar="BOOL",
                   help="Shuffle the quiz questions; -shuffle=false turns it off (default false)")
    p.add_argument("-totalquestions", "--totalquestions", dest="total_questions", type=int, default=None,
                   help="Number of questions in the test. 0 or omitted uses every question in the file")
    p.add_argument("-timelimit", "--timelimit", dest="time_limit", default=None,
                   help="Time limit for the test, e.g. 30s or 1m30s (default 30s)")
    p.add_argument("-seed", "--seed", dest="seed", type=int, default=None,
                   help="Seed for a reproducible shuffle")
    p.add_argument("-delimiter", "--delimiter", dest="delimiter", default=None,
                   help="Column delimiter of the question file (default \",\")")
    p.add_argument("-config", "--config", dest="config", default=None,
                   help="Optional JSON config file; flags override its values")
    p.add_argument("-loglevel", "--loglevel", dest="log_level", default=None,
                   help="Logging level (default WARNING)")
    return p


def setup_logging(log_config: Dict[str, Any]) -> None:
    """Set up logging based on configuration."""
    log_level = getattr(logging, log_config.get('level', 'WARNING').upper())
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    log_directory = log_config.get('log_directory')
    if log_directory:
        log_path = Path(log_directory)
        log_path.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path / "quiz.log", encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None
) -> int:
    """
    Run one quiz from the command line.

    Returns:
        Process exit status: 0 after help, completion or timeout, 1 on a fatal error
    """
    argv = sys.argv[1:] if argv is None else argv
    out = stdout if stdout is not None else sys.stdout
    parser = build_parser()

    # "help" or a help flag anywhere on the command line prints usage and stops
    if any(arg.strip() in HELP_WORDS for arg in argv):
        parser.print_help(out)
        return 0

    args = parser.parse_args(argv)

    config = ConfigManager()
    setup_logging(config.get_logging_config())
    try:
        if args.config:
            config.load_config_file(args.config)
        config.apply(
            file_path=args.file_path,
            shuffle=args.shuffle,
            total_questions=args.total_questions,
            time_limit=args.time_limit,
            seed=args.seed,
            delimiter=args.delimiter,
            log_level=args.log_level
        )
        setup_logging(config.get_logging_config())
        logger.info(config.get_settings_summary())

        validation = config.validate_settings()
        if not validation["valid"]:
            raise ConfigurationError("; ".join(validation["issues"]))

        settings = config.get_quiz_settings()
        data_manager = DataManager(settings.delimiter)
        questions = data_manager.load_questions(
            settings.file_path,
            max_count=settings.total_questions,
            shuffle=settings.shuffle,
            rng=random.Random(settings.seed)
        )
        logger.info(f"Loading summary: {data_manager.get_loading_summary()}")
    except ConfigurationError as e:
        logger.error(f"Unable to load questions: {e}")
        print(f"❌ Error: Unable to load questions: {e}", file=sys.stderr)
        return 1

    engine = SessionEngine(input_stream=stdin, output_stream=out)
    try:
        user_name = engine.greet()
        result = engine.run_session(questions, settings.time_limit, user_name)
    except InputStreamError as e:
        logger.error(f"Unable to administer test: {e}")
        print(f"\n❌ Error: Unable to administer test: {e}", file=sys.stderr)
        return 1

    render_report(result, engine.score(result), out)
    return 0


def run() -> None:
    """Console-script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n👋 Quiz stopped by user")
        sys.exit(1)
