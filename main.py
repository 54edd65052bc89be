#!/usr/bin/env python3
"""
Timed Quiz Game - Main Entry Point

Asks the questions from a CSV file against the clock and prints a scored
summary when every question is answered or time runs out.

Usage:
    python main.py [-filepath problems.csv] [-shuffle] [-totalquestions N] [-timelimit 30s]
    python main.py -help
"""

from timed_quiz.cli import run

if __name__ == "__main__":
    run()
