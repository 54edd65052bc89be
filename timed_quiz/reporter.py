"""
Console rendering of quiz results.
"""
import sys
from typing import List, Optional, Sequence, TextIO

from .models import ScoreReport, SessionResult

TABLE_HEADERS = ("#", "Question", "Answer", "User Answer", "Correct")


def format_summary(report: ScoreReport) -> str:
    """Build the score summary lines for a report."""
    lines = []
    if report.completed_fully:
        lines.append(
            f"You answered all {report.total_questions} questions in {report.elapsed:.2f} seconds."
        )
        lines.append(f"There were {report.remaining:.2f} seconds remaining on the clock.")
    else:
        lines.append(
            f"You answered {report.answered_count} questions out of a total of "
            f"{report.total_questions} questions in {report.time_limit:.2f} seconds."
        )
    lines.append(
        f"You got {report.correct_count} questions right and {report.incorrect_count} questions wrong."
    )
    lines.append(f"Your score is {report.percent_correct:.2f}% {report.user_name}!")
    return "\n".join(lines)


def build_rows(result: SessionResult) -> List[List[str]]:
    """One row per question in asked order; unanswered questions have a blank user answer."""
    rows = []
    for answer in result.answered:
        rows.append([
            str(len(rows) + 1),
            answer.prompt,
            answer.correct_answer,
            answer.user_answer,
            str(answer.is_correct).lower()
        ])
    for record in result.unanswered:
        rows.append([str(len(rows) + 1), record.prompt, record.correct_answer, "", "false"])
    return rows


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Render rows as a bordered text table with upper-cased headers."""
    header_cells = [header.upper() for header in headers]
    widths = [len(cell) for cell in header_cells]
    for row in rows:
        for column, cell in enumerate(row):
            widths[column] = max(widths[column], len(cell))

    border = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

    def render(cells: Sequence[str]) -> str:
        return "|" + "|".join(f" {cell.ljust(width)} " for cell, width in zip(cells, widths)) + "|"

    lines = [border, render(header_cells), border]
    lines.extend(render(row) for row in rows)
    if rows:
        lines.append(border)
    return "\n".join(lines)


def render_report(result: SessionResult, report: ScoreReport, stream: Optional[TextIO] = None) -> None:
    """Print the score summary followed by the results table."""
    out = stream if stream is not None else sys.stdout
    print(format_summary(report), file=out)
    print(format_table(TABLE_HEADERS, build_rows(result)), file=out, flush=True)
