"""
Tabular export of a survey's responses.

Layout:
    header row:  "Submission Date", then each question title in survey order
    data rows:   formatted submission time, then each answer in the same order

Selections are joined with "; " into a single cell and missing answers are
empty cells. `export_responses` renders the rows as CSV with every cell
quoted, ready for a file download.
"""

import csv
import re
from io import StringIO
from typing import Any, Iterable, List

from surveykit.answers import answer_value, is_missing
from surveykit.model import Response, Survey


SUBMISSION_HEADER = "Submission Date"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
SELECTION_SEPARATOR = "; "


def format_cell(answer: Any) -> str:
    """Render one answer as a cell value."""
    if is_missing(answer):
        return ""
    value = answer_value(answer)
    if isinstance(value, (list, tuple)):
        return SELECTION_SEPARATOR.join(format_cell(v) for v in value if not is_missing(v))
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_rows(
    survey: Survey,
    responses: Iterable[Response],
    date_format: str = DEFAULT_DATE_FORMAT,
) -> List[List[str]]:
    """
    Build the export table.

    Rows follow submission (insertion) order; they are not re-sorted.
    """
    rows = [[SUBMISSION_HEADER] + [q.title for q in survey.questions]]
    for response in responses:
        row = [response.submitted_at.strftime(date_format)]
        for question in survey.questions:
            row.append(format_cell(response.answers.get(question.id)))
        rows.append(row)
    return rows


def export_responses(
    survey: Survey,
    responses: Iterable[Response],
    date_format: str = DEFAULT_DATE_FORMAT,
) -> str:
    """
    Render responses as CSV text.

    Every cell is double-quoted and embedded quotes are doubled, so titles
    and answers containing commas, quotes or newlines stay in their cell.
    """
    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(export_rows(survey, responses, date_format))
    return buffer.getvalue().rstrip("\n")


def export_filename(survey: Survey) -> str:
    """Download file name for a survey's export."""
    title = re.sub(r"[\\/]", "_", survey.title).strip() or "survey"
    return f"{title}_responses.csv"
