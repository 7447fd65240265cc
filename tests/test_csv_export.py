from __future__ import annotations

import csv
import io
from datetime import date, datetime, timezone

from llm_evaluator.models import DetailedEvaluation, LLMModel, Question
from llm_evaluator.services.export import BOM, CSV_HEADERS, build_evaluations_csv, export_filename

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _row(**overrides) -> DetailedEvaluation:
    values = {
        "id": "e1",
        "question_id": "q1",
        "model_id": "m1",
        "response": 'He said "hi", then\nleft',
        "scores": {"accuracy": 5, "completeness": 4, "logic": 4, "japanese": 5},
        "comments": {"overall": "丁寧, 正確"},
        "evaluator": "Alice",
        "processing_time": 1.25,
        "evaluated_at": datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc),
        "question": Question(id="q1", title="Q1", content="What is 2+2?", created_at=CREATED),
        "model": LLMModel(id="m1", name="alpha", created_at=CREATED),
    }
    values.update(overrides)
    return DetailedEvaluation(**values)


def _parse(content: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(content[len(BOM):])))


def test_csv_starts_with_bom_and_header() -> None:
    content = build_evaluations_csv([])
    assert content.startswith(BOM)
    assert _parse(content) == [list(CSV_HEADERS)]


def test_csv_quotes_only_when_needed() -> None:
    content = build_evaluations_csv([_row()])
    assert '"He said ""hi"", then\nleft"' in content
    assert '"丁寧, 正確"' in content
    assert ",alpha," in content

    header, record = _parse(content)
    assert record[header.index("Response")] == 'He said "hi", then\nleft'
    assert record[header.index("Overall")] == "4.5"
    assert record[header.index("Average")] == "4.50"
    assert record[header.index("Question Title")] == "Q1"


def test_csv_marks_missing_joins_unknown() -> None:
    header, record = _parse(build_evaluations_csv([_row(model=None, question=None)]))
    assert record[header.index("Model")] == "unknown"
    assert record[header.index("Question Title")] == "unknown"
    assert record[header.index("Environment")] == ""


def test_export_filename_contains_date() -> None:
    assert export_filename(date(2024, 3, 5)) == "evaluation_results_2024-03-05.csv"


def test_csv_escapes_quotes_commas_and_newlines() -> None:
    content = build_evaluations_csv([_row(response='Hello, "World"\n')])
    assert '"Hello, ""World""\n"' in content
    header, record = _parse(content)
    assert record[header.index("Response")] == 'Hello, "World"\n'
