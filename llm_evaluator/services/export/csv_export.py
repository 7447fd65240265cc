"""평가 결과 CSV 내보내기."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import date

from llm_evaluator.models import ALL_SCORE_FIELDS, DetailedEvaluation
from llm_evaluator.services.analytics.aggregate import UNKNOWN

# 스프레드시트(Excel)가 UTF-8로 인식하도록 붙이는 BOM
BOM = "\ufeff"

CSV_HEADERS: tuple[str, ...] = (
    "ID",
    "Evaluated At",
    "Model",
    "Question Title",
    "Question Content",
    "Environment",
    "Processing Spec",
    "Execution App",
    "Evaluator",
    "Processing Time (s)",
    "Response",
    "Accuracy",
    "Completeness",
    "Logic",
    "Japanese",
    "Overall",
    "Average",
    "Comment",
)


def _format_number(value: float | None) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)


def evaluation_row(row: DetailedEvaluation) -> list[str]:
    scores = row.scores
    five = [getattr(scores, name) for name in ALL_SCORE_FIELDS]
    environment = row.environment
    return [
        row.id,
        row.evaluated_at.isoformat(),
        row.model.name if row.model else UNKNOWN,
        row.question.title if row.question else UNKNOWN,
        row.question.content if row.question else UNKNOWN,
        environment.name if environment else "",
        environment.processing_spec if environment else "",
        environment.execution_app if environment else "",
        row.evaluator or "",
        _format_number(row.processing_time),
        row.response,
        *[_format_number(value) for value in five],
        f"{sum(five) / len(five):.2f}",
        row.comments.overall or "",
    ]


def build_evaluations_csv(rows: Iterable[DetailedEvaluation]) -> str:
    """헤더 + 평가당 한 줄. 쉼표/따옴표/줄바꿈이 있는 필드만 따옴표로 감싸고
    내부 따옴표는 두 번 쓴다. BOM으로 시작한다."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in rows:
        writer.writerow(evaluation_row(row))
    return BOM + buffer.getvalue()


def export_filename(today: date | None = None) -> str:
    return f"evaluation_results_{(today or date.today()).isoformat()}.csv"


__all__ = ["BOM", "CSV_HEADERS", "build_evaluations_csv", "evaluation_row", "export_filename"]
