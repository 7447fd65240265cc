"""내보내기 패키지."""

from .csv_export import BOM, CSV_HEADERS, build_evaluations_csv, evaluation_row, export_filename

__all__ = ["BOM", "CSV_HEADERS", "build_evaluations_csv", "evaluation_row", "export_filename"]
