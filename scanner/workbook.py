"""
Spreadsheet wrapper: reads task records from the media_url column and writes
match_result / error_msg back next to the original data.
"""

import zipfile
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

import structlog
from lxml import etree
from openpyxl import load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from scanner.records import TaskRecord

logger = structlog.get_logger(__name__)

URL_COLUMN = "media_url"
MATCH_COLUMN = "match_result"
ERROR_COLUMN = "error_msg"
MATCH_COLUMN_WIDTH = 15
ERROR_COLUMN_WIDTH = 30

PathLike = Union[str, Path]


class WorkbookError(Exception):
    """Raised when the input cannot be read or the report cannot be written."""


def _open_workbook(path: PathLike):
    try:
        return load_workbook(path)
    except FileNotFoundError:
        raise WorkbookError(f"Input file not found: {path}")
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError,
            ValueError, TypeError, etree.LxmlError) as e:
        raise WorkbookError(f"Failed to open workbook {path}: {e}")


def _first_sheet(workbook, path: PathLike):
    if not workbook.worksheets:
        raise WorkbookError(f"Workbook has no worksheets: {path}")
    return workbook.worksheets[0]


def _cell_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def load_records(path: PathLike) -> List[TaskRecord]:
    """Read one TaskRecord per non-blank media_url cell of the first worksheet."""
    logger.info("reading_workbook", path=str(path))
    workbook = _open_workbook(path)
    try:
        sheet = _first_sheet(workbook, path)
        logger.info("using_worksheet", sheet=sheet.title)

        rows = list(sheet.iter_rows(values_only=True))
        if not any(value is not None for row in rows for value in row):
            raise WorkbookError(f"Worksheet '{sheet.title}' is empty")

        url_index = None
        for index, value in enumerate(rows[0]):
            if _cell_text(value).lower() == URL_COLUMN:
                url_index = index
                break

        if url_index is None:
            raise WorkbookError(f"Column '{URL_COLUMN}' not found in worksheet '{sheet.title}'")

        logger.info("url_column_found", column=URL_COLUMN, index=url_index)

        records = []
        # Sheet rows are 1-based and row 1 is the header.
        for row_number, row in enumerate(rows[1:], start=2):
            if len(row) <= url_index:
                continue
            url = _cell_text(row[url_index])
            if not url:
                continue
            records.append(TaskRecord(url=url, position=row_number))

        logger.info("records_loaded", valid_urls=len(records))
        return records
    finally:
        workbook.close()


def output_path_for(input_path: PathLike, now: Optional[datetime] = None) -> Path:
    """Derive the report path: <stem>_results_<YYYYmmddHHMMSS><suffix> beside the input."""
    input_path = Path(input_path)
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    return input_path.with_name(f"{input_path.stem}_results_{stamp}{input_path.suffix}")


def export_records(input_path: PathLike, output_path: PathLike, records: List[TaskRecord]) -> Path:
    """Copy the input workbook to output_path with match_result and error_msg columns appended."""
    logger.info("exporting_results", output=str(output_path))
    workbook = _open_workbook(input_path)
    try:
        sheet = _first_sheet(workbook, input_path)

        match_col = sheet.max_column + 1
        error_col = match_col + 1
        match_letter = get_column_letter(match_col)
        error_letter = get_column_letter(error_col)

        sheet.cell(row=1, column=match_col, value=MATCH_COLUMN)
        sheet.cell(row=1, column=error_col, value=ERROR_COLUMN)
        sheet.column_dimensions[match_letter].width = MATCH_COLUMN_WIDTH
        sheet.column_dimensions[error_letter].width = ERROR_COLUMN_WIDTH

        for record in records:
            sheet.cell(row=record.position, column=match_col, value=int(record.match_result))
            sheet.cell(row=record.position, column=error_col, value=record.error or None)

        try:
            workbook.save(output_path)
        except OSError as e:
            raise WorkbookError(f"Failed to save workbook {output_path}: {e}")
    finally:
        workbook.close()

    logger.info("results_exported", output=str(output_path), rows=len(records))
    return Path(output_path)
