"""
app/parsing/workbook_reader.py

Decodes uploaded scheme reports into named raw sheets.

``.xlsx``/``.xlsm`` workbooks are read with openpyxl (cached values, not
formulas). ``.csv`` files become one sheet named after the file stem so a
region hint in the file name still reaches the region resolver.
"""

from __future__ import annotations

import csv
import io
import logging
import zipfile
from pathlib import PurePath
from typing import Iterable, Sequence
from xml.etree.ElementTree import ParseError

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.domain.scheme_import import CellValue, RawSheet

logger = logging.getLogger(__name__)

WORKBOOK_EXTENSIONS = frozenset({".xlsx", ".xlsm"})
DELIMITED_EXTENSIONS = frozenset({".csv"})
SUPPORTED_EXTENSIONS = WORKBOOK_EXTENSIONS | DELIMITED_EXTENSIONS

_CSV_DELIMITERS = ",;\t|"


class WorkbookDecodeError(ValueError):
    """
    Raised when an uploaded file cannot be decoded into sheets.
    """


def _trim_row(values: Iterable[CellValue]) -> list[CellValue]:
    row = [None if isinstance(value, str) and not value.strip() else value for value in values]
    while row and row[-1] is None:
        row.pop()
    return row


def _trim_rows(rows: Sequence[list[CellValue]]) -> list[list[CellValue]]:
    trimmed = list(rows)
    while trimmed and not trimmed[-1]:
        trimmed.pop()
    return trimmed


def read_workbook(content: bytes, filename: str) -> list[RawSheet]:
    """
    Decode ``content`` according to the extension of ``filename``.

    Raises ``WorkbookDecodeError`` for empty, unsupported, or corrupt files.
    """

    if not content:
        raise WorkbookDecodeError("Uploaded file is empty.")

    suffix = PurePath(filename or "").suffix.lower()
    if suffix in WORKBOOK_EXTENSIONS:
        sheets = _read_xlsx(content)
    elif suffix in DELIMITED_EXTENSIONS:
        sheets = [_read_csv(content, sheet_name=PurePath(filename).stem)]
    else:
        supported = ", ".join(sorted(SUPPORTED_EXTENSIONS))
        raise WorkbookDecodeError(
            f"Unsupported file type '{suffix or filename}'. Supported types: {supported}."
        )

    if not sheets:
        raise WorkbookDecodeError("File contains no sheets.")
    logger.debug("Decoded %s into %d sheet(s).", filename, len(sheets))
    return sheets


def _read_xlsx(content: bytes) -> list[RawSheet]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        raise WorkbookDecodeError(f"Workbook could not be opened: {exc}") from exc

    # Sheet XML is parsed lazily in read-only mode, so iteration can fail too.
    try:
        sheets: list[RawSheet] = []
        for worksheet in workbook.worksheets:
            worksheet.reset_dimensions()
            rows = [_trim_row(values) for values in worksheet.iter_rows(values_only=True)]
            sheets.append(RawSheet.from_rows(worksheet.title, _trim_rows(rows)))
        return sheets
    except (ParseError, KeyError, ValueError, OSError, zipfile.BadZipFile) as exc:
        raise WorkbookDecodeError(f"Workbook sheet could not be read: {exc}") from exc
    finally:
        workbook.close()


def _read_csv(content: bytes, *, sheet_name: str) -> RawSheet:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise WorkbookDecodeError("CSV file must be UTF-8 encoded.") from exc

    sample = text[:4096]
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=_CSV_DELIMITERS)
        delimiter = dialect.delimiter
    except csv.Error:
        delimiter = ","

    try:
        rows = [_trim_row(row) for row in csv.reader(io.StringIO(text), delimiter=delimiter)]
    except csv.Error as exc:
        raise WorkbookDecodeError(f"CSV file could not be parsed: {exc}") from exc
    return RawSheet.from_rows(sheet_name, _trim_rows(rows))
