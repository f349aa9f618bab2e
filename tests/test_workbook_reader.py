from __future__ import annotations

import io
import re
import zipfile

import pytest
from openpyxl import Workbook

from app.parsing.workbook_reader import WorkbookDecodeError, read_workbook


def _xlsx_bytes() -> bytes:
    workbook = Workbook()
    nashik = workbook.active
    nashik.title = "Nashik Region"
    nashik.append(["Scheme status report"])
    nashik.append(["Scheme ID", "Scheme Name", "Total ESR", None])
    nashik.append([101, "Ozar RR", 4, None])
    pune = workbook.create_sheet("Pune")
    pune.append(["Scheme ID", "Scheme Name"])
    pune.append(["201", "Baramati"])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _rewrite_sheet_xml(content: bytes, rewrite) -> bytes:
    source = zipfile.ZipFile(io.BytesIO(content))
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as target:
        for item in source.infolist():
            data = source.read(item.filename)
            if item.filename == "xl/worksheets/sheet1.xml":
                data = rewrite(data)
            target.writestr(item, data)
    return buffer.getvalue()


class TestXlsx:
    def test_every_worksheet_becomes_a_sheet(self) -> None:
        sheets = read_workbook(_xlsx_bytes(), "report.xlsx")

        assert [sheet.name for sheet in sheets] == ["Nashik Region", "Pune"]

    def test_values_and_trailing_blanks(self) -> None:
        nashik = read_workbook(_xlsx_bytes(), "REPORT.XLSX")[0]

        assert nashik.row(0) == ("Scheme status report",)
        assert nashik.row(1) == ("Scheme ID", "Scheme Name", "Total ESR")
        assert nashik.row(2) == (101, "Ozar RR", 4)

    def test_corrupt_workbook_raises(self) -> None:
        with pytest.raises(WorkbookDecodeError):
            read_workbook(b"this is not a zip archive", "report.xlsx")

    def test_truncated_sheet_xml_raises_decode_error(self) -> None:
        content = _rewrite_sheet_xml(_xlsx_bytes(), lambda data: data[: len(data) // 2])

        with pytest.raises(WorkbookDecodeError):
            read_workbook(content, "report.xlsx")

    def test_understated_dimension_does_not_cut_rows(self) -> None:
        content = _rewrite_sheet_xml(
            _xlsx_bytes(),
            lambda data: re.sub(rb'<dimension ref="[^"]*"\s*/>', b'<dimension ref="A1:A1"/>', data),
        )

        nashik = read_workbook(content, "report.xlsx")[0]

        assert nashik.row(1) == ("Scheme ID", "Scheme Name", "Total ESR")
        assert nashik.row(2) == (101, "Ozar RR", 4)


class TestCsv:
    def test_csv_is_one_sheet_named_after_the_file(self) -> None:
        content = "Scheme ID,Scheme Name,Total ESR\n101,Ozar RR,4\n".encode("utf-8")

        sheets = read_workbook(content, "nashik_october.csv")

        assert len(sheets) == 1
        assert sheets[0].name == "nashik_october"
        assert sheets[0].row(1) == ("101", "Ozar RR", "4")

    def test_semicolon_delimiter_and_bom(self) -> None:
        content = "Scheme ID;Scheme Name\n101;Ozar RR\n102;Niphad WSS\n".encode("utf-8-sig")

        sheet = read_workbook(content, "pune.csv")[0]

        assert sheet.row(0) == ("Scheme ID", "Scheme Name")
        assert sheet.row_count == 3

    def test_blank_cells_become_none(self) -> None:
        content = b"Scheme ID,Scheme Name,Block\n101,  ,Niphad\n,,\n"

        sheet = read_workbook(content, "nashik.csv")[0]

        assert sheet.row(1) == ("101", None, "Niphad")
        assert sheet.row_count == 2

    def test_non_utf8_csv_raises(self) -> None:
        with pytest.raises(WorkbookDecodeError):
            read_workbook(b"\xff\xfe\x00S\x00c", "report.csv")


@pytest.mark.parametrize("filename", ["report.xls", "report.pdf", "report"])
def test_unsupported_extensions_raise(filename: str) -> None:
    with pytest.raises(WorkbookDecodeError):
        read_workbook(b"content", filename)


def test_empty_upload_raises() -> None:
    with pytest.raises(WorkbookDecodeError):
        read_workbook(b"", "report.xlsx")
