import sys
from pathlib import Path

import pytest
from openpyxl import Workbook


project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def make_workbook(tmp_path):
    """Write rows (header first) to an .xlsx file in tmp_path and return its path."""

    def _make(rows, name="websites.xlsx", title="Sites"):
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = title
        for row in rows:
            sheet.append(list(row))
        path = tmp_path / name
        workbook.save(path)
        return path

    return _make
