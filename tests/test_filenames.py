from datetime import date

from devtrack_reports.application.filenames import report_filename
from devtrack_reports.domain.services import ReportKind

ON = date(2024, 3, 1)


def test_global_report_names() -> None:
    assert report_filename(ReportKind.LOOKAHEAD, "pdf", ON) == "12-Week-Lookahead-2024-03-01.pdf"
    assert report_filename(ReportKind.SALES_ACTIVITY, "excel", ON) == "Sales-Activity-4-Weeks-2024-03-01.xlsx"
    assert report_filename(ReportKind.CASHFLOW, "excel", ON) == "Cashflow-Report-2024-03-01.xlsx"
    assert report_filename(ReportKind.UNITS_EXPORT, "excel", ON) == "Units-Export-2024-03-01.xlsx"


def test_development_report_name_replaces_whitespace_runs() -> None:
    name = report_filename(ReportKind.DEVELOPMENT, "pdf", ON, "Riverside  Park Phase 2")
    assert name == "Riverside-Park-Phase-2-Report-2024-03-01.pdf"
