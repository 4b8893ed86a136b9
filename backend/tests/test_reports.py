import pytest

from medlegal.db.schemas import ReportOptions
from medlegal.services.report_renderer import build_report, render_pdf


@pytest.fixture()
def case_row(full_case):
    class Row:
        id = 7
        case_number = "MED-2025-007"
        completion_percentage = 100

    row = Row()
    for key, value in full_case.items():
        setattr(row, key, value)
    row.claimant_details = {**full_case["claimant_details"], "date_of_report": "2025-03-02"}
    return row


def test_build_report_default_layout(case_row):
    report = build_report(case_row)
    ids = [s["id"] for s in report["sections"]]
    assert ids[0] == "cover"
    assert ids[1:11] == ["claimant", "accident", "physical", "psychological", "treatments",
                         "lifestyle", "family", "work", "prognosis", "expert"]
    assert ids[-2:] == ["declaration", "expert_cv"]
    assert report["claimant_name"] == "John Smith"
    assert report["report_date"] == "02/03/2025"


def test_dates_age_and_missing_values(case_row):
    claimant = next(s for s in build_report(case_row)["sections"] if s["id"] == "claimant")
    rows = {r["label"]: r["value"] for r in claimant["rows"]}
    assert rows["Date of Birth"] == "12/04/1985"
    assert rows["Age"].isdigit()
    assert rows["Address"] == "N/A"


def test_injury_table(case_row):
    physical = next(s for s in build_report(case_row)["sections"] if s["id"] == "physical")
    header, first = physical["table"]
    assert header == ["Injury", "Current Status", "Prognosis", "Treatment", "Classification"]
    assert first == ["Neck", "Mild symptoms currently present", "3 months", "Physiotherapy", "Whiplash"]


def test_options_trim_layout(case_row):
    options = ReportOptions(
        include_cover_page=False,
        include_declaration=False,
        include_expert_cv=False,
        sections_to_include=["expert", "claimant"],
    )
    ids = [s["id"] for s in build_report(case_row, options)["sections"]]
    assert ids == ["claimant", "expert"]


def test_missing_sections_print_placeholder():
    class Empty:
        id = 1
        case_number = "MED-2025-001"
        completion_percentage = 0

    report = build_report(Empty())
    prognosis = next(s for s in report["sections"] if s["id"] == "prognosis")
    assert prognosis["paragraphs"] == ["No information recorded."]
    assert report["claimant_name"] == "Unknown Claimant"


@pytest.mark.parametrize("options", [
    None,
    ReportOptions(page_size="letter", orientation="landscape", include_footer_on_every_page=False),
])
def test_render_pdf(case_row, options):
    pdf = render_pdf(case_row, options)
    assert pdf.startswith(b"%PDF")


def test_pdf_endpoints(client, auth_headers, case_id, claimant_payload):
    client.put(f"/api/v1/cases/{case_id}/sections/claimant-details", json=claimant_payload, headers=auth_headers)

    preview = client.get(f"/api/v1/cases/{case_id}/report", headers=auth_headers)
    assert preview.status_code == 200
    assert preview.json()["claimant_name"] == "John Smith"

    response = client.get(f"/api/v1/cases/{case_id}/pdf", headers=auth_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    assert "medical-report.pdf" in response.headers["content-disposition"]

    custom = client.post(
        f"/api/v1/cases/{case_id}/report/pdf",
        json={"page_size": "letter", "sections_to_include": ["claimant"]},
        headers=auth_headers,
    )
    assert custom.status_code == 200
    assert custom.content.startswith(b"%PDF")

    bad = client.post(
        f"/api/v1/cases/{case_id}/report/pdf", json={"sections_to_include": ["billing"]}, headers=auth_headers
    )
    assert bad.status_code == 422
