"""
Report preview and PDF download
"""
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from medlegal.api.v1.deps import get_owned_case
from medlegal.core.logger import logger
from medlegal.db.models import Case
from medlegal.db.schemas import ReportOptions, ReportPreviewResponse
from medlegal.services.report_renderer import build_report, render_pdf
from medlegal.utils.exceptions import ReportGenerationError

router = APIRouter()


def _pdf_response(case: Case, options: Optional[ReportOptions]) -> Response:
    try:
        pdf_bytes = render_pdf(case, options)
    except Exception as e:
        logger.exception(f"PDF generation failed for case {case.case_number}")
        raise ReportGenerationError(str(e))

    filename = f"{case.case_number}-medical-report.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{case_id}/report", response_model=ReportPreviewResponse)
def preview_report(case: Case = Depends(get_owned_case)):
    """Printable layout of the case with default report options"""
    return build_report(case)


@router.post("/{case_id}/report/pdf")
def generate_report_pdf(
    options: Optional[ReportOptions] = None,
    case: Case = Depends(get_owned_case)
):
    return _pdf_response(case, options)


@router.get("/{case_id}/pdf")
def download_report_pdf(case: Case = Depends(get_owned_case)):
    return _pdf_response(case, None)
