"""
services/report_renderer.py

Turns a stored case into the printable report: a JSON layout for the
preview pane and a PDF built with ReportLab Platypus. Both share the same
section builders so the preview always matches the printed document.
"""
from __future__ import annotations

import io
import logging
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape, letter, portrait
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    HRFlowable,
    KeepTogether,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from medlegal.core.config import settings
from medlegal.db.schemas import ReportOptions
from medlegal.services.injury_classification import build_opinion
from medlegal.services.section_registry import SECTION_IDS, SECTIONS, get_section, section_payload
from medlegal.utils.helpers import NOT_AVAILABLE, calculate_age, display, format_date

logger = logging.getLogger(__name__)

REPORT_TITLE = "MEDICO-LEGAL EXPERT REPORT"
PRIMARY_COLOR = "#0E7C7B"
SECONDARY_COLOR = "#4A5568"

INSTRUCTION_TEXT = (
    "This report is entirely independent and is prepared for the injuries sustained in the accident. "
    "The instructing party has requested an examination to be conducted with a report to include the "
    "nature and extent of the claimant's injuries, treatment received, effects on lifestyle and whether "
    "any further treatment is appropriate."
)

METHODOLOGY_TEXT = (
    "Methodology: I have been instructed to prepare this medical report for The Court in connection "
    "with the personal injuries sustained by the claimant. I interviewed and examined the claimant."
)

CASE_CLASSIFICATION_TEXT = (
    "I understand that my overriding duty is to the court, both in preparing this report and in giving "
    "oral evidence. I have complied and will continue to comply with that duty.",
    "I believe that the facts I have stated in this report are true and that the opinions I have "
    "expressed are correct.",
    "I understand that my duty to the court overrides any obligation to the person from whom I have "
    "received instructions or by whom I am paid.",
    "I have drawn the court's attention to any matter of which I am aware that might affect my opinion.",
    "I have indicated the sources of all information I have used.",
    "I have not included anything in this report that has been suggested to me by anyone, including the "
    "lawyers, without forming my own independent view of the matter.",
    "I will notify those instructing me immediately and confirm in writing if for any reason my existing "
    "report requires correction or qualification.",
    "I understand that this report will be the evidence that I give, subject to any corrections or "
    "qualifications I may make before swearing to its veracity and I may be cross-examined on my report "
    "by a cross-examiner assisted by an expert.",
    "I confirm that I have not entered into any arrangement in which the amount or payment of my fee is "
    "in any way dependent on the outcome of the case.",
)

ADDITIONAL_INJURY_STATEMENT = (
    "There were no other injuries / symptoms which were stated in the instructions other than those "
    "listed in the medical report suffered by the claimant as told to me during the examination after "
    "direct questioning."
)

INJURY_TABLE_HEADER = ["Injury", "Current Status", "Prognosis", "Treatment", "Classification"]

DATE = "date"

# (payload key, label, kind) per section. Keys missing from a payload print N/A.
FieldSpec = Tuple[str, str, Optional[str]]

SECTION_FIELDS: Dict[str, Sequence[FieldSpec]] = {
    "claimant": (
        ("full_name", "Full Name", None),
        ("date_of_birth", "Date of Birth", DATE),
        ("gender", "Gender", None),
        ("address", "Address", None),
        ("accompanied_by", "Accompanied By", None),
        ("date_of_examination", "Date of Examination", DATE),
        ("place_of_examination", "Place of Examination", None),
        ("time_spent", "Time Spent with Claimant", None),
        ("help_with_communication", "Help with Communication", None),
        ("interpreter_name", "Interpreter", None),
        ("instructing_party", "Instructing Party", None),
        ("instructing_party_ref", "Instructing Party Reference", None),
        ("solicitor_name", "Solicitor", None),
        ("reference_number", "Reference Number", None),
        ("medco_ref_number", "MedCo Reference", None),
    ),
    "accident": (
        ("accident_date", "Date of Accident", DATE),
        ("time_of_day", "Time of Day", None),
        ("vehicle_location", "Location", None),
        ("weather_conditions", "Weather", None),
        ("accident_type", "Type of Accident", None),
        ("vehicle_type", "Claimant's Vehicle", None),
        ("claimant_position", "Claimant's Position", None),
        ("speed", "Speed", None),
        ("third_party_vehicle", "Third Party Vehicle", None),
        ("impact_location", "Impact Location", None),
        ("vehicle_movement", "Vehicle Movement", None),
        ("damage_severity", "Damage", None),
        ("seat_belt_worn", "Seat Belt Worn", None),
        ("head_rest_fitted", "Head Rest Fitted", None),
        ("air_bag_deployed", "Air Bag Deployed", None),
        ("collision_impact", "Collision Impact", None),
    ),
    "physical": (
        ("other_injuries_description", "Other Injuries", None),
        ("additional_notes", "Additional Notes", None),
    ),
    "psychological": (
        ("travel_anxiety_symptoms", "Symptoms", None),
        ("travel_anxiety_onset", "Onset", None),
        ("travel_anxiety_initial_severity", "Initial Severity", None),
        ("travel_anxiety_current_severity", "Current Severity", None),
        ("travel_anxiety_resolution_days", "Resolved After (days)", None),
    ),
    "treatments": (
        ("received_treatment_at_scene", "Treatment at Scene", None),
        ("scene_ambulance_arrived", "Ambulance Attended", None),
        ("went_to_hospital", "Attended A&E", None),
        ("hospital_name", "Hospital", None),
        ("hospital_x_ray", "X-Ray", None),
        ("hospital_ct_scan", "CT Scan", None),
        ("went_to_gp_walk_in", "Attended GP / Walk-in Centre", None),
        ("days_to_gp_walk_in", "Days Before GP Attendance", None),
        ("physiotherapy_sessions", "Physiotherapy Sessions", None),
        ("current_medication", "Current Medication", None),
    ),
    "lifestyle": (
        ("current_job_title", "Job Title", None),
        ("work_status", "Work Status", None),
        ("days_off_work", "Days Off Work", None),
        ("days_light_duties", "Days on Light Duties", None),
        ("work_difficulties", "Work Difficulties", None),
        ("sleep_disturbances", "Sleep Disturbance", None),
        ("domestic_activities", "Domestic Activities Affected", None),
        ("lives_with_who", "Lives With", None),
        ("number_of_children", "Number of Children", None),
        ("sport_leisure_activities", "Sport / Leisure Affected", None),
        ("social_activities", "Social Activities Affected", None),
    ),
    "family": (
        ("has_previous_accident", "Previous Accident", None),
        ("previous_accident_year", "Year of Previous Accident", None),
        ("previous_accident_recovery", "Recovery", None),
        ("has_previous_medical_condition", "Previous Medical Condition", None),
        ("previous_medical_condition_details", "Condition Details", None),
        ("has_exceptional_severity", "Exceptional Severity Claimed", None),
        ("has_exceptional_circumstances", "Exceptional Circumstances Claimed", None),
        ("physiotherapy_preference", "Physiotherapy Preference", None),
    ),
    "work": (
        ("time_off_work", "Time Off Work", None),
        ("work_accommodations", "Work Accommodations", None),
        ("additional_notes", "Additional Notes", None),
    ),
    "prognosis": (
        ("overall_prognosis", "Overall Prognosis", None),
        ("expected_recovery_time", "Expected Recovery Time", None),
        ("permanent_impairment", "Permanent Impairment", None),
        ("future_care_plans", "Future Care Plans", None),
        ("treatment_recommendations", "Treatment Recommendations", None),
    ),
    "expert": (
        ("examiner", "Examiner", None),
        ("credentials", "Credentials", None),
        ("specialty", "Specialty", None),
        ("license_number", "Licence Number", None),
        ("experience_years", "Years of Experience", None),
        ("signature_date", "Signature Date", DATE),
    ),
}

# Free-text summaries printed under each section's table
SECTION_SUMMARIES: Dict[str, Sequence[str]] = {
    "accident": ("accident_description",),
    "physical": ("physical_injury_summary",),
    "treatments": ("treatment_summary",),
    "lifestyle": ("lifestyle_summary", "impact_summary"),
    "family": ("medical_history_summary", "history_summary"),
}


# ============================================================================
# Layout
# ============================================================================

def _rows(payload: Mapping[str, Any], fields: Sequence[FieldSpec]) -> List[Dict[str, str]]:
    rows = []
    for key, label, kind in fields:
        value = payload.get(key)
        rows.append({"label": label, "value": format_date(value) if kind == DATE else display(value)})
    return rows


def _claimant_extras(payload: Mapping[str, Any], rows: List[Dict[str, str]]) -> None:
    age = payload.get("age")
    if age is None:
        age = calculate_age(payload.get("date_of_birth"))
    rows.insert(2, {"label": "Age", "value": display(age)})
    ident = payload.get("identification")
    if isinstance(ident, Mapping):
        rows.append({"label": "Identification", "value": display(ident.get("type"))})


def _work_extras(payload: Mapping[str, Any], rows: List[Dict[str, str]]) -> None:
    current = payload.get("current_employment") or {}
    if not isinstance(current, Mapping):
        current = {}
    rows[:0] = [
        {"label": "Employer", "value": display(current.get("employer"))},
        {"label": "Position", "value": display(current.get("position"))},
        {"label": "Start Date", "value": display(current.get("start_date"))},
        {"label": "Duties", "value": display(current.get("duties"))},
    ]
    for job in payload.get("previous_employment") or []:
        if isinstance(job, Mapping):
            period = f"{display(job.get('start_date'))} to {display(job.get('end_date'))}"
            rows.append({
                "label": "Previous Employment",
                "value": f"{display(job.get('position'))} at {display(job.get('employer'))} ({period})",
            })


def _injury_blocks(case: Any, payload: Mapping[str, Any]) -> Tuple[Optional[List[List[str]]], List[str]]:
    injuries = [i for i in (payload.get("injuries") or []) if isinstance(i, Mapping)]
    if not injuries:
        return None, ["No physical injuries recorded."]

    impact = (section_payload(case, get_section("accident")) or {}).get("impact_location")

    table = [list(INJURY_TABLE_HEADER)]
    paragraphs = []
    for injury in injuries:
        opinion = build_opinion(injury, impact)
        table.append([
            opinion.injury_name,
            opinion.current_status,
            opinion.prognosis_short,
            opinion.treatment_short,
            opinion.classification,
        ])
        paragraphs.append(
            f"{opinion.injury_name}: onset {opinion.onset}, initially {opinion.initial_severity}, "
            f"currently {opinion.current_severity}.\n"
            f"Mechanism: {opinion.mechanism}\n"
            f"Examination: {opinion.examination}\n"
            f"Treatment Recommendations: {opinion.treatment_recommendation}\n"
            f"Prognosis: {opinion.prognosis}\n"
            f"Additional Report Required: {opinion.additional_report_required}"
        )
    paragraphs.append(ADDITIONAL_INJURY_STATEMENT)
    return table, paragraphs


_EXTRAS: Dict[str, Callable[[Mapping[str, Any], List[Dict[str, str]]], None]] = {
    "claimant": _claimant_extras,
    "work": _work_extras,
}


def _section_block(case: Any, section) -> Dict[str, Any]:
    block: Dict[str, Any] = {"id": section.id, "title": section.name, "rows": [], "paragraphs": [], "table": None}
    payload = section_payload(case, section)
    if not payload:
        block["paragraphs"].append("No information recorded.")
        return block

    rows = _rows(payload, SECTION_FIELDS.get(section.id, ()))
    if section.id in _EXTRAS:
        _EXTRAS[section.id](payload, rows)
    block["rows"] = rows

    if section.id == "physical":
        block["table"], block["paragraphs"] = _injury_blocks(case, payload)

    for key in SECTION_SUMMARIES.get(section.id, ()):
        text = payload.get(key)
        if isinstance(text, str) and text.strip():
            block["paragraphs"].append(text.strip())
    return block


def _claimant_name(case: Any) -> str:
    payload = section_payload(case, SECTIONS[0]) or {}
    return payload.get("full_name") or "Unknown Claimant"


def _report_date(case: Any) -> str:
    payload = section_payload(case, SECTIONS[0]) or {}
    return format_date(payload.get("date_of_report") or date.today())


def _examiner(case: Any) -> str:
    expert = section_payload(case, SECTIONS[-1]) or {}
    return expert.get("examiner") or settings.DEFAULT_EXPERT_NAME or "the examining expert"


def _declaration_block(case: Any) -> Dict[str, Any]:
    return {
        "id": "declaration",
        "title": "Declaration",
        "rows": [],
        "paragraphs": [
            f"I, {_examiner(case)}, am a medico-legal practitioner. Full details of my qualifications and "
            "experience entitling me to provide an expert opinion can be found on the last page of this "
            "medical report.",
            METHODOLOGY_TEXT,
            *CASE_CLASSIFICATION_TEXT,
        ],
        "table": None,
    }


def _cv_block(case: Any) -> Dict[str, Any]:
    expert = section_payload(case, SECTIONS[-1]) or {}
    rows = [
        {"label": "Name", "value": display(expert.get("examiner") or settings.DEFAULT_EXPERT_NAME)},
        {"label": "Credentials", "value": display(expert.get("credentials"))},
    ]
    for key, label in (
        ("specialty", "Specialty"),
        ("licensure_state", "Licensure"),
        ("license_number", "Licence Number"),
        ("experience_years", "Years of Experience"),
        ("contact_information", "Contact"),
    ):
        if expert.get(key) not in (None, ""):
            rows.append({"label": label, "value": display(expert.get(key))})
    return {"id": "expert_cv", "title": "Medical Expert's Curriculum Vitae", "rows": rows,
            "paragraphs": [], "table": None}


def build_report(case: Any, options: Optional[ReportOptions] = None) -> Dict[str, Any]:
    """Ordered printable layout of a case, honouring the report options."""
    options = options or ReportOptions()
    wanted = set(options.sections_to_include or SECTION_IDS)

    sections: List[Dict[str, Any]] = []
    if options.include_cover_page:
        sections.append({
            "id": "cover",
            "title": REPORT_TITLE,
            "rows": [
                {"label": "Reference", "value": display(getattr(case, "case_number", None))},
                {"label": "Date of Report", "value": _report_date(case)},
                {"label": "Claimant", "value": _claimant_name(case)},
                {"label": "Prepared by", "value": settings.REPORT_AGENCY_NAME},
            ],
            "paragraphs": [INSTRUCTION_TEXT],
            "table": None,
        })

    for section in SECTIONS:
        if section.id in wanted:
            sections.append(_section_block(case, section))

    if options.include_declaration:
        sections.append(_declaration_block(case))
    if options.include_expert_cv:
        sections.append(_cv_block(case))

    return {
        "case_id": getattr(case, "id", None),
        "case_number": getattr(case, "case_number", None) or NOT_AVAILABLE,
        "title": REPORT_TITLE,
        "claimant_name": _claimant_name(case),
        "report_date": _report_date(case),
        "completion_percentage": getattr(case, "completion_percentage", 0) or 0,
        "sections": sections,
    }


# ============================================================================
# PDF
# ============================================================================

def _page_size(options: ReportOptions):
    size = A4 if options.page_size == "a4" else letter
    return landscape(size) if options.orientation == "landscape" else portrait(size)


def _text(value: str) -> str:
    return escape(value).replace("\n", "<br/>")


def _table(data: list, col_widths: list, header_color: Optional[str] = PRIMARY_COLOR) -> Table:
    """Styled ReportLab table; header_color=None renders a label/value grid."""
    t = Table(data, colWidths=col_widths, repeatRows=1 if header_color else 0)
    style = [
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 8.5),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#e5e7eb")),
        ("PADDING", (0, 0), (-1, -1), 5),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
    if header_color:
        style += [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(header_color)),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f8fafc")]),
        ]
    else:
        style += [
            ("BACKGROUND", (0, 0), (0, -1), colors.HexColor("#f1f5f9")),
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ]
    t.setStyle(TableStyle(style))
    return t


def render_pdf(case: Any, options: Optional[ReportOptions] = None) -> bytes:
    """Render the report layout to PDF bytes."""
    options = options or ReportOptions()
    layout = build_report(case, options)
    pagesize = _page_size(options)

    buf = io.BytesIO()
    margin = 0.75 * inch
    doc_pdf = SimpleDocTemplate(
        buf, pagesize=pagesize,
        rightMargin=margin, leftMargin=margin,
        topMargin=margin, bottomMargin=margin,
        title=f"{REPORT_TITLE} {layout['case_number']}",
        author=settings.REPORT_AGENCY_NAME,
    )
    width = pagesize[0] - 2 * margin

    styles = getSampleStyleSheet()

    def S(name: str, **kw):
        return ParagraphStyle(name, parent=styles["Normal"], **kw)

    title_st = S("T", fontSize=18, spaceAfter=6, alignment=TA_CENTER,
                 textColor=colors.HexColor(PRIMARY_COLOR), fontName="Helvetica-Bold")
    sub_st = S("Sub", fontSize=10, spaceAfter=10, alignment=TA_CENTER,
               textColor=colors.HexColor(SECONDARY_COLOR))
    sec_st = S("Sec", fontSize=12, spaceBefore=14, spaceAfter=6,
               textColor=colors.HexColor(PRIMARY_COLOR), fontName="Helvetica-Bold")
    body_st = S("Body", fontSize=9, leading=13, spaceAfter=4)
    cell_st = S("Cell", fontSize=8.5, leading=11)

    story = []
    for block in layout["sections"]:
        if block["id"] == "cover":
            story.append(Spacer(1, 1.2 * inch))
            story.append(Paragraph(_text(block["title"]), title_st))
            story.append(Paragraph(_text(settings.REPORT_AGENCY_NAME), sub_st))
            story.append(HRFlowable(width="100%", thickness=1, color=colors.HexColor(PRIMARY_COLOR)))
            story.append(Spacer(1, 16))
        else:
            if block["id"] == "declaration":
                story.append(PageBreak())
            story.append(Paragraph(_text(block["title"]), sec_st))

        if block["rows"]:
            data = [[r["label"], Paragraph(_text(r["value"]), cell_st)] for r in block["rows"]]
            story.append(KeepTogether(_table(data, [width * 0.35, width * 0.65], header_color=None)))
            story.append(Spacer(1, 6))

        if block["table"]:
            header, *body = block["table"]
            data = [header] + [[Paragraph(_text(c), cell_st) for c in row] for row in body]
            story.append(_table(data, [width / len(header)] * len(header)))
            story.append(Spacer(1, 6))

        for paragraph in block["paragraphs"]:
            story.append(Paragraph(_text(paragraph), body_st))

        if block["id"] == "cover":
            story.append(PageBreak())

    footer = f"{layout['claimant_name']} - {layout['report_date']}"

    def _footer(canvas, doc):
        canvas.saveState()
        canvas.setFont("Helvetica", 7.5)
        canvas.setFillColor(colors.HexColor(SECONDARY_COLOR))
        canvas.drawString(margin, 0.5 * inch, footer)
        canvas.drawRightString(pagesize[0] - margin, 0.5 * inch, f"Page {doc.page}")
        canvas.restoreState()

    if options.include_footer_on_every_page:
        doc_pdf.build(story, onFirstPage=_footer, onLaterPages=_footer)
    else:
        doc_pdf.build(story)

    logger.info("Rendered PDF for case %s (%d bytes)", layout["case_number"], buf.tell())
    return buf.getvalue()
