"""
Pydantic validation schemas
"""
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from medlegal.db.models import CaseStatus, UserRole

Onset = Literal["Same Day", "Next Day", "Few Days Later"]
Severity = Literal["Mild", "Moderate", "Severe"]
CurrentSeverity = Literal["Mild", "Moderate", "Severe", "Resolved"]
InjuryClassification = Literal["Whiplash", "Whiplash Associated", "Non-whiplash", "Psychological"]

ExaminationVenue = Literal[
    "Face to Face at Meeting Room, North, Ibis, Garstang Rd, Preston PR3 5JE",
    "Regus Office, Centenary Way, Salford M50 1RF",
]


def _unlocked_by(value: Any, enabled: bool, field_name: str, condition: str) -> None:
    """Reject a conditional sub-field that was filled in while its trigger is off."""
    if value not in (None, "", []) and not enabled:
        raise ValueError(f"{field_name} can only be set when {condition}")


def _has_other(values: Optional[List[str]]) -> bool:
    return bool(values) and "Other" in values


class SectionPayload(BaseModel):
    """Base for all section sub-objects stored as JSON on the case row."""
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


# ============================================================================
# Section Schemas
# ============================================================================

class Identification(BaseModel):
    type: Literal["Passport", "Driving Licence", "Other"] = "Passport"


class ClaimantDetails(SectionPayload):
    full_name: str = Field(..., min_length=1)
    date_of_birth: date
    age: Optional[int] = Field(None, ge=0, le=130)
    gender: Literal["Male", "Female", "Not specified"] = "Not specified"
    address: Optional[str] = None
    identification: Optional[Identification] = None
    accompanied_by: Literal["Alone", "Spouse", "Father", "Mother", "Other"] = "Alone"
    date_of_report: date = Field(default_factory=date.today)
    date_of_examination: Optional[date] = None
    time_spent: str = "15 min"
    help_with_communication: bool = False
    interpreter_name: Optional[str] = None
    interpreter_relationship: Optional[str] = None
    place_of_examination: ExaminationVenue = "Face to Face at Meeting Room, North, Ibis, Garstang Rd, Preston PR3 5JE"
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    instructing_party: Optional[str] = None
    instructing_party_ref: Optional[str] = None
    solicitor_name: Optional[str] = None
    reference_number: Optional[str] = None
    medco_ref_number: Optional[str] = None

    @model_validator(mode="after")
    def check_interpreter(self):
        for name in ("interpreter_name", "interpreter_relationship"):
            _unlocked_by(getattr(self, name), self.help_with_communication, name,
                         "help_with_communication is true")
        return self


class AccidentDetails(SectionPayload):
    accident_date: date
    time_of_day: Optional[Literal["Morning", "Afternoon", "Evening", "Night"]] = None
    vehicle_location: Optional[Literal["Main Road", "Minor Road", "Motorway", "Roundabout", "Other"]] = None
    weather_conditions: Optional[str] = None
    accident_type: str = Field(..., min_length=1)
    vehicle_type: Optional[Literal["Car", "Bus", "Van", "Motorcycle", "Truck", "Other"]] = None
    claimant_position: Optional[Literal["Driver", "Front Passenger", "Rear Passenger", "Other"]] = None
    speed: Optional[Literal["Slow", "Medium", "High"]] = None
    third_party_vehicle: Optional[Literal["Car", "Van", "Bus", "Truck", "Motorcycle", "Other"]] = None
    impact_location: Optional[Literal["Rear", "Front", "Left Side", "Right Side", "Multiple"]] = None
    vehicle_movement: Optional[Literal["Stationary", "Moving", "Parked", "Other"]] = None
    damage_severity: Optional[
        Literal["Mildly Damaged", "Moderately Damaged", "Severely Damaged", "Written Off"]
    ] = None
    seat_belt_worn: bool = True
    head_rest_fitted: bool = True
    air_bag_deployed: bool = False
    collision_impact: Optional[
        Literal["Forward/Backward", "Backward/Forward", "Sideways", "Multiple Directions", "None"]
    ] = None
    accident_description: Optional[str] = None


class Injury(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    type: Literal["Neck", "Upper Back / Shoulders", "Lower Back", "Bruising", "Headaches", "Other"]
    description: Optional[str] = None
    onset_time: Onset
    initial_severity: Severity
    current_severity: CurrentSeverity
    resolution_days: Optional[str] = None
    wants_physiotherapy: Optional[bool] = None
    needs_specialist_referral: Optional[bool] = None
    # Blank classification is filled on save; blank mechanism is derived in the report
    mechanism: Optional[str] = None
    classification: Optional[InjuryClassification] = None

    @model_validator(mode="after")
    def check_conditional_fields(self):
        if self.type == "Other" and not self.description:
            raise ValueError("description is required when injury type is Other")
        _unlocked_by(self.description, self.type == "Other", "description", "injury type is Other")
        _unlocked_by(self.resolution_days, self.current_severity == "Resolved", "resolution_days",
                     "current_severity is Resolved")
        return self


class PhysicalInjury(SectionPayload):
    injuries: Optional[List[Injury]] = None
    other_injuries_description: Optional[str] = None
    additional_notes: Optional[str] = None
    physical_injury_summary: Optional[str] = None


class PsychologicalInjuries(SectionPayload):
    travel_anxiety_symptoms: Optional[List[str]] = None
    travel_anxiety_onset: Optional[Onset] = None
    travel_anxiety_initial_severity: Optional[Severity] = None
    travel_anxiety_current_severity: Optional[CurrentSeverity] = None
    travel_anxiety_resolution_days: Optional[str] = None

    @model_validator(mode="after")
    def check_resolution(self):
        _unlocked_by(self.travel_anxiety_resolution_days,
                     self.travel_anxiety_current_severity == "Resolved",
                     "travel_anxiety_resolution_days", "travel_anxiety_current_severity is Resolved")
        return self


class Treatments(SectionPayload):
    # Accident scene
    received_treatment_at_scene: Optional[bool] = None
    scene_first_aid: Optional[bool] = None
    scene_neck_collar: Optional[bool] = None
    scene_ambulance_arrived: Optional[bool] = None
    scene_police_arrived: Optional[bool] = None
    scene_other_treatment: Optional[bool] = None
    scene_other_treatment_details: Optional[str] = None

    # A&E
    went_to_hospital: Optional[bool] = None
    hospital_name: Optional[str] = None
    hospital_no_treatment: Optional[bool] = None
    hospital_x_ray: Optional[bool] = None
    hospital_ct_scan: Optional[bool] = None
    hospital_bandage: Optional[bool] = None
    hospital_neck_collar: Optional[bool] = None
    hospital_other_treatment: Optional[bool] = None
    hospital_other_treatment_details: Optional[str] = None

    # GP / walk-in centre
    went_to_gp_walk_in: Optional[bool] = None
    days_to_gp_walk_in: Optional[str] = None

    # Current medication
    taking_paracetamol: Optional[bool] = None
    taking_ibuprofen: Optional[bool] = None
    taking_codeine: Optional[bool] = None
    taking_other_medication: Optional[bool] = None
    other_medication_details: Optional[str] = None

    physiotherapy_sessions: Optional[str] = None
    treatment_summary: Optional[str] = None

    # Free-text fields used by the printed report
    emergency_treatment: Optional[str] = None
    gp_visits: Optional[str] = None
    gp_treatment_details: Optional[str] = None
    hospital_treatment: Optional[str] = None
    physiotherapy: Optional[str] = None
    physiotherapy_details: Optional[str] = None
    other_treatments: Optional[str] = None
    current_medication: Optional[str] = None

    @model_validator(mode="after")
    def check_other_details(self):
        _unlocked_by(self.scene_other_treatment_details, bool(self.scene_other_treatment),
                     "scene_other_treatment_details", "scene_other_treatment is true")
        _unlocked_by(self.hospital_other_treatment_details, bool(self.hospital_other_treatment),
                     "hospital_other_treatment_details", "hospital_other_treatment is true")
        _unlocked_by(self.other_medication_details, bool(self.taking_other_medication),
                     "other_medication_details", "taking_other_medication is true")
        return self


class LifestyleImpact(SectionPayload):
    current_job_title: Optional[str] = None
    work_status: Optional[Literal["Full-time", "Part-time", "Retired", "Student", "Other"]] = None
    second_job: Optional[str] = None

    days_off_work: Optional[str] = None
    days_light_duties: Optional[str] = None
    work_difficulties: Optional[List[str]] = None
    work_other_details: Optional[str] = None

    has_sleep_disturbance: Optional[bool] = None
    sleep_disturbances: Optional[List[str]] = None
    sleep_other_details: Optional[str] = None

    has_domestic_impact: Optional[bool] = None
    domestic_activities: Optional[List[str]] = None
    domestic_other_details: Optional[str] = None
    lives_with_who: Optional[Literal["Wife", "Parents", "Partner", "Alone", "Other"]] = None
    lives_with_other: Optional[str] = None
    number_of_children: Optional[Literal["0", "1", "2", "3", "4", "5", "6", "7", "Other"]] = None
    number_of_children_other: Optional[str] = None

    has_sport_leisure_impact: Optional[bool] = None
    sport_leisure_activities: Optional[List[str]] = None
    sport_leisure_other_details: Optional[str] = None

    has_social_impact: Optional[bool] = None
    social_activities: Optional[List[str]] = None
    social_other_details: Optional[str] = None

    lifestyle_summary: Optional[str] = None

    impact_summary: Optional[str] = None
    domestic_impact: Optional[str] = None
    work_impact: Optional[str] = None
    social_impact: Optional[str] = None
    sleep_impact: Optional[str] = None
    relationship_impact: Optional[str] = None
    hobbies_impact: Optional[str] = None

    @model_validator(mode="after")
    def check_other_details(self):
        pairs = (
            ("work_other_details", self.work_difficulties),
            ("sleep_other_details", self.sleep_disturbances),
            ("domestic_other_details", self.domestic_activities),
            ("sport_leisure_other_details", self.sport_leisure_activities),
            ("social_other_details", self.social_activities),
        )
        for name, options in pairs:
            _unlocked_by(getattr(self, name), _has_other(options), name, "Other is selected")
        _unlocked_by(self.lives_with_other, self.lives_with_who == "Other",
                     "lives_with_other", "lives_with_who is Other")
        _unlocked_by(self.number_of_children_other, self.number_of_children == "Other",
                     "number_of_children_other", "number_of_children is Other")
        return self


class FamilyHistory(SectionPayload):
    has_previous_accident: Optional[bool] = None
    previous_accident_year: Optional[str] = None
    previous_accident_recovery: Optional[Literal["Complete", "Partial"]] = None

    has_previous_medical_condition: Optional[bool] = None
    previous_medical_condition_details: Optional[str] = None

    has_exceptional_severity: Optional[bool] = None
    has_exceptional_circumstances: Optional[bool] = None

    physiotherapy_preference: Optional[
        Literal["Yes", "No", "Already ongoing", "Already recovered"]
    ] = None

    additional_notes: Optional[str] = None
    medical_history_summary: Optional[str] = None

    history_summary: Optional[str] = None
    previous_accidents: Optional[str] = None
    previous_injuries: Optional[str] = None
    pre_existing_conditions: Optional[str] = None
    family_medical_history: Optional[str] = None
    general_health: Optional[str] = None
    medication_history: Optional[str] = None

    @model_validator(mode="after")
    def check_conditional_fields(self):
        for name in ("previous_accident_year", "previous_accident_recovery"):
            _unlocked_by(getattr(self, name), bool(self.has_previous_accident), name,
                         "has_previous_accident is true")
        _unlocked_by(self.previous_medical_condition_details, bool(self.has_previous_medical_condition),
                     "previous_medical_condition_details", "has_previous_medical_condition is true")
        return self


class Employment(BaseModel):
    employer: Optional[str] = None
    position: Optional[str] = None
    start_date: Optional[str] = None
    duties: Optional[str] = None


class PreviousEmployment(Employment):
    end_date: Optional[str] = None


class WorkHistory(SectionPayload):
    current_employment: Optional[Employment] = None
    previous_employment: Optional[List[PreviousEmployment]] = None
    time_off_work: Optional[str] = None
    work_accommodations: Optional[str] = None
    additional_notes: Optional[str] = None


class Prognosis(SectionPayload):
    overall_prognosis: Optional[str] = None
    expected_recovery_time: Optional[str] = None
    permanent_impairment: Optional[str] = None
    future_care_plans: Optional[str] = None
    treatment_recommendations: Optional[List[str]] = None
    additional_notes: Optional[str] = None


class ExpertDetails(SectionPayload):
    examiner: str = Field(..., min_length=1)
    credentials: str = Field(..., min_length=1)
    licensure_state: Optional[str] = None
    license_number: Optional[str] = None
    specialty: Optional[str] = None
    experience_years: Optional[int] = Field(None, ge=0)
    contact_information: Optional[str] = None
    signature_date: Optional[date] = None


# ============================================================================
# User Schemas
# ============================================================================

class UserRegister(BaseModel):
    """Registration schema"""
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)
    full_name: str = Field(..., min_length=2, max_length=255)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        return v.strip().lower()


class UserLogin(BaseModel):
    """Login schema"""
    username: str
    password: str


class UserOut(BaseModel):
    id: int
    username: str
    full_name: str
    role: UserRole
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


# ============================================================================
# Case Schemas
# ============================================================================

class CaseSections(BaseModel):
    claimant_details: Optional[ClaimantDetails] = None
    accident_details: Optional[AccidentDetails] = None
    physical_injury_details: Optional[PhysicalInjury] = None
    psychological_injuries: Optional[PsychologicalInjuries] = None
    treatments: Optional[Treatments] = None
    lifestyle_impact: Optional[LifestyleImpact] = None
    family_history: Optional[FamilyHistory] = None
    work_history: Optional[WorkHistory] = None
    prognosis: Optional[Prognosis] = None
    expert_details: Optional[ExpertDetails] = None


class CaseCreate(CaseSections):
    """New case; the case number is generated server-side"""
    status: CaseStatus = CaseStatus.in_progress


class CaseUpdate(CaseSections):
    """Partial update; completion_percentage is recomputed, never accepted"""
    status: Optional[CaseStatus] = None


class CaseResponse(BaseModel):
    id: int
    case_number: str
    status: CaseStatus
    user_id: int
    claimant_details: Optional[Dict[str, Any]] = None
    accident_details: Optional[Dict[str, Any]] = None
    physical_injury_details: Optional[Dict[str, Any]] = None
    psychological_injuries: Optional[Dict[str, Any]] = None
    treatments: Optional[Dict[str, Any]] = None
    lifestyle_impact: Optional[Dict[str, Any]] = None
    family_history: Optional[Dict[str, Any]] = None
    work_history: Optional[Dict[str, Any]] = None
    prognosis: Optional[Dict[str, Any]] = None
    expert_details: Optional[Dict[str, Any]] = None
    completion_percentage: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CaseListResponse(BaseModel):
    items: List[CaseResponse]
    total: int


class CompletionResponse(BaseModel):
    completion_percentage: int


class SectionStatusResponse(BaseModel):
    id: str
    name: str
    icon: str
    api_path: str
    complete: bool


class ProgressResponse(BaseModel):
    case_id: int
    completion_percentage: int
    completed_sections: int
    total_sections: int
    next_section: Optional[str] = None
    sections: List[SectionStatusResponse]


class SuggestionResponse(BaseModel):
    section_id: str
    field: str
    message: str
    severity: Literal["info", "warning", "critical"]


class SuggestionSummary(BaseModel):
    critical: int = 0
    warning: int = 0
    info: int = 0
    total: int = 0


class SuggestionListResponse(BaseModel):
    case_id: int
    suggestions: List[SuggestionResponse]
    summary: SuggestionSummary
    by_section: Dict[str, List[SuggestionResponse]]


class SectionDefinitionResponse(BaseModel):
    id: str
    name: str
    icon: str
    api_path: str
    field: str


class SectionPayloadResponse(BaseModel):
    case_id: int
    section: str
    data: Optional[Dict[str, Any]] = None
    complete: bool
    completion_percentage: int


# ============================================================================
# Report Schemas
# ============================================================================

class ReportOptions(BaseModel):
    page_size: Literal["a4", "letter"] = "a4"
    orientation: Literal["portrait", "landscape"] = "portrait"
    include_cover_page: bool = True
    include_declaration: bool = True
    include_expert_cv: bool = True
    include_footer_on_every_page: bool = True
    sections_to_include: Optional[List[str]] = None

    @field_validator("sections_to_include")
    @classmethod
    def validate_section_ids(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        from medlegal.services.section_registry import SECTION_IDS

        unknown = [s for s in v if s not in SECTION_IDS]
        if unknown:
            raise ValueError(f"Unknown section id(s): {', '.join(unknown)}")
        return v


class ReportRow(BaseModel):
    label: str
    value: str


class ReportSection(BaseModel):
    id: str
    title: str
    rows: List[ReportRow] = []
    paragraphs: List[str] = []
    table: Optional[List[List[str]]] = None


class ReportPreviewResponse(BaseModel):
    case_id: int
    case_number: str
    title: str
    claimant_name: str
    report_date: str
    completion_percentage: int
    sections: List[ReportSection]
