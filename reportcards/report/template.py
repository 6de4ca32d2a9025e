# reportcards/report/template.py
"""
Report-card template configuration.

`ReportCardTemplateConfig` is the per-school JSON blob stored with a template;
every field is optional. `resolve_template` is the one place where defaults
are applied: rendering code only ever reads a `ResolvedTemplate`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from reportcards.models.report_card import ReportCardData


class _ConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="wrap")
    @classmethod
    def _unset_when_invalid(cls, value, handler, info: ValidationInfo):
        """A mistyped option counts as unset, so its default applies."""
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


class LogosConfig(_ConfigModel):
    left_size: Optional[float] = None
    right_size: Optional[float] = None
    show_right_logo: Optional[bool] = None
    left_shape: Optional[str] = None
    right_shape: Optional[str] = None


class HeaderConfig(_ConfigModel):
    school_name_color: Optional[str] = None
    font_size: Optional[float] = None
    sub_title: Optional[str] = None
    show_affiliation: Optional[bool] = None
    show_email: Optional[bool] = None
    show_contact: Optional[bool] = None


class BrandingConfig(_ConfigModel):
    primary_color: Optional[str] = None
    accent_color: Optional[str] = None
    font_family: Optional[str] = None


class SectionsConfig(_ConfigModel):
    show_student_profile: Optional[bool] = None
    show_marks_table: Optional[bool] = None
    show_attendance: Optional[bool] = None
    show_co_scholastic: Optional[bool] = None
    show_remarks: Optional[bool] = None
    show_instructions: Optional[bool] = None
    show_grading_scale: Optional[bool] = None


class MarksTableConfig(_ConfigModel):
    header_bg_color: Optional[str] = None
    show_sno: Optional[bool] = None
    show_percentage: Optional[bool] = None
    show_grade: Optional[bool] = None
    show_max_marks: Optional[bool] = None
    zebra_rows: Optional[bool] = None
    round_percentage: Optional[bool] = None


class LayoutConfig(_ConfigModel):
    header_layout: Optional[str] = None
    orientation: Optional[str] = None
    table_density: Optional[str] = None


class ClassTermInfoConfig(_ConfigModel):
    show_exam_name: Optional[bool] = None
    show_academic_session: Optional[bool] = None
    show_result_date: Optional[bool] = None


class ResultSummaryConfig(_ConfigModel):
    show_total: Optional[bool] = None
    show_percentage: Optional[bool] = None
    show_grade: Optional[bool] = None
    show_rank: Optional[bool] = None
    show_pass_fail: Optional[bool] = None


class SignaturesConfig(_ConfigModel):
    show_class_teacher: Optional[bool] = None
    show_principal: Optional[bool] = None


class ContentConfig(_ConfigModel):
    """Editable text that overrides what the school record holds."""

    school_email: Optional[str] = None
    school_phone: Optional[str] = None
    school_address: Optional[str] = None
    affiliation: Optional[str] = None
    promoted_to: Optional[str] = None
    instructions: Optional[str] = None
    remarks: Optional[str] = None


class WatermarkConfig(_ConfigModel):
    enabled: Optional[bool] = None
    size: Optional[float] = None
    opacity: Optional[float] = None


class ReportCardTemplateConfig(_ConfigModel):
    logos: LogosConfig = Field(default_factory=LogosConfig)
    header: HeaderConfig = Field(default_factory=HeaderConfig)
    labels: Dict[str, str] = Field(default_factory=dict)
    branding: BrandingConfig = Field(default_factory=BrandingConfig)
    sections: SectionsConfig = Field(default_factory=SectionsConfig)
    marks_table: MarksTableConfig = Field(default_factory=MarksTableConfig)
    student_profile_fields: Optional[List[str]] = None
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    class_term_info: ClassTermInfoConfig = Field(default_factory=ClassTermInfoConfig)
    attendance_display: Optional[str] = None
    result_summary: ResultSummaryConfig = Field(default_factory=ResultSummaryConfig)
    signatures: SignaturesConfig = Field(default_factory=SignaturesConfig)
    content: ContentConfig = Field(default_factory=ContentConfig)
    watermark: WatermarkConfig = Field(default_factory=WatermarkConfig)


DEFAULT_LABELS: Dict[str, str] = {
    "report_title": "REPORT CARD",
    "section_student_profile": "Student Profile",
    "section_academic_performance": "Academic Performance",
    "section_scholastic": "Part I: Scholastic Areas",
    "section_co_scholastic": "Part II: Co-Scholastic Areas",
    "section_remarks": "Class Teacher Remarks",
    "section_grading_scale": "Grading Scale",
    "section_instructions": "Important Instructions",
    "affiliation_board": "(Affiliated to C.B.S.E New Delhi)",
    "student_name": "Student Name",
    "class_section": "Class & Section",
    "father_name": "Father's Name",
    "mother_name": "Mother's Name",
    "address": "Address",
    "admission_no": "Admission No",
    "contact_no": "Contact No",
    "roll_number": "Roll Number",
    "attendance": "Attendance",
    "grand_total": "Grand Total",
    "overall_grade": "Overall Grade",
    "result": "Result",
    "rank": "Rank",
    "promoted_to": "Promoted To",
    "result_date": "Result Date",
    "class_teacher": "Class Teacher",
    "principal": "Principal",
    "parent": "Parent / Guardian",
}

PROFILE_FIELDS: Tuple[str, ...] = (
    "student_name",
    "class_section",
    "father_name",
    "mother_name",
    "address",
    "admission_no",
    "contact_no",
    "roll_number",
)

DEFAULT_INSTRUCTIONS = (
    "Minimum Passing Marks in Each Subject is 33%. Students can collect their Starter Kit "
    "from fee counter after enrolment in new class. Report any discrepancies within 7 days."
)
DEFAULT_SUB_TITLE = "SENIOR SECONDARY SCHOOL"

MAX_LOGO_SIZE = 70
MAX_SCHOOL_NAME_FONT = 14
MAX_WATERMARK_SIZE = 400
DEFAULT_WATERMARK_SIZE = 500
DEFAULT_WATERMARK_OPACITY = 0.08

_LOGO_RADIUS = {"circle": "50%", "rounded": "8px", "square": "0"}
_CELL_PADDING = {"compact": "2px 4px", "normal": "4px 5px", "comfortable": "6px 8px"}
_ATTENDANCE_DISPLAYS = ("both", "fraction", "percentage")

_CSS_UNSAFE = re.compile(r"[<>{};\\\n\r]")


def css_value(value: str) -> str:
    """Strip characters that would let a config value escape its CSS declaration."""
    return _CSS_UNSAFE.sub("", value).strip()


def _on(flag: Optional[bool]) -> bool:
    return flag is not False


def _clamp(value: Optional[float], default: float, upper: float, lower: float = 0.0) -> float:
    if value is None:
        value = default
    return min(max(value, lower), upper)


def _text(*candidates: Optional[str], default: str = "") -> str:
    for c in candidates:
        if c:
            return c
    return default


@dataclass(frozen=True)
class ResolvedTemplate:
    # header / branding
    school_name: str
    school_code: str
    sub_title: str
    affiliation: str
    affiliation_board: str
    school_address: str
    school_email: str
    school_phone: str
    show_affiliation: bool
    show_email: bool
    show_contact: bool
    left_logo: str
    right_logo: str
    show_right_logo: bool
    left_logo_size: float
    right_logo_size: float
    left_logo_radius: str
    right_logo_radius: str
    school_name_color: str
    school_name_font_size: float
    font_family: str
    primary_color: str
    accent_color: str
    header_bg_color: str
    page_size: str
    cell_padding: str
    # watermark
    show_watermark: bool
    watermark_size: float
    watermark_opacity: float
    # labels
    labels: Dict[str, str]
    # sections
    show_student_profile: bool
    show_marks_table: bool
    show_attendance: bool
    show_co_scholastic: bool
    show_remarks: bool
    show_instructions: bool
    show_grading_scale: bool
    # marks table
    show_sno: bool
    show_max_marks: bool
    show_percentage: bool
    show_grade: bool
    zebra_rows: bool
    round_percentage: bool
    # class / term info
    exam_name: str
    academic_year: str
    show_exam_name: bool
    show_academic_session: bool
    show_result_date: bool
    # result summary
    attendance_display: str
    show_total: bool
    show_overall_percentage: bool
    show_overall_grade: bool
    show_rank: bool
    show_pass_fail: bool
    # signatures
    show_class_teacher_signature: bool
    show_principal_signature: bool
    principal_name: str
    # profile / content
    profile_fields: Tuple[str, ...]
    promoted_to: str
    instructions: str
    remarks: str

    def label(self, key: str) -> str:
        return self.labels.get(key, DEFAULT_LABELS.get(key, key))


def coerce_template_config(config) -> ReportCardTemplateConfig:
    if config is None:
        return ReportCardTemplateConfig()
    if isinstance(config, ReportCardTemplateConfig):
        return config
    return ReportCardTemplateConfig.model_validate(config)


def resolve_template(config: Optional[ReportCardTemplateConfig], data: ReportCardData) -> ResolvedTemplate:
    """Apply every default once: explicit config, then school record, then hard default."""
    cfg = config or ReportCardTemplateConfig()
    school = data.school
    content = cfg.content

    left_logo = school.logo_url or ""
    show_right_logo = _on(cfg.logos.show_right_logo)
    right_logo = (school.right_logo_url or school.logo_url or "") if show_right_logo else ""

    watermark_size = _clamp(cfg.watermark.size, DEFAULT_WATERMARK_SIZE, MAX_WATERMARK_SIZE)
    watermark_opacity = _clamp(cfg.watermark.opacity, DEFAULT_WATERMARK_OPACITY, 1.0)

    labels = dict(DEFAULT_LABELS)
    labels.update({k: v for k, v in cfg.labels.items() if v is not None})

    if cfg.student_profile_fields is None:
        profile_fields = PROFILE_FIELDS
    else:
        profile_fields = tuple(f for f in cfg.student_profile_fields if f in PROFILE_FIELDS)

    orientation = "landscape" if (cfg.layout.orientation or "").lower() == "landscape" else "portrait"
    density = (cfg.layout.table_density or "normal").lower()
    attendance_display = (cfg.attendance_display or "both").lower()
    if attendance_display not in _ATTENDANCE_DISPLAYS:
        attendance_display = "both"

    return ResolvedTemplate(
        school_name=(school.school_name or "School").upper(),
        school_code=school.school_code or "-",
        sub_title=_text(cfg.header.sub_title, school.sub_title, default=DEFAULT_SUB_TITLE),
        affiliation=_text(content.affiliation, school.affiliation, default="-"),
        affiliation_board=labels["affiliation_board"],
        school_address=_text(content.school_address, school.school_address),
        school_email=_text(content.school_email, school.school_email, default="-"),
        school_phone=_text(content.school_phone, school.school_phone, default="-"),
        show_affiliation=_on(cfg.header.show_affiliation),
        show_email=_on(cfg.header.show_email),
        show_contact=_on(cfg.header.show_contact),
        left_logo=left_logo,
        right_logo=right_logo,
        show_right_logo=show_right_logo,
        left_logo_size=_clamp(cfg.logos.left_size, 100, MAX_LOGO_SIZE),
        right_logo_size=_clamp(cfg.logos.right_size, 100, MAX_LOGO_SIZE),
        left_logo_radius=_LOGO_RADIUS.get((cfg.logos.left_shape or "circle").lower(), "50%"),
        right_logo_radius=_LOGO_RADIUS.get((cfg.logos.right_shape or "circle").lower(), "50%"),
        school_name_color=css_value(cfg.header.school_name_color or "#8B0000"),
        school_name_font_size=_clamp(cfg.header.font_size, 18, MAX_SCHOOL_NAME_FONT),
        font_family=css_value(cfg.branding.font_family or "Arial, sans-serif"),
        primary_color=css_value(cfg.branding.primary_color or "#1e3a8a"),
        accent_color=css_value(cfg.branding.accent_color or "#15803d"),
        header_bg_color=css_value(cfg.marks_table.header_bg_color or "#e6f0e6"),
        page_size=f"A4 {orientation}",
        cell_padding=_CELL_PADDING.get(density, _CELL_PADDING["normal"]),
        show_watermark=bool(left_logo) and _on(cfg.watermark.enabled),
        watermark_size=watermark_size,
        watermark_opacity=watermark_opacity,
        labels=labels,
        show_student_profile=_on(cfg.sections.show_student_profile),
        show_marks_table=_on(cfg.sections.show_marks_table),
        show_attendance=_on(cfg.sections.show_attendance),
        show_co_scholastic=_on(cfg.sections.show_co_scholastic),
        show_remarks=_on(cfg.sections.show_remarks),
        show_instructions=_on(cfg.sections.show_instructions),
        show_grading_scale=_on(cfg.sections.show_grading_scale),
        show_sno=_on(cfg.marks_table.show_sno),
        show_max_marks=_on(cfg.marks_table.show_max_marks),
        show_percentage=_on(cfg.marks_table.show_percentage),
        show_grade=_on(cfg.marks_table.show_grade),
        zebra_rows=_on(cfg.marks_table.zebra_rows),
        round_percentage=cfg.marks_table.round_percentage is True,
        exam_name=data.exam.exam_name or "Examination",
        academic_year=data.exam.academic_year or "N/A",
        show_exam_name=_on(cfg.class_term_info.show_exam_name),
        show_academic_session=_on(cfg.class_term_info.show_academic_session),
        show_result_date=_on(cfg.class_term_info.show_result_date),
        attendance_display=attendance_display,
        show_total=_on(cfg.result_summary.show_total),
        show_overall_percentage=_on(cfg.result_summary.show_percentage),
        show_overall_grade=_on(cfg.result_summary.show_grade),
        show_rank=_on(cfg.result_summary.show_rank),
        show_pass_fail=_on(cfg.result_summary.show_pass_fail),
        show_class_teacher_signature=_on(cfg.signatures.show_class_teacher),
        show_principal_signature=_on(cfg.signatures.show_principal),
        principal_name=school.principal_name or "",
        profile_fields=profile_fields,
        promoted_to=_text(content.promoted_to, data.promoted_to, default="-"),
        instructions=_text(content.instructions, school.instructions, default=DEFAULT_INSTRUCTIONS),
        remarks=_text(content.remarks, data.remarks),
    )
