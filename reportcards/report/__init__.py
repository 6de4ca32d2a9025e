from .composer import generate_report_card_html, derive_summary
from .errors import InvalidReportCardInput
from .template import ReportCardTemplateConfig

__all__ = [
    "generate_report_card_html",
    "derive_summary",
    "InvalidReportCardInput",
    "ReportCardTemplateConfig",
]
