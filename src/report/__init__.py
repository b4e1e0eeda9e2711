from report.render import (
    EXIT_ERROR,
    EXIT_OK,
    EXIT_VIOLATIONS,
    Report,
    ReportFormat,
    remediation,
    render,
)

__all__ = [
    "EXIT_ERROR",
    "EXIT_OK",
    "EXIT_VIOLATIONS",
    "Report",
    "ReportFormat",
    "remediation",
    "render",
]
