# reportcards/report/errors.py


class InvalidReportCardInput(ValueError):
    """Report-card data (or its template config) is missing required parts or is malformed."""
