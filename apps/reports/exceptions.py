"""
Domain exceptions for the reports app.

Exception Hierarchy:
    ReportsServiceError (base)
    ├── InvalidPeriodError
    └── InvalidDateRangeError

Usage:
    from apps.reports.exceptions import InvalidDateRangeError

    if start_date > end_date:
        raise InvalidDateRangeError("Start date must be on or before end date")
"""


class ReportsServiceError(Exception):
    """
    Base exception for all report errors.

    Views catch it to answer 400:

        try:
            data = PracticeReports.summary(owner, start, end)
        except ReportsServiceError as e:
            return Response({'error': str(e)}, status=400)
    """

    pass


class InvalidPeriodError(ReportsServiceError):
    """
    Raised when a period is not in YYYY-MM format.

    Example:
        raise InvalidPeriodError("Invalid period format. Use YYYY-MM")
    """

    pass


class InvalidDateRangeError(ReportsServiceError):
    """
    Raised when a date range is inverted or too long.

    Example:
        raise InvalidDateRangeError("Start date must be on or before end date")
    """

    pass
