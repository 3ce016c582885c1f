from __future__ import annotations


class CompanyServiceError(Exception):
    """Raised when the company data source fails to answer a query."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class CompanyNotFoundError(LookupError):
    def __init__(self, company_id: str):
        super().__init__(f"company '{company_id}' not found")
        self.company_id = company_id


class UnmappableRowError(ValueError):
    """Raised for a source row that has no usable primary key."""


class SelectionLimitError(ValueError):
    def __init__(self, max_selection: int):
        super().__init__(f"cannot select more than {max_selection} companies")
        self.max_selection = max_selection
