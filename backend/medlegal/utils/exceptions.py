"""
Custom exception classes
"""
from fastapi import HTTPException


class CaseNotFoundError(HTTPException):
    """Raised when case doesn't exist"""
    def __init__(self, case_id):
        super().__init__(
            status_code=404,
            detail=f"Case {case_id} not found"
        )


class SectionNotFoundError(HTTPException):
    """Raised when a section id or API path is not in the registry"""
    def __init__(self, section: str):
        super().__init__(
            status_code=404,
            detail=f"Section {section} not found"
        )


class UnauthorizedError(HTTPException):
    """Raised when user doesn't own resource"""
    def __init__(self):
        super().__init__(
            status_code=403,
            detail="You don't have permission to access this resource"
        )


class CaseNumberConflictError(HTTPException):
    """Raised when a generated case number is already taken"""
    def __init__(self, case_number: str):
        super().__init__(
            status_code=409,
            detail=f"Case number {case_number} already exists"
        )


class CaseSaveError(HTTPException):
    """Raised when a case write fails and is rolled back"""
    def __init__(self, what: str = "case"):
        super().__init__(
            status_code=500,
            detail=f"Failed to save {what}"
        )


class ReportGenerationError(HTTPException):
    """Raised when PDF rendering fails"""
    def __init__(self, reason: str = "Unknown error"):
        super().__init__(
            status_code=500,
            detail=f"Report generation failed: {reason}"
        )
