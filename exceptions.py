"""Custom exceptions for the solar quotation app."""


class SolarQuoteError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred"):
        super().__init__(message)
        self.message = message


class ValidationError(SolarQuoteError):
    """Raised when required classification, product or customer fields are missing."""


class PersistenceError(SolarQuoteError):
    """Raised when the store cannot save or delete a record."""


class ImportFormatError(SolarQuoteError):
    """Raised when an uploaded spreadsheet is empty or cannot be parsed."""


class RenderError(SolarQuoteError):
    """Raised when the PDF renderer fails."""
    def __init__(self, message="Failed to generate PDF. Please use the Print button instead."):
        super().__init__(message)


class AuthError(SolarQuoteError):
    """Raised for any rejected login, without saying which credential was wrong."""
    def __init__(self, message="Invalid credentials"):
        super().__init__(message)
