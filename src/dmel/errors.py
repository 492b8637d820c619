"""
Error types raised while translating, evaluating or exporting expressions.

Every error carries the symbol (table, function, variable name) that
triggered it so the caller can report it to the model author.
"""

from typing import Optional


class DMELError(Exception):
    """Base class for all package errors."""

    def __init__(self, message: str, symbol: Optional[str] = None):
        super().__init__(message)
        self.symbol = symbol


class TranslationError(DMELError):
    """Raised when an expression cannot be translated."""
    pass


class UnmatchedDelimiter(TranslationError):
    """A bracket, parenthesis or quote never closes."""
    pass


class UnknownSymbol(TranslationError):
    """An identifier is not a table, variable, parameter or built-in."""
    pass


class InvalidTableColumn(TranslationError):
    """A column reference resolves outside the table bounds."""
    pass


class MalformedMatrixLiteral(TranslationError):
    """A matrix literal has ragged rows or non-numeric elements."""
    pass


class ExpressionSyntaxError(TranslationError):
    """A construct is missing its delimiter span or has the wrong arity."""
    pass


class ExpressionTooDeep(TranslationError):
    """Expression nesting exceeds the configured depth limit."""
    pass


class InvalidDistributionParameter(DMELError):
    """A distribution parameter lies outside its valid domain."""
    pass


class TableFormatError(DMELError):
    """A table file is missing its header or holds non-numeric cells."""
    pass


class ConfigError(DMELError):
    """An export configuration file is invalid."""
    pass


class ExportIOError(DMELError):
    """Writing the model or helper stream failed."""
    pass
