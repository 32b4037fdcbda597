"""Exceptions raised around the calculation core."""


class CalculatorError(ValueError):
    """Base class for calculator errors."""


class InvalidInputError(CalculatorError):
    """A loan scenario cannot be evaluated (e.g. a zero property value)."""


class MalformedImportError(CalculatorError):
    """An imported calculation document could not be parsed."""
