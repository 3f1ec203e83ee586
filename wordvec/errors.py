from typing import Optional

# Exception hierarchy. Expression errors are recoverable and carry the offending
# token; DimensionMismatch marks a broken invariant and is never caught by the REPL.


class WordVecError(Exception):
    """Base class for every error raised by this package."""


class FormatError(WordVecError, ValueError):
    """Malformed model file or vocabulary file."""


class InvalidVector(WordVecError, ValueError):
    """A model vector holds a non-finite value (NaN or inf)."""


class DimensionMismatch(WordVecError, AssertionError):
    """Two vectors of different dimension were combined."""


class ExpressionError(WordVecError, ValueError):
    """Recoverable failure while parsing or evaluating a vector expression.

    Attributes:
        token (Optional[str]): Text of the offending token, None at end of input.
        position (Optional[int]): Column of the offending token in the expression.
    """

    def __init__(self, message: str, token: Optional[str] = None, position: Optional[int] = None):
        super().__init__(message)
        self.token = token
        self.position = position


class ExpressionSyntaxError(ExpressionError):
    """Empty expression, misplaced operator, unmatched paren or invalid character."""


class InvalidDivisor(ExpressionSyntaxError):
    """Division by something other than a non-zero integer literal."""


class UnknownWord(ExpressionError):
    """A word in the expression is not in the vocabulary."""
