from wordvec.errors import (
    DimensionMismatch,
    ExpressionError,
    ExpressionSyntaxError,
    FormatError,
    InvalidDivisor,
    InvalidVector,
    UnknownWord,
    WordVecError,
)
from wordvec.expression import parse
from wordvec.model import CoOccurrenceBuilder, LanguageModel, SentenceSession
from wordvec.vectors import WordVector
from wordvec.vocab import Vocabulary

# Co-occurrence word vectors in pure NumPy: windowed, distance-weighted counts,
# Laplace-smoothed row normalization, a portable binary format and "a - b + c" expressions.

__all__ = [
    "CoOccurrenceBuilder",
    "DimensionMismatch",
    "ExpressionError",
    "ExpressionSyntaxError",
    "FormatError",
    "InvalidDivisor",
    "InvalidVector",
    "LanguageModel",
    "SentenceSession",
    "UnknownWord",
    "Vocabulary",
    "WordVecError",
    "WordVector",
    "parse",
]
