from typing import Iterator, NamedTuple, Optional

from wordvec.errors import ExpressionSyntaxError, InvalidDivisor, UnknownWord
from wordvec.vectors import WordVector

# Vector expressions over a LanguageModel, e.g. "king - man + woman" or "(a + b) / 2".
#
#   expression := term (('+' | '-') term)*
#   term       := atom ('/' integer)?
#   atom       := word | '(' expression ')'
#
# Bad characters become INVALID tokens and are reported when the parser reaches them.

WORD = "word"
NUMBER = "number"
PLUS = "+"
MINUS = "-"
LPAREN = "("
RPAREN = ")"
SLASH = "/"
INVALID = "invalid"

_SINGLE = {"+": PLUS, "-": MINUS, "(": LPAREN, ")": RPAREN, "/": SLASH}
MAX_DEPTH = 200  # deepest parenthesis nesting accepted by the parser


class Token(NamedTuple):
    kind: str
    text: str
    position: int


def _is_lower(ch: str) -> bool:
    return "a" <= ch <= "z"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Tokens:
    """Single-pass tokenizer with one token of memoized lookahead.

    Runs of a-z become WORD tokens, runs of 0-9 NUMBER tokens; whitespace is skipped and
    any other character becomes an INVALID token instead of failing the scan.
    """

    def __init__(self, text: str):
        self.text = text
        self._pos = 0
        self._peeked: Optional[Token] = None
        self._has_peeked = False

    def _scan(self) -> Optional[Token]:
        text = self.text
        n = len(text)
        while self._pos < n and text[self._pos].isspace():
            self._pos += 1
        if self._pos >= n:
            return None
        start = self._pos
        ch = text[start]
        if _is_lower(ch) or _is_digit(ch):
            same = _is_lower if _is_lower(ch) else _is_digit
            while self._pos < n and same(text[self._pos]):
                self._pos += 1
            return Token(WORD if same is _is_lower else NUMBER, text[start : self._pos], start)
        self._pos += 1
        return Token(_SINGLE.get(ch, INVALID), ch, start)

    def peek(self) -> Optional[Token]:
        """Next token without consuming it; None at end of input."""
        if not self._has_peeked:
            self._peeked = self._scan()
            self._has_peeked = True
        return self._peeked

    def take(self) -> Optional[Token]:
        """Consume and return the next token; None at end of input."""
        tok = self.peek()
        self._has_peeked = False
        self._peeked = None
        return tok

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        tok = self.take()
        if tok is None:
            raise StopIteration
        return tok


class MaybeOwned:
    """Either a borrowed model vector or a vector owned by the evaluation.

    Borrowed vectors are read-only rows of the model and are only copied by into_owned(),
    at the point where arithmetic needs a vector it can modify.
    """

    __slots__ = ("value", "is_owned")

    def __init__(self, value: WordVector, is_owned: bool):
        self.value = value
        self.is_owned = is_owned

    @classmethod
    def borrowed(cls, value: WordVector) -> "MaybeOwned":
        return cls(value, False)

    @classmethod
    def owned(cls, value: WordVector) -> "MaybeOwned":
        return cls(value, True)

    def into_owned(self) -> WordVector:
        if self.is_owned:
            return self.value
        return self.value.copy()


def _describe(tok: Optional[Token]) -> str:
    if tok is None:
        return "end of expression"
    return f"{tok.text!r} at column {tok.position}"


class Parser:
    """Recursive-descent parser that evaluates as it parses.

    Attributes:
        model: LanguageModel used for word lookups.
        tokens (Tokens): Token stream over the expression text.
    """

    def __init__(self, text: str, model):
        self.model = model
        self.tokens = Tokens(text)
        self._depth = 0

    def _error(self, message: str, tok: Optional[Token], cls=ExpressionSyntaxError):
        if tok is not None and tok.kind == INVALID:
            return ExpressionSyntaxError(
                f"Invalid character {_describe(tok)}", token=tok.text, position=tok.position
            )
        return cls(
            f"{message}: {_describe(tok)}",
            token=None if tok is None else tok.text,
            position=None if tok is None else tok.position,
        )

    def parse(self) -> WordVector:
        """Evaluate the whole expression.

        Raises:
            ExpressionSyntaxError: Empty input, misplaced operator, unmatched paren, bad char.
            InvalidDivisor: Division by zero or by something other than an integer literal.
            UnknownWord: A word not in the model's vocabulary.
        """
        if self.tokens.peek() is None:
            raise ExpressionSyntaxError("Empty expression")
        value = self.expression()
        tok = self.tokens.peek()
        if tok is not None:
            if tok.kind == RPAREN:
                raise self._error("Unmatched closing parenthesis", tok)
            raise self._error("Expected an operator", tok)
        return value.value

    def expression(self) -> MaybeOwned:
        left = self.term()
        while True:
            tok = self.tokens.peek()
            if tok is None or tok.kind not in (PLUS, MINUS):
                return left
            self.tokens.take()
            right = self.term()
            result = left.into_owned()
            if tok.kind == PLUS:
                result += right.value
            else:
                result -= right.value
            left = MaybeOwned.owned(result)

    def term(self) -> MaybeOwned:
        value = self.atom()
        tok = self.tokens.peek()
        if tok is None or tok.kind != SLASH:
            return value
        self.tokens.take()
        divisor = self.tokens.take()
        if divisor is None or divisor.kind != NUMBER:
            raise self._error("Expected an integer after '/'", divisor, InvalidDivisor)
        try:
            n = int(divisor.text)
        except ValueError as e:
            raise InvalidDivisor(
                f"Divisor too long at column {divisor.position}",
                token=divisor.text,
                position=divisor.position,
            ) from e
        if n == 0:
            raise InvalidDivisor(
                f"Division by zero at column {divisor.position}",
                token=divisor.text,
                position=divisor.position,
            )
        result = value.into_owned()
        try:
            result /= n
        except InvalidDivisor as e:
            raise InvalidDivisor(
                f"{e} at column {divisor.position}",
                token=divisor.text,
                position=divisor.position,
            ) from e
        return MaybeOwned.owned(result)

    def atom(self) -> MaybeOwned:
        tok = self.tokens.take()
        if tok is None:
            raise self._error("Expected a word or '('", tok)
        if tok.kind == WORD:
            vec = self.model.lookup(tok.text)
            if vec is None:
                raise UnknownWord(
                    f"Unknown word {tok.text!r} at column {tok.position}",
                    token=tok.text,
                    position=tok.position,
                )
            return MaybeOwned.borrowed(vec)
        if tok.kind == LPAREN:
            if self._depth >= MAX_DEPTH:
                raise ExpressionSyntaxError(
                    f"Expression nested too deeply at column {tok.position}",
                    token=tok.text,
                    position=tok.position,
                )
            self._depth += 1
            value = self.expression()
            self._depth -= 1
            close = self.tokens.take()
            if close is None or close.kind != RPAREN:
                raise self._error(
                    f"Missing ')' for '(' at column {tok.position}, found", close
                )
            return value
        raise self._error("Expected a word or '('", tok)


def parse(text: str, model) -> WordVector:
    """Evaluate a vector expression against model.

    A lone word returns the model's own read-only vector; anything computed is a new vector.

    Args:
        text: Expression such as "king - man + woman".
        model: LanguageModel providing lookup(word).

    Returns:
        Resulting WordVector.

    Raises:
        ExpressionError: Any syntax error, unknown word or invalid divisor.
    """
    return Parser(text, model).parse()
