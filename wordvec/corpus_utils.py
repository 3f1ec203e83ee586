import os
import re
from collections import Counter
from typing import Iterable, Iterator, List, Optional, Tuple

from wordvec.errors import FormatError
from wordvec.model import CoOccurrenceBuilder

# Corpus side: read .txt files, split into sentences on '.', pick the most common words,
# and feed one builder session per sentence. Tokens are lowercase runs of a-z.

DEFAULT_WINDOW_RADIUS = 10
DEFAULT_NUM_WORDS = 30000

_WORD_RE = re.compile(r"[a-z]+")


def tokenize_simple(text: str) -> List[str]:
    """Lowercase and split on anything that is not a letter.

    Args:
        text: Raw input string.

    Returns:
        List of token strings.
    """
    return _WORD_RE.findall(text.lower())


def split_sentences(text: str) -> Iterator[List[str]]:
    """Yield the tokens of each '.'-terminated sentence, skipping empty ones."""
    for chunk in text.split("."):
        tokens = tokenize_simple(chunk)
        if tokens:
            yield tokens


def iter_corpus_files(directory: str) -> List[str]:
    """Paths of the .txt files directly inside directory, sorted by name."""
    names = sorted(n for n in os.listdir(directory) if n.endswith(".txt"))
    return [os.path.join(directory, n) for n in names]


def _read(path: str) -> str:
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()


def find_most_common_words(directory: str, num: int = DEFAULT_NUM_WORDS) -> List[Tuple[str, int]]:
    """Count tokens over every corpus file and keep the num most frequent.

    Args:
        directory: Corpus directory with .txt files.
        num: Maximum vocabulary size. Defaults to 30000.

    Returns:
        List of (word, count), most frequent first.
    """
    cnt: Counter = Counter()
    for path in iter_corpus_files(directory):
        cnt.update(tokenize_simple(_read(path)))
    return cnt.most_common(num)


def save_words(path: str, words: Iterable[Tuple[str, int]]) -> None:
    """Write a vocabulary list as "word, count" lines."""
    with open(path, "w", encoding="utf-8") as f:
        for word, count in words:
            f.write(f"{word}, {count}\n")


def load_words(path: str, num: Optional[int] = None) -> List[Tuple[str, int]]:
    """Read up to num "word, count" lines written by save_words.

    Raises:
        FormatError: If a line does not have a word and an integer count.
    """
    words = []
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            if num is not None and len(words) >= num:
                break
            columns = line.split(",")
            if len(columns) < 2 or not columns[0].strip():
                raise FormatError(f"{path}:{lineno}: expected 'word, count'")
            try:
                count = int(columns[1].strip())
            except ValueError as e:
                raise FormatError(f"{path}:{lineno}: invalid count {columns[1].strip()!r}") from e
            words.append((columns[0].strip(), count))
    return words


def build_from_text(
    text: str,
    words: Iterable[str],
    window_radius: int = DEFAULT_WINDOW_RADIUS,
    builder: Optional[CoOccurrenceBuilder] = None,
) -> CoOccurrenceBuilder:
    """Feed every sentence of text into a builder (a new one unless builder is given).

    Args:
        text: Raw text.
        words: Vocabulary, used only when a new builder is created.
        window_radius: Window radius for a new builder. Defaults to 10.
        builder: Existing builder to keep accumulating into. Defaults to None.

    Returns:
        The builder that received the sentences.
    """
    if builder is None:
        builder = CoOccurrenceBuilder(window_radius, words)
    for tokens in split_sentences(text):
        builder.add_sentence(tokens)
    return builder


def build_from_corpus(
    directory: str,
    words: Iterable[str],
    window_radius: int = DEFAULT_WINDOW_RADIUS,
) -> CoOccurrenceBuilder:
    """Build an (unnormalized) co-occurrence builder from every .txt file in directory."""
    builder = CoOccurrenceBuilder(window_radius, words)
    for path in iter_corpus_files(directory):
        build_from_text(_read(path), words, builder=builder)
    return builder
