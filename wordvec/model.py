from typing import Iterable, List, Optional, Tuple

import numpy as np

from wordvec import codec
from wordvec.codec import PathLike
from wordvec.errors import DimensionMismatch, InvalidVector
from wordvec.expression import parse
from wordvec.vectors import WordVector
from wordvec.vocab import Vocabulary

# Co-occurrence model: a builder accumulates distance-weighted counts sentence by sentence,
# build() row-normalizes once into an immutable LanguageModel.
# Row normalization is Laplace-smoothed: row / (row.sum() + 1).

UNKNOWN = -1  # slot for a token outside the vocabulary; keeps its position in the sentence
_NEAREST_CHUNK = 1024  # rows per block when computing distances to every vocabulary vector


class SentenceSession:
    """Buffers the tokens of one sentence and commits them to the builder on close.

    Use as a context manager; the commit runs exactly once, on normal exit or when an
    exception leaves the block. Nothing is written to the builder before the commit.
    """

    def __init__(self, builder: "CoOccurrenceBuilder"):
        self._builder = builder
        self._slots: List[int] = []
        self.closed = False

    def push(self, token: str) -> None:
        """Append one token; tokens outside the vocabulary still take up a position."""
        if self.closed:
            raise RuntimeError("Cannot push into a closed sentence")
        word_id = self._builder.vocab.get(token)
        self._slots.append(UNKNOWN if word_id is None else word_id)

    def extend(self, tokens: Iterable[str]) -> None:
        for token in tokens:
            self.push(token)

    def __len__(self) -> int:
        return len(self._slots)

    def close(self) -> None:
        """Apply the windowed updates for the buffered sentence (no-op when already closed)."""
        if self.closed:
            return
        self.closed = True
        try:
            self._builder._commit(np.array(self._slots, dtype=np.int64))
        finally:
            self._slots = []
            self._builder._session = None

    def __enter__(self) -> "SentenceSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class CoOccurrenceBuilder:
    """Mutable accumulator of windowed co-occurrence counts.

    For every pair of positions (i, j) in a sentence with 0 < |i - j| <= window_radius and
    both tokens in the vocabulary, row slot[i] gains 1 / |i - j| at column slot[j], and the
    center word's count goes up by one.

    Attributes:
        window_radius (int): Maximum token distance counted as a co-occurrence.
        vocab (Vocabulary): Shared word index.
        cooc (np.ndarray): Co-occurrence rows, shape (V, V), float32.
        counts (np.ndarray): Center-role count per word, shape (V,), int64.
    """

    def __init__(
        self,
        window_radius: int,
        words: Iterable[str],
        cooc: Optional[np.ndarray] = None,
        copy: bool = True,
    ):
        """Allocate all-zero rows for the given vocabulary.

        Args:
            window_radius: Half-window size (each side); must be >= 1.
            words: Ordered, distinct vocabulary words.
            cooc: Existing (V, V) rows to continue from. Defaults to None (zeros).
            copy: Copy cooc instead of taking ownership of it. Defaults to True.

        Raises:
            ValueError: If window_radius < 1 or the vocabulary has duplicates.
        """
        if window_radius < 1:
            raise ValueError(f"window_radius must be >= 1, got {window_radius}")
        self.window_radius = int(window_radius)
        self.vocab = words if isinstance(words, Vocabulary) else Vocabulary(words)
        V = len(self.vocab)
        if cooc is None:
            cooc = np.zeros((V, V), dtype=np.float32)
        else:
            cooc = np.array(cooc, dtype=np.float32) if copy else np.asarray(cooc, dtype=np.float32)
        if cooc.shape != (V, V):
            raise ValueError(f"Expected rows of shape {(V, V)}, got {cooc.shape}")
        self.cooc = cooc
        self.counts = np.zeros(V, dtype=np.int64)
        self._session: Optional[SentenceSession] = None
        self._consumed = False

    def _check_usable(self) -> None:
        if self._consumed:
            raise RuntimeError("Builder has already been consumed by build()")

    def sentence(self) -> SentenceSession:
        """Open a sentence session; only one may be open at a time.

        Returns:
            SentenceSession to use in a with block.
        """
        self._check_usable()
        if self._session is not None:
            raise RuntimeError("A sentence session is already open on this builder")
        self._session = SentenceSession(self)
        return self._session

    def add_sentence(self, tokens: Iterable[str]) -> None:
        """Push a whole sentence in one session."""
        with self.sentence() as s:
            s.extend(tokens)

    def _commit(self, slots: np.ndarray) -> None:
        """Gather every windowed update for one sentence, then scatter-add them at once."""
        rows: List[np.ndarray] = []
        cols: List[np.ndarray] = []
        weights: List[np.ndarray] = []
        L = len(slots)
        for d in range(1, min(self.window_radius, L - 1) + 1):
            left = slots[:-d]
            right = slots[d:]
            known = (left != UNKNOWN) & (right != UNKNOWN)
            if not np.any(known):
                continue
            # Only position pairs are skipped, not equal ids: "a a" adds to a's own column
            left = left[known]
            right = right[known]
            w = np.full(left.shape[0], 1.0 / d, dtype=np.float32)
            # Both directions: each position is the center once for the pair
            rows.extend((left, right))
            cols.extend((right, left))
            weights.extend((w, w))
        if not rows:
            return
        r = np.concatenate(rows)
        c = np.concatenate(cols)
        np.add.at(self.cooc, (r, c), np.concatenate(weights))
        np.add.at(self.counts, r, 1)

    def merge(self, other: "CoOccurrenceBuilder") -> None:
        """Add another builder's rows and counts into this one (shard merge).

        Args:
            other: Builder over the same vocabulary, in the same order, with the same window.

        Raises:
            ValueError: If the vocabularies or window radii differ.
        """
        self._check_usable()
        other._check_usable()
        if self.vocab != other.vocab:
            raise ValueError("Cannot merge builders with different vocabularies")
        if self.window_radius != other.window_radius:
            raise ValueError(
                f"Cannot merge builders with window radius {self.window_radius} "
                f"and {other.window_radius}"
            )
        self.cooc += other.cooc
        self.counts += other.counts

    def build(self) -> "LanguageModel":
        """Normalize every row by (row sum + 1) and hand the rows to a LanguageModel.

        The builder is consumed and cannot be used afterwards.

        Returns:
            Immutable LanguageModel sharing this builder's vocabulary.
        """
        self._check_usable()
        if self._session is not None:
            raise RuntimeError("Close the open sentence session before build()")
        self._consumed = True
        vectors = self.cooc
        vectors /= vectors.sum(axis=1, keepdims=True) + 1.0
        self.cooc = None
        self.counts = None
        return LanguageModel(self.vocab, vectors, copy=False)

    def save(self, path: PathLike) -> None:
        """Write the unnormalized rows in the binary model format (counts are not stored)."""
        self._check_usable()
        codec.save(path, self.vocab, self.cooc)

    @classmethod
    def load(cls, path: PathLike, window_radius: int = 10) -> "CoOccurrenceBuilder":
        """Load rows written by save(); counts start at zero.

        Raises:
            FormatError: If the file is malformed.
        """
        vocab, matrix = codec.load(path)
        return cls(window_radius, vocab, cooc=matrix, copy=False)


class LanguageModel:
    """Immutable normalized word vectors with lookup and nearest-neighbour queries.

    Attributes:
        vocab (Vocabulary): Word index shared with the builder that produced the model.
        vectors (np.ndarray): Read-only float32 array, shape (V, V); row i is word i's vector.
    """

    def __init__(self, vocab: Vocabulary, vectors: np.ndarray, copy: bool = True):
        """Wrap normalized rows.

        Args:
            vocab: Vocabulary of size V.
            vectors: Array of shape (V, V).
            copy: Copy vectors instead of taking ownership (and freezing) them. Defaults to True.

        Raises:
            ValueError: If vectors is not (V, V) for a vocabulary of size V.
            InvalidVector: If any value is NaN or infinite.
        """
        if copy:
            vectors = np.array(vectors, dtype=np.float32)
        else:
            vectors = np.asarray(vectors, dtype=np.float32)
        V = len(vocab)
        if vectors.shape != (V, V):
            raise ValueError(f"Expected vectors of shape {(V, V)}, got {vectors.shape}")
        finite = np.isfinite(vectors)
        if not finite.all():
            bad = int(np.argwhere(~finite)[0][0])
            raise InvalidVector(f"Vector for {vocab.word(bad)!r} contains non-finite values")
        vectors.setflags(write=False)
        self.vocab = vocab
        self.vectors = vectors

    def __len__(self) -> int:
        return len(self.vocab)

    def __contains__(self, word: object) -> bool:
        return word in self.vocab

    def lookup(self, word: str) -> Optional[WordVector]:
        """Vector for word as a read-only view of the model row, or None if absent."""
        i = self.vocab.get(word)
        if i is None:
            return None
        return WordVector(word, self.vectors[i])

    get = lookup

    def _distances(self, query: WordVector) -> np.ndarray:
        if query.dimension != len(self.vocab):
            raise DimensionMismatch(
                f"Query {query.label!r} has dimension {query.dimension}, model has {len(self.vocab)}"
            )
        out = np.empty(len(self.vocab), dtype=np.float32)
        for start in range(0, len(self.vocab), _NEAREST_CHUNK):
            diff = self.vectors[start : start + _NEAREST_CHUNK] - query.values
            out[start : start + _NEAREST_CHUNK] = np.sqrt(np.sum(diff * diff, axis=1))
        return out

    def nearest_with_distances(
        self, query: WordVector, limit: Optional[int] = None
    ) -> List[Tuple[WordVector, float]]:
        """Vocabulary vectors sorted by distance to query, paired with the distance.

        Words whose label equals query.label are skipped. Ties keep vocabulary order.

        Args:
            query: Vector of the model's dimension.
            limit: Maximum number of results. Defaults to None (all).

        Returns:
            List of (vector, distance), nearest first.
        """
        dists = self._distances(query)
        order = np.argsort(dists, kind="stable")
        result = []
        for i in order:
            word = self.vocab.word(int(i))
            if word == query.label:
                continue
            if limit is not None and len(result) >= limit:
                break
            result.append((WordVector(word, self.vectors[i]), float(dists[i])))
        return result

    def nearest(self, query: WordVector, limit: Optional[int] = None) -> List[WordVector]:
        """Nearest vocabulary vectors to query, excluding the query's own word."""
        return [v for v, _ in self.nearest_with_distances(query, limit)]

    def evaluate(self, text: str) -> WordVector:
        """Evaluate a vector expression such as "king - man + woman".

        Raises:
            ExpressionError: On syntax errors, unknown words or invalid divisors.
        """
        return parse(text, self)

    def save(self, path: PathLike) -> None:
        codec.save(path, self.vocab, self.vectors)

    @classmethod
    def load(cls, path: PathLike) -> "LanguageModel":
        """Load a model file written by save().

        Raises:
            FormatError: If the file is malformed.
            InvalidVector: If the file holds non-finite values.
        """
        vocab, vectors = codec.load(path)
        return cls(vocab, vectors, copy=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LanguageModel):
            return NotImplemented
        return self.vocab == other.vocab and bool(np.array_equal(self.vectors, other.vectors))

    __hash__ = None

    def __repr__(self) -> str:
        return f"LanguageModel({len(self.vocab)} words)"
