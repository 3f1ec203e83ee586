import os
from typing import Tuple, Union

import numpy as np

from wordvec.errors import FormatError
from wordvec.vocab import Vocabulary

# Binary model format, one model per file, all numbers little-endian:
#   u64 N, b"\n"
#   N records: utf8(word), b":", N float32, b"\n"
# Words may not contain ":" or newline.

PathLike = Union[str, "os.PathLike[str]"]

SIZE_DTYPE = np.dtype("<u8")
FLOAT_DTYPE = np.dtype("<f4")
DELIMITER = b":"
NEWLINE = b"\n"


def encode(vocab: Vocabulary, vectors: np.ndarray) -> bytes:
    """Serialize a vocabulary and its (V, V) vectors.

    Args:
        vocab: Vocabulary of size V, written in id order.
        vectors: Array of shape (V, V); row i belongs to vocab.word(i).

    Returns:
        Encoded bytes.

    Raises:
        ValueError: If the shape does not match the vocabulary or a word contains ":" or newline.
    """
    V = len(vocab)
    vectors = np.asarray(vectors)
    if vectors.shape != (V, V):
        raise ValueError(f"Expected vectors of shape {(V, V)}, got {vectors.shape}")
    parts = [np.array([V], dtype=SIZE_DTYPE).tobytes(), NEWLINE]
    for i, word in enumerate(vocab):
        if ":" in word or "\n" in word:
            raise ValueError(f"Word {word!r} cannot be stored: contains ':' or newline")
        parts.append(word.encode("utf-8"))
        parts.append(DELIMITER)
        parts.append(vectors[i].astype(FLOAT_DTYPE).tobytes())
        parts.append(NEWLINE)
    return b"".join(parts)


def decode(data: bytes) -> Tuple[Vocabulary, np.ndarray]:
    """Parse bytes produced by encode().

    Args:
        data: Whole file contents.

    Returns:
        Tuple of (vocab, vectors) with vectors a writeable float32 array of shape (V, V).

    Raises:
        FormatError: On a bad header, missing delimiter, truncated float block, missing record
            newline, wrong record count or trailing bytes.
    """
    header_len = SIZE_DTYPE.itemsize
    if len(data) < header_len + 1:
        raise FormatError("File too short for the size header")
    V = int(np.frombuffer(data, dtype=SIZE_DTYPE, count=1)[0])
    if data[header_len : header_len + 1] != NEWLINE:
        raise FormatError("Missing newline after the size header")
    block = V * FLOAT_DTYPE.itemsize
    # Every record needs at least a delimiter, the floats and a newline
    if V > (len(data) - header_len - 1) // (block + 2):
        raise FormatError(f"Header declares {V} words but the file is too short for them")

    words = []
    vectors = np.empty((V, V), dtype=np.float32)
    pos = header_len + 1
    for i in range(V):
        end = data.find(DELIMITER, pos)
        newline = data.find(NEWLINE, pos, end if end >= 0 else len(data))
        if end < 0 or newline >= 0:
            raise FormatError(f"Record {i}: missing ':' after the word")
        try:
            words.append(data[pos:end].decode("utf-8"))
        except UnicodeDecodeError as e:
            raise FormatError(f"Record {i}: word is not valid UTF-8") from e
        pos = end + 1
        if len(data) - pos < block:
            raise FormatError(
                f"Record {i} ({words[-1]!r}): expected {block} bytes of floats, "
                f"got {len(data) - pos}"
            )
        vectors[i] = np.frombuffer(data, dtype=FLOAT_DTYPE, count=V, offset=pos)
        pos += block
        if data[pos : pos + 1] != NEWLINE:
            raise FormatError(f"Record {i} ({words[-1]!r}): missing newline after the floats")
        pos += 1
    if pos != len(data):
        raise FormatError(f"{len(data) - pos} unexpected bytes after {V} records")
    try:
        vocab = Vocabulary(words)
    except ValueError as e:
        raise FormatError(str(e)) from e
    return vocab, vectors


def save(path: PathLike, vocab: Vocabulary, vectors: np.ndarray) -> None:
    """Write vocab and vectors to path, replacing any existing file."""
    data = encode(vocab, vectors)
    with open(path, "wb") as f:
        f.write(data)


def load(path: PathLike) -> Tuple[Vocabulary, np.ndarray]:
    """Read a model file written by save().

    Raises:
        FormatError: If the contents are malformed.
    """
    with open(path, "rb") as f:
        data = f.read()
    return decode(data)
