from typing import Dict, Iterable, Iterator, List, Optional

# Bidirectional word <-> id mapping. Ids are dense 0..N-1 and fixed at construction.


class Vocabulary:
    """Fixed, ordered vocabulary.

    Attributes:
        id_to_word (List[str]): Words by id.
        word2id (Dict[str, int]): Mapping word -> id.
    """

    def __init__(self, words: Iterable[str]):
        """Build the index from an ordered sequence of distinct words.

        Args:
            words: Words in id order.

        Raises:
            ValueError: If a word appears more than once.
        """
        self.id_to_word: List[str] = list(words)
        self.word2id: Dict[str, int] = {}
        for i, w in enumerate(self.id_to_word):
            if w in self.word2id:
                raise ValueError(f"Duplicate vocabulary word {w!r}")
            self.word2id[w] = i

    def get(self, word: str) -> Optional[int]:
        return self.word2id.get(word)

    def word(self, i: int) -> str:
        return self.id_to_word[i]

    def __len__(self) -> int:
        return len(self.id_to_word)

    def __contains__(self, word: object) -> bool:
        return word in self.word2id

    def __iter__(self) -> Iterator[str]:
        return iter(self.id_to_word)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vocabulary):
            return NotImplemented
        return self.id_to_word == other.id_to_word

    def __repr__(self) -> str:
        return f"Vocabulary({len(self)} words)"
