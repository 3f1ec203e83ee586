from typing import List, Optional, Tuple

from wordvec.errors import ExpressionError
from wordvec.model import LanguageModel

# Evaluation: nearest neighbours and analogies (a - b + c ≈ ?) via the expression engine.


def print_nearest(
    model: LanguageModel,
    query_words: Optional[List[str]] = None,
    k: int = 5,
) -> None:
    """Print k nearest neighbours (Euclidean) for given or default query words.

    Args:
        model: Built LanguageModel.
        query_words: Words to query; if None, use first 3 vocab words. Defaults to None.
        k: Number of neighbours to show. Defaults to 5.
    """
    if query_words is None:
        query_words = model.vocab.id_to_word[:3]
    for w in query_words:
        vec = model.lookup(w)
        if vec is None:
            continue
        nn_str = ", ".join(f"{v.label}({d:.3f})" for v, d in model.nearest_with_distances(vec, k))
        print(f"  '{w}' -> {nn_str}")


def analogy(model: LanguageModel, a: str, b: str, c: str, k: int = 1) -> Optional[List[str]]:
    """Solve "a - b + c = ?"; return the k nearest words excluding a, b and c.

    Args:
        model: Built LanguageModel.
        a: Word the offset is added to.
        b: Word subtracted.
        c: Word added.
        k: Number of nearest words to return. Defaults to 1.

    Returns:
        List of up to k words, or None if any of a, b, c is not in the vocabulary.
    """
    try:
        vec = model.evaluate(f"{a} - {b} + {c}")
    except ExpressionError:
        return None
    exclude = {a, b, c}
    result = []
    for v in model.nearest(vec):
        if v.label in exclude:
            continue
        result.append(v.label)
        if len(result) >= k:
            break
    return result


# Small built-in set. Needs a corpus large enough to contain these words.
DEFAULT_ANALOGIES = [
    ("king", "man", "woman", "queen"),
    ("paris", "france", "germany", "berlin"),
    ("big", "biggest", "small", "smallest"),
    ("run", "running", "walk", "walking"),
]


def run_analogy_eval(
    model: LanguageModel,
    analogies: Optional[List[Tuple[str, str, str, str]]] = None,
) -> Tuple[int, int]:
    """Run analogy evaluation on (a, b, c, expected_d) quadruples; print and return accuracy.

    Args:
        model: Built LanguageModel.
        analogies: List of (a, b, c, expected) tuples. Defaults to DEFAULT_ANALOGIES.

    Returns:
        Tuple (correct_count, total_count) for analogies where a, b, c, expected are in vocab.
    """
    if analogies is None:
        analogies = DEFAULT_ANALOGIES
    correct = 0
    total = 0
    for a, b, c, expected in analogies:
        if expected not in model:
            continue
        preds = analogy(model, a, b, c, k=1)
        if not preds:
            continue
        total += 1
        if preds[0] == expected:
            correct += 1
        print(f"  {a} - {b} + {c} = {preds[0]} (expected {expected})")
    if total > 0:
        print(f"Analogy accuracy: {correct}/{total} = {100.0 * correct / total:.1f}%")
    else:
        print("  (no analogies in vocab; build from a larger corpus for king/queen etc.)")
    return correct, total
