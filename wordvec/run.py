import argparse
import sys
import time
from typing import Iterable, Optional

from wordvec.corpus_utils import (
    DEFAULT_NUM_WORDS,
    DEFAULT_WINDOW_RADIUS,
    build_from_corpus,
    find_most_common_words,
    load_words,
    save_words,
)
from wordvec.errors import ExpressionError, FormatError, InvalidVector
from wordvec.eval import run_analogy_eval
from wordvec.model import CoOccurrenceBuilder, LanguageModel

# Entry point: build a model from a corpus directory (or load a saved one), then answer
# expressions interactively. Usage: python -m wordvec.run --corpus DIR [--save FILE]


def repl(model: LanguageModel, lines: Iterable[str], limit: int = 20) -> None:
    """Evaluate each line and print the result with its nearest words; ":q" stops.

    Args:
        model: Built LanguageModel.
        lines: Input lines (e.g. sys.stdin).
        limit: Number of nearest words to print. Defaults to 20.
    """
    for line in lines:
        text = line.strip()
        if text.startswith(":q"):
            break
        if not text:
            continue
        try:
            vec = model.evaluate(text)
        except ExpressionError as e:
            print(e)
            print()
            continue
        print(f" = {vec!r}")
        print("-------------")
        for word, dist in model.nearest_with_distances(vec, limit):
            print(f"{word!r}, {dist}")
        print()


def _stdin_lines() -> Iterable[str]:
    while True:
        try:
            yield input("> ")
        except EOFError:
            return


def _builder_from_corpus(args) -> CoOccurrenceBuilder:
    if args.load_words:
        words = load_words(args.load_words, args.num_words)
    else:
        words = find_most_common_words(args.corpus, args.num_words)
    print(f"Vocab size {len(words)}")
    if args.save_words:
        try:
            save_words(args.save_words, words)
        except OSError as e:
            print(f"Couldn't save vocabulary list: {e}")
    builder = build_from_corpus(args.corpus, [w for w, _ in words], window_radius=args.window)
    if args.save:
        try:
            builder.save(args.save)
        except OSError as e:
            print(f"Couldn't save model: {e}")
    return builder


def main(argv: Optional[list] = None) -> int:
    """Build or load a model, then run the expression REPL on stdin."""
    ap = argparse.ArgumentParser(description="Co-occurrence word vectors")
    ap.add_argument("-c", "--corpus", type=str, default=None, help="Directory of .txt files")
    ap.add_argument("-l", "--load", type=str, default=None, help="Load a saved model")
    ap.add_argument("-s", "--save", type=str, default=None, help="Save the model built from --corpus")
    ap.add_argument("-w", "--save-words", type=str, default=None, help="Save the vocabulary list")
    ap.add_argument("-W", "--load-words", type=str, default=None, help="Load the vocabulary list")
    ap.add_argument(
        "-n",
        "--num-words",
        type=int,
        default=DEFAULT_NUM_WORDS,
        help="Maximum number of words in the vocabulary",
    )
    ap.add_argument("--window", type=int, default=DEFAULT_WINDOW_RADIUS)
    ap.add_argument("--limit", type=int, default=20, help="Nearest words shown per query")
    ap.add_argument("--eval", action="store_true", help="Run the built-in analogy set first")
    args = ap.parse_args(argv)

    if (args.load is None) == (args.corpus is None):
        print("You must specify either a model to load or a corpus directory location")
        return 2

    try:
        if args.load:
            builder = CoOccurrenceBuilder.load(args.load, window_radius=args.window)
        else:
            builder = _builder_from_corpus(args)
    except (FormatError, OSError) as e:
        print(f"Couldn't load model: {e}")
        return 1

    start = time.perf_counter()
    try:
        model = builder.build()
    except InvalidVector as e:
        print(f"Invalid model: {e}")
        return 1
    print(f"Model built in {time.perf_counter() - start:.1f}s")

    if args.eval:
        run_analogy_eval(model)
    repl(model, _stdin_lines(), limit=args.limit)
    return 0


if __name__ == "__main__":
    sys.exit(main())
