import argparse
import os

import numpy as np

from wordvec.corpus_utils import build_from_text, tokenize_simple
from wordvec.model import LanguageModel

# 2D PCA figure of the word vectors. Run: python -m wordvec.visualize [--load FILE | --file PATH]

DEMO_TEXT = (
    "the quick brown fox jumps over the lazy dog. "
    "the dog and the fox are animals. quick animals jump over lazy dogs. "
    "brown foxes and lazy dogs. the quick brown fox runs. the lazy dog sleeps. "
)


def _pca2(X: np.ndarray) -> np.ndarray:
    """Project rows of X onto first 2 principal components (pure NumPy SVD).

    Args:
        X: Array of shape (n_samples, n_features).

    Returns:
        Array of shape (n_samples, 2).
    """
    X = np.asarray(X, dtype=np.float64)
    X_centered = X - X.mean(axis=0)
    U, s, Vt = np.linalg.svd(X_centered, full_matrices=False)
    coords = X_centered @ Vt[:2].T
    if coords.shape[1] < 2:
        coords = np.hstack([coords, np.zeros((coords.shape[0], 2 - coords.shape[1]))])
    return coords


def main() -> None:
    """Build (or load) a model and save a labelled PCA scatter of its vectors to save_dir."""
    ap = argparse.ArgumentParser()
    ap.add_argument("--save_dir", type=str, default="wordvec/figures")
    ap.add_argument("--load", type=str, default=None, help="Saved LanguageModel file")
    ap.add_argument("--file", type=str, default=None, help="Text file to build from")
    ap.add_argument("--window", type=int, default=3)
    ap.add_argument("--max_labels", type=int, default=50)
    args = ap.parse_args()

    if args.load:
        model = LanguageModel.load(args.load)
    else:
        if args.file and os.path.isfile(args.file):
            with open(args.file, encoding="utf-8", errors="replace") as f:
                text = f.read()
        else:
            text = DEMO_TEXT
        words = list(dict.fromkeys(tokenize_simple(text)))
        model = build_from_text(text, words, window_radius=args.window).build()

    V = len(model)
    print(f"Vocab size {V}")
    coords = _pca2(model.vectors)
    max_labels = min(args.max_labels, V)
    os.makedirs(args.save_dir, exist_ok=True)
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        plt.figure(figsize=(8, 6))
        plt.scatter(coords[:, 0], coords[:, 1], alpha=0.7, s=20)
        for i in range(max_labels):
            plt.annotate(
                model.vocab.word(i),
                (coords[i, 0], coords[i, 1]),
                fontsize=7,
                alpha=0.9,
            )
        plt.xlabel("PC1")
        plt.ylabel("PC2")
        plt.title("Co-occurrence vectors (PCA)")
        plt.tight_layout()
        emb_path = os.path.join(args.save_dir, "vectors_pca.png")
        plt.savefig(emb_path, dpi=120)
        plt.close()
        print(f"Saved {emb_path}")
    except ImportError:
        print("matplotlib not installed; skipping PCA plot. pip install matplotlib")


if __name__ == "__main__":
    main()
