import numpy as np
import pytest

from wordvec.errors import DimensionMismatch, InvalidDivisor, InvalidVector
from wordvec.model import CoOccurrenceBuilder, LanguageModel
from wordvec.vectors import WordVector
from wordvec.vocab import Vocabulary

# Unit tests: vocabulary, vector arithmetic, windowing, sessions, normalization, nearest.

WORDS = ["foo", "bar", "baz", "blort"]
SENTENCE = "x foo bar baz x x x x x x x blort".split()


def _build(words, sentences, window_radius=1):
    builder = CoOccurrenceBuilder(window_radius, words)
    for s in sentences:
        builder.add_sentence(s)
    return builder


def test_vocabulary_ids_are_dense_and_ordered():
    vocab = Vocabulary(["a", "b", "c"])
    assert len(vocab) == 3
    assert [vocab.get(w) for w in "abc"] == [0, 1, 2]
    assert vocab.word(2) == "c"
    assert vocab.get("z") is None
    assert "b" in vocab and "z" not in vocab
    assert list(vocab) == ["a", "b", "c"]


def test_vocabulary_rejects_duplicates():
    with pytest.raises(ValueError):
        Vocabulary(["a", "b", "a"])


def test_distance_symmetric():
    rng = np.random.default_rng(0)
    for _ in range(10):
        a = WordVector("a", rng.standard_normal(16))
        b = WordVector("b", rng.standard_normal(16))
        assert a.distance(b) == b.distance(a)


def test_vector_arithmetic_and_labels():
    a = WordVector("a", np.array([1.0, 2.0]))
    b = WordVector("b", np.array([0.5, 4.0]))
    s = a + b
    d = a - b
    np.testing.assert_array_equal(s.values, [1.5, 6.0])
    np.testing.assert_array_equal(d.values, [0.5, -2.0])
    assert s.label == "a + b"
    assert d.label == "a - b"
    assert (s / 2).label == "a + b / 2"
    np.testing.assert_array_equal((s / 2).values, [0.75, 3.0])
    # Operands untouched
    np.testing.assert_array_equal(a.values, [1.0, 2.0])
    assert np.isclose(a.distance(b), np.sqrt(0.25 + 4.0))


def test_divide_rejects_zero_and_non_integers():
    a = WordVector("a", np.ones(3))
    with pytest.raises(InvalidDivisor):
        a.divide(0)
    with pytest.raises(InvalidDivisor):
        a.divide(1.5)
    with pytest.raises(InvalidDivisor):
        a.divide(True)


@pytest.mark.parametrize("n", [10**40, 10**400])
def test_divide_rejects_divisor_beyond_float32(n):
    a = WordVector("a", np.ones(3))
    with pytest.raises(InvalidDivisor):
        a.divide(n)
    np.testing.assert_array_equal(a.values, np.ones(3))


def test_dimension_mismatch_is_fatal():
    a = WordVector("a", np.ones(3))
    b = WordVector("b", np.ones(4))
    for op in (a.add, a.subtract, a.distance):
        with pytest.raises(DimensionMismatch):
            op(b)
    assert not issubclass(DimensionMismatch, ValueError)


def test_window_symmetry():
    """foo/bar and bar/baz are each adjacent once, so their distances match."""
    model = _build(WORDS, [SENTENCE]).build()
    foo, bar, baz = model.lookup("foo"), model.lookup("bar"), model.lookup("baz")
    assert foo.distance(bar) == bar.distance(baz)


def test_proximity_ordering():
    model = _build(WORDS, [SENTENCE]).build()
    foo, baz, blort = model.lookup("foo"), model.lookup("baz"), model.lookup("blort")
    assert foo.distance(baz) < foo.distance(blort)


def test_distance_weighting_and_counts():
    builder = _build(["a", "b", "c"], [["a", "b", "c"]], window_radius=2)
    expected = np.array(
        [
            [0.0, 1.0, 0.5],
            [1.0, 0.0, 1.0],
            [0.5, 1.0, 0.0],
        ],
        dtype=np.float32,
    )
    np.testing.assert_array_equal(builder.cooc, expected)
    np.testing.assert_array_equal(builder.counts, [2, 2, 2])


def test_center_counts_follow_pairs():
    builder = _build(WORDS, [SENTENCE])
    np.testing.assert_array_equal(builder.counts, [1, 2, 1, 0])


def test_unknown_tokens_keep_their_position():
    near = _build(["a", "b"], [["a", "x", "b"]], window_radius=1)
    assert not near.cooc.any()
    wide = _build(["a", "b"], [["a", "x", "b"]], window_radius=2)
    assert wide.cooc[0, 1] == 0.5 and wide.cooc[1, 0] == 0.5


def test_repeated_word_counts_against_itself():
    builder = _build(["a"], [["a", "a"]], window_radius=1)
    assert builder.cooc[0, 0] == 2.0


def test_no_cooccurrence_across_sentences():
    builder = _build(["a", "b"], [["a"], ["b"]], window_radius=5)
    assert not builder.cooc.any()
    assert not builder.counts.any()


def test_session_commits_on_close_only():
    builder = CoOccurrenceBuilder(1, ["a", "b"])
    with builder.sentence() as s:
        s.push("a")
        s.push("b")
        assert len(s) == 2
        assert not builder.cooc.any()
    assert builder.cooc[0, 1] == 1.0
    with pytest.raises(RuntimeError):
        s.push("a")


def test_session_commits_when_block_raises():
    builder = CoOccurrenceBuilder(1, ["a", "b"])
    with pytest.raises(KeyError):
        with builder.sentence() as s:
            s.extend(["a", "b"])
            raise KeyError("stop")
    assert builder.cooc[0, 1] == 1.0
    # Builder is usable again
    builder.add_sentence(["b", "a"])
    assert builder.cooc[0, 1] == 2.0


def test_one_session_at_a_time():
    builder = CoOccurrenceBuilder(1, ["a"])
    s = builder.sentence()
    with pytest.raises(RuntimeError):
        builder.sentence()
    with pytest.raises(RuntimeError):
        builder.build()
    s.close()
    s.close()  # second close is a no-op
    builder.sentence().close()


def test_build_normalizes_rows_with_laplace_smoothing():
    model = _build(["a", "b", "c"], [["a", "b"]]).build()
    np.testing.assert_array_equal(model.lookup("a").values, [0.0, 0.5, 0.0])
    np.testing.assert_array_equal(model.lookup("b").values, [0.5, 0.0, 0.0])
    np.testing.assert_array_equal(model.lookup("c").values, [0.0, 0.0, 0.0])


def test_build_consumes_builder():
    builder = _build(["a", "b"], [["a", "b"]])
    builder.build()
    with pytest.raises(RuntimeError):
        builder.build()
    with pytest.raises(RuntimeError):
        builder.sentence()


def test_window_radius_must_be_positive():
    with pytest.raises(ValueError):
        CoOccurrenceBuilder(0, ["a"])


def test_merge_matches_single_builder():
    words = ["a", "b", "c"]
    shard1 = [["a", "b", "c"], ["c", "x", "a"]]
    shard2 = [["b", "b", "a"], ["a", "c"]]
    whole = _build(words, shard1 + shard2, window_radius=2)
    merged = _build(words, shard1, window_radius=2)
    merged.merge(_build(words, shard2, window_radius=2))
    np.testing.assert_array_equal(merged.cooc, whole.cooc)
    np.testing.assert_array_equal(merged.counts, whole.counts)
    assert merged.build() == whole.build()


def test_merge_requires_same_vocabulary():
    with pytest.raises(ValueError):
        CoOccurrenceBuilder(1, ["a", "b"]).merge(CoOccurrenceBuilder(1, ["b", "a"]))


def test_merge_requires_same_window_radius():
    narrow = _build(["a", "b"], [["a", "b"]], window_radius=2)
    wide = _build(["a", "b"], [["a", "x", "x", "b"]], window_radius=10)
    with pytest.raises(ValueError, match="window radius"):
        narrow.merge(wide)
    assert narrow.cooc[0, 1] == 1.0


def test_constructors_do_not_alias_caller_arrays():
    rows = np.array([[0.0, 1.0], [1.0, 0.0]], dtype=np.float32)
    model = LanguageModel(Vocabulary(["a", "b"]), rows)
    assert rows.flags.writeable
    rows[0, 0] = 5.0
    assert model.lookup("a").values[0] == 0.0

    cooc = np.array([[0.0, 1.0], [1.0, 0.0]], dtype=np.float32)
    builder = CoOccurrenceBuilder(1, ["a", "b"], cooc=cooc)
    builder.add_sentence(["a", "b"])
    builder.build()
    np.testing.assert_array_equal(cooc, [[0.0, 1.0], [1.0, 0.0]])
    assert cooc.flags.writeable


def _grid_model():
    vectors = np.array(
        [
            [0.0, 0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0, 0.0],
            [0.0, 1.0, 0.0, 0.0],
            [3.0, 0.0, 0.0, 0.0],
        ],
        dtype=np.float32,
    )
    return LanguageModel(Vocabulary(["a", "b", "c", "d"]), vectors)


def test_nearest_excludes_query_and_keeps_vocab_order_on_ties():
    model = _grid_model()
    a = model.lookup("a")
    assert [v.label for v in model.nearest(a)] == ["b", "c", "d"]
    assert [v.label for v in model.nearest(a, limit=2)] == ["b", "c"]
    pairs = model.nearest_with_distances(a, 3)
    assert [d for _, d in pairs] == [1.0, 1.0, 3.0]


def test_nearest_for_derived_vector_includes_all_words():
    model = _grid_model()
    q = WordVector("query", np.array([2.9, 0.0, 0.0, 0.0]))
    assert model.nearest(q, 1)[0].label == "d"
    assert len(model.nearest(q)) == 4


def test_nearest_dimension_mismatch():
    with pytest.raises(DimensionMismatch):
        _grid_model().nearest(WordVector("q", np.zeros(3)))


def test_lookup_returns_read_only_row():
    model = _grid_model()
    assert model.lookup("missing") is None
    b = model.lookup("b")
    assert b.label == "b"
    assert not b.values.flags.writeable
    with pytest.raises(ValueError):
        b.values[0] = 5.0


def test_model_rejects_non_finite_values():
    vectors = np.zeros((2, 2), dtype=np.float32)
    vectors[1, 0] = np.nan
    with pytest.raises(InvalidVector, match="'b'"):
        LanguageModel(Vocabulary(["a", "b"]), vectors)
    vectors[1, 0] = np.inf
    with pytest.raises(InvalidVector):
        LanguageModel(Vocabulary(["a", "b"]), vectors)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
