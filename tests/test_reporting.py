"""
Tests for frequency tables, keyword-in-context lookups and corpus summaries.
"""

from __future__ import annotations

import pandas as pd
import pytest

from nlp_primer.data.corpus import Corpus, Document, corpus_from_texts
from nlp_primer.errors import InvalidConfiguration, NotFound
from nlp_primer.features.dfm import build_dfm
from nlp_primer.features.tokenize import tokenize
from nlp_primer.reporting.frequency import FREQUENCY_COLUMNS, frequency
from nlp_primer.reporting.kwic import KWIC_COLUMNS, KwicMatch, kwic, kwic_corpus
from nlp_primer.reporting.summary import summarize_corpus


def _dfm(texts, metadata=None):
    corpus = corpus_from_texts(texts, metadata=metadata)
    return build_dfm(corpus, {doc.doc_id: doc.text.split() for doc in corpus})


# ---------------------------------------------------------------------------
# Frequency
# ---------------------------------------------------------------------------


def test_frequency_table_sorted_with_docfreq():
    table = frequency(_dfm(["cat dog cat", "dog dog"]))

    assert list(table.columns) == FREQUENCY_COLUMNS
    assert table["feature"].tolist() == ["dog", "cat"]
    assert table["frequency"].tolist() == [3, 2]
    assert table["rank"].tolist() == [1, 2]
    assert table["docfreq"].tolist() == [2, 1]


def test_frequency_ties_share_rank_and_sort_alphabetically():
    table = frequency(_dfm(["c b a", "d d d d"]))

    assert table["feature"].tolist() == ["d", "a", "b", "c"]
    assert table["rank"].tolist() == [1, 2, 2, 2]


def test_frequency_top_n():
    table = frequency(_dfm(["a a a b b c"]), n=2)

    assert table["feature"].tolist() == ["a", "b"]
    assert frequency(_dfm(["a"]), n=10)["feature"].tolist() == ["a"]


def test_frequency_is_non_increasing():
    table = frequency(_dfm(["x y z z", "y z w", "w w w w"]))

    counts = table["frequency"].tolist()
    assert counts == sorted(counts, reverse=True)


def test_frequency_by_group():
    metadata = [{"party": "A"}, {"party": "B"}, {"party": "A"}]
    table = frequency(_dfm(["tax tax jobs", "health", "tax"], metadata=metadata), groups="party")

    assert list(table.columns) == FREQUENCY_COLUMNS + ["group"]
    group_a = table[table["group"] == "A"]
    assert group_a["feature"].tolist() == ["tax", "jobs"]
    assert group_a["frequency"].tolist() == [3, 1]
    assert group_a["docfreq"].tolist() == [2, 1]
    assert table[table["group"] == "B"]["feature"].tolist() == ["health"]


def test_frequency_unknown_group_raises():
    with pytest.raises(NotFound):
        frequency(_dfm(["a"]), groups="party")


def test_frequency_of_empty_dfm():
    table = frequency(_dfm(["", ""]))

    assert table.empty
    assert list(table.columns) == FREQUENCY_COLUMNS


# ---------------------------------------------------------------------------
# KWIC
# ---------------------------------------------------------------------------


def test_kwic_window_and_position():
    hits = kwic(["a", "b", "c", "d", "e"], "c", window=1)

    assert hits == [KwicMatch(position=2, pre=("b",), keyword="c", post=("d",))]


def test_kwic_truncates_at_sequence_edges():
    hits = kwic(["x", "a", "y"], "*", window=5)

    assert [h.position for h in hits] == [0, 1, 2]
    assert hits[0].pre == ()
    assert hits[0].post == ("a", "y")
    assert hits[2].post == ()


def test_kwic_window_zero():
    hits = kwic(["a", "b", "a"], "a", window=0)

    assert [(h.pre, h.post) for h in hits] == [((), ()), ((), ())]


def test_kwic_glob_and_case():
    tokens = ["The", "economy", "and", "Economic", "policy"]

    assert [h.keyword for h in kwic(tokens, "econom*")] == ["economy"]
    assert [h.keyword for h in kwic(tokens, "econom*", case_insensitive=True)] == [
        "economy",
        "Economic",
    ]


def test_kwic_fixed_matches_literally():
    tokens = ["a", "*", "b"]

    assert [h.position for h in kwic(tokens, "*", valuetype="fixed")] == [1]
    assert [h.position for h in kwic(tokens, "*")] == [0, 1, 2]


def test_kwic_accepts_token_sequence():
    hits = kwic(tokenize("We want growth. Growth now!"), "growth", window=2, case_insensitive=True)

    assert [h.keyword for h in hits] == ["growth", "Growth"]
    assert hits[1].pre == ("growth", ".")


def test_kwic_no_match():
    assert kwic(["a", "b"], "z") == []


def test_kwic_invalid_arguments():
    with pytest.raises(InvalidConfiguration):
        kwic(["a"], "a", window=-1)
    with pytest.raises(InvalidConfiguration):
        kwic(["a"], "a", valuetype="regex")
    with pytest.raises(InvalidConfiguration):
        kwic(["a"], "")


def test_kwic_corpus_table():
    tokens_by_doc = {
        "d1": ["the", "economy", "grows"],
        "d2": ["no", "match"],
        "d3": ["economy", "first"],
    }
    table = kwic_corpus(tokens_by_doc, "economy", window=1)

    assert list(table.columns) == KWIC_COLUMNS
    assert table["docname"].tolist() == ["d1", "d3"]
    assert table["pre"].tolist() == ["the", ""]
    assert table["post"].tolist() == ["grows", "first"]


def test_kwic_corpus_empty_result_keeps_columns():
    table = kwic_corpus({"d1": ["a"]}, "z")

    assert table.empty
    assert list(table.columns) == KWIC_COLUMNS


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def test_summarize_corpus():
    corpus = Corpus(
        [
            Document("d1", "a a b", {"year": 2019}),
            Document("d2", "", {"year": 2020}),
        ]
    )
    tokens = {"d1": ["a", "a", "b"], "d2": []}
    summary = summarize_corpus(corpus, tokens)

    assert summary.columns.tolist() == ["document", "types", "tokens", "year"]
    assert summary["types"].tolist() == [2, 0]
    assert summary["tokens"].tolist() == [3, 0]
    assert summary["year"].tolist() == [2019, 2020]


def test_summarize_corpus_missing_tokens_raises():
    corpus = corpus_from_texts(["a"])

    with pytest.raises(NotFound):
        summarize_corpus(corpus, {})


def test_frequency_group_missing_field_raises():
    corpus = Corpus(
        [
            Document("a", "x y", {"country": "UK"}),
            Document("b", "x"),
            Document("c", "y"),
        ]
    )
    dfm = build_dfm(corpus, {doc.doc_id: doc.text.split() for doc in corpus})

    with pytest.raises(NotFound):
        frequency(dfm, groups="country")


def test_frequency_by_group_keeps_every_count():
    corpus = Corpus(
        [
            Document("a", "x y", {"country": "UK"}),
            Document("b", "x"),
            Document("c", "y"),
        ]
    )
    dfm = build_dfm(corpus, {doc.doc_id: doc.text.split() for doc in corpus})

    table = frequency(
        dfm,
        groups=lambda meta: "unknown" if pd.isna(meta["country"]) else meta["country"],
    )

    assert table["group"].unique().tolist() == ["UK", "unknown"]
    assert table["frequency"].sum() == dfm.feature_totals().sum() == 4
    unknown = table[table["group"] == "unknown"]
    assert unknown["feature"].tolist() == ["x", "y"]
    assert unknown["docfreq"].tolist() == [1, 1]
