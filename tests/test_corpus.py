"""
Tests for the Document and Corpus types and their builders.
"""

from __future__ import annotations

import dataclasses

import pandas as pd
import pytest

from nlp_primer.data.corpus import (
    Corpus,
    Document,
    corpus_from_dataframe,
    corpus_from_texts,
)
from nlp_primer.errors import DuplicateId, InvalidConfiguration, NotFound


def _speeches() -> Corpus:
    return Corpus(
        [
            Document("d1", "Growth is strong.", {"country": "UK", "year": 2019}),
            Document("d2", "Health comes first.", {"country": "US", "year": 2020}),
            Document("d3", "Trade is open.", {"country": "UK", "year": 2020}),
            Document("d4", "Jobs are up.", {"country": "IE", "year": 2019}),
        ]
    )


def test_add_and_get_preserve_order():
    corpus = _speeches()

    assert corpus.ids == ["d1", "d2", "d3", "d4"]
    assert corpus.get("d3").text == "Trade is open."
    assert "d2" in corpus
    assert "zz" not in corpus
    assert len(corpus) == 4


def test_add_duplicate_id_raises():
    corpus = _speeches()

    with pytest.raises(DuplicateId):
        corpus.add(Document("d1", "again"))
    # DuplicateId is also a KeyError
    with pytest.raises(KeyError):
        corpus.add(Document("d2", "again"))
    assert len(corpus) == 4


def test_get_missing_raises_not_found():
    with pytest.raises(NotFound):
        _speeches().get("missing")


def test_subset_with_predicate_keeps_order():
    sub = _speeches().subset(lambda meta: meta["year"] == 2020)

    assert isinstance(sub, Corpus)
    assert sub.ids == ["d2", "d3"]


def test_subset_with_keywords():
    sub = _speeches().subset(country="UK")

    assert sub.ids == ["d1", "d3"]
    assert _speeches().subset(country="FR").ids == []


def test_subset_unknown_field_raises():
    with pytest.raises(NotFound):
        _speeches().subset(party="Labour")


def test_group_by_field_in_first_appearance_order():
    groups = _speeches().group("country")

    assert list(groups) == ["UK", "US", "IE"]
    assert groups["UK"].ids == ["d1", "d3"]
    assert groups["IE"].ids == ["d4"]


def test_group_by_callable():
    groups = _speeches().group(lambda meta: "early" if meta["year"] < 2020 else "late")

    assert groups["early"].ids == ["d1", "d4"]
    assert groups["late"].ids == ["d2", "d3"]


def test_group_missing_field_raises():
    with pytest.raises(NotFound):
        _speeches().group("party")


def test_documents_are_immutable():
    doc = Document("d1", "text", {"country": "UK"})

    with pytest.raises(dataclasses.FrozenInstanceError):
        doc.text = "changed"
    with pytest.raises(TypeError):
        doc.metadata["country"] = "US"


def test_document_rejects_non_text():
    with pytest.raises(InvalidConfiguration):
        Document("d1", 42)
    with pytest.raises(InvalidConfiguration):
        Document(1.5, "text")


def test_metadata_frame():
    frame = _speeches().metadata_frame()

    assert list(frame.index) == ["d1", "d2", "d3", "d4"]
    assert list(frame["country"]) == ["UK", "US", "UK", "IE"]


def test_corpus_from_texts_default_ids():
    corpus = corpus_from_texts(["a b", "c"])

    assert corpus.ids == ["text1", "text2"]
    assert corpus.texts == ["a b", "c"]


def test_corpus_from_texts_misaligned_raises():
    with pytest.raises(InvalidConfiguration):
        corpus_from_texts(["a", "b"], ids=["x"])


def test_corpus_from_dataframe_uses_other_columns_as_metadata():
    df = pd.DataFrame(
        {
            "id": [10, 20],
            "body": ["first text", "second text"],
            "author": ["Ann", "Bo"],
        }
    )
    corpus = corpus_from_dataframe(df, text_column="body", id_column="id")

    assert corpus.ids == [10, 20]
    assert isinstance(corpus.ids[0], int)
    assert dict(corpus.get(20).metadata) == {"author": "Bo"}


def test_corpus_from_dataframe_without_id_column():
    df = pd.DataFrame({"text": ["x", "y", "z"]})

    assert corpus_from_dataframe(df).ids == ["text1", "text2", "text3"]


def test_corpus_from_dataframe_rejects_non_string_text():
    df = pd.DataFrame({"text": ["fine", None]})

    with pytest.raises(InvalidConfiguration):
        corpus_from_dataframe(df)


def test_corpus_from_dataframe_duplicate_ids():
    df = pd.DataFrame({"doc_id": ["a", "a"], "text": ["x", "y"]})

    with pytest.raises(DuplicateId):
        corpus_from_dataframe(df, id_column="doc_id")


def test_corpus_from_dataframe_missing_column():
    df = pd.DataFrame({"text": ["x"]})

    with pytest.raises(InvalidConfiguration):
        corpus_from_dataframe(df, id_column="doc_id")
