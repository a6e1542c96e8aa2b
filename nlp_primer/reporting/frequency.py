"""
Term frequency tables over a document-feature matrix.

The table lists each feature with its total count, its rank and the number
of documents it occurs in. Rows are sorted by descending count with an
alphabetical tie-break, so the output is fully deterministic; ranks use the
"min" method (tied features share the best rank).

The frequency table is also what an external renderer (bar chart, word
cloud) would consume.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from nlp_primer.features.dfm import DocumentFeatureMatrix, GroupSpec


FREQUENCY_COLUMNS = ["feature", "frequency", "rank", "docfreq"]


def _frequency_table(dfm: DocumentFeatureMatrix, n: Optional[int]) -> pd.DataFrame:
    table = pd.DataFrame(
        {
            "feature": dfm.features,
            "frequency": dfm.feature_totals().to_numpy(),
            "docfreq": dfm.docfreq().to_numpy(),
        }
    )
    table = table.sort_values(
        by=["frequency", "feature"],
        ascending=[False, True],
        kind="mergesort",
    ).reset_index(drop=True)
    table["rank"] = table["frequency"].rank(method="min", ascending=False).astype(int)
    table = table[FREQUENCY_COLUMNS]
    if n is not None:
        table = table.head(n)
    return table


def frequency(
    dfm: DocumentFeatureMatrix,
    n: Optional[int] = None,
    groups: Optional[GroupSpec] = None,
) -> pd.DataFrame:
    """
    Compute a term frequency table.

    Parameters
    ----------
    dfm : DocumentFeatureMatrix
        Counts to summarize.
    n : Optional[int]
        Keep only the top `n` rows (per group when grouped).
    groups : Optional[GroupSpec]
        If given, frequencies are computed separately within each group
        of documents (docvars column name, callable or aligned keys).
        Document frequency is then counted within the group.

    Returns
    -------
    pd.DataFrame
        Columns ["feature", "frequency", "rank", "docfreq"], plus "group"
        when grouped. Features with zero count inside a group are omitted.
    """
    if groups is None:
        return _frequency_table(dfm, n)

    names, assignment = dfm.group_partition(groups)
    tables = []
    for index, key in enumerate(names):
        rows = [i for i, g in enumerate(assignment) if g == index]
        part = DocumentFeatureMatrix(
            dfm.matrix[rows, :],
            [dfm.docnames[i] for i in rows],
            dfm.features,
        ).trim(min_termfreq=1)
        table = _frequency_table(part, n)
        table["group"] = key
        tables.append(table)

    if not tables:
        return pd.DataFrame(columns=FREQUENCY_COLUMNS + ["group"])
    return pd.concat(tables, ignore_index=True)
