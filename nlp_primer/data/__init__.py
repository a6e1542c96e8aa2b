"""
Data loading and corpus utilities.

This subpackage provides:
- functions to load the data configuration and a tabular text dataset
- the Document and Corpus types, plus builders from DataFrames and
  plain lists of strings.
"""
