"""Catalog read path - candidate sources and record normalization."""

from subsidy_matcher.catalog.base import CandidateSource, merge_and_dedupe
from subsidy_matcher.catalog.normalize import candidate_from_record, resolve_localized
from subsidy_matcher.catalog.memory_source import InMemoryCandidateSource
from subsidy_matcher.catalog.sql_source import SqlCandidateSource

__all__ = [
    "CandidateSource",
    "merge_and_dedupe",
    "candidate_from_record",
    "resolve_localized",
    "InMemoryCandidateSource",
    "SqlCandidateSource",
]
