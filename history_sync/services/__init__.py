"""
Services for check-in history.

This package contains the submissions data source, the sort/filter policy,
the order verifier and the reconciler that ties them together.
"""

from .errors import DecodeError, HistoryFetchError, ServerError, TransportError
from .history_detail import HistoryDetailLoader, build_history_detail
from .order_verifier import first_inversion, is_sorted
from .reconciler import HistoryReconciler, HistoryState, ReconcilePhase
from .result import Result
from .session import SessionProvider, TokenSession
from .sort_policy import (
    SortDirection,
    SortParameters,
    comparator_for,
    filter_items,
    parameters_for,
    sort_items,
    sort_submissions,
)
from .submissions_client import HttpSubmissionsSource, SubmissionsSource, open_source

__all__ = [
    "DecodeError",
    "HistoryFetchError",
    "ServerError",
    "TransportError",
    "HistoryDetailLoader",
    "build_history_detail",
    "first_inversion",
    "is_sorted",
    "HistoryReconciler",
    "HistoryState",
    "ReconcilePhase",
    "Result",
    "SessionProvider",
    "TokenSession",
    "SortDirection",
    "SortParameters",
    "comparator_for",
    "filter_items",
    "parameters_for",
    "sort_items",
    "sort_submissions",
    "HttpSubmissionsSource",
    "SubmissionsSource",
    "open_source",
]
