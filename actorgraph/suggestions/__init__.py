"""Suggestion ledger for candidate relationships."""

from actorgraph.suggestions.ledger import ApprovalResult, SuggestionLedger

__all__ = [
    "ApprovalResult",
    "SuggestionLedger",
]
