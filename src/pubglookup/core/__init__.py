"""
Core module for pubglookup.

Contains response models, the error taxonomy, cancellation signals, and
input validation.
"""

from pubglookup.core.cancellation import CancellationScope, CancellationSignal
from pubglookup.core.exceptions import (
    ErrorKind,
    FetchError,
    PubgLookupError,
    ValidationError,
)
from pubglookup.core.models import MatchResponse, PlayerData, PlayerResponse

__all__ = [
    # Models
    "MatchResponse",
    "PlayerData",
    "PlayerResponse",
    # Cancellation
    "CancellationScope",
    "CancellationSignal",
    # Exceptions
    "ErrorKind",
    "FetchError",
    "PubgLookupError",
    "ValidationError",
]
