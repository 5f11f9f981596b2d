"""
Collectors for fetching data from the PUBG API.
"""

from pubglookup.collectors.fetcher import Fetcher
from pubglookup.collectors.pubg import PubgClient

__all__ = [
    "Fetcher",
    "PubgClient",
]
