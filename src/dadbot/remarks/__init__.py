"""Remote joke service client."""

from dadbot.remarks.fetcher import RemarkFetcher, TransportError

__all__ = ["RemarkFetcher", "TransportError"]
