from .stats_fetcher import StatsFetcher, parse_stats_line
from .transport import HttpTransport, SocketTransport, StatsTransport

__all__ = [
    "StatsFetcher",
    "parse_stats_line",
    "HttpTransport",
    "SocketTransport",
    "StatsTransport",
]
