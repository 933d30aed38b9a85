"""
Decklist scraper services.

Orchestration of crawl runs over the storage and scraper layers.
"""

from decklist_scraper.services.orchestrator import (
    LinkOutcome,
    Orchestrator,
    RunSummary,
)

__all__ = [
    "LinkOutcome",
    "Orchestrator",
    "RunSummary",
]
