"""Sync engine: walker, transfer, retry queue and pipeline."""

from __future__ import annotations

from .events import EventBus, EventName, Listener, SyncEvent
from .pipeline import DEFAULT_BATCH_SIZE, DownloadPipeline, PipelineStats
from .retry_queue import RetryQueue, RetryQueueItem
from .transfer import RetryPolicy, Transfer
from .walker import RemoteTreeWalker, find_roots

__all__ = [
    "EventBus",
    "EventName",
    "Listener",
    "SyncEvent",
    "DownloadPipeline",
    "PipelineStats",
    "DEFAULT_BATCH_SIZE",
    "RetryQueue",
    "RetryQueueItem",
    "RetryPolicy",
    "Transfer",
    "RemoteTreeWalker",
    "find_roots",
]
