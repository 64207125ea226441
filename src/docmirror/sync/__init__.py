"""
Sync engine: walk the remote tree, detect changes, mirror bytes and metadata.

The orchestrator lives in ``docmirror.sync.orchestrator``; it depends on the
catalog, which itself depends on the types exported here.
"""

from docmirror.sync.types import FileOutcome, MirroredDocument, RemoteFile, RunRecord, SyncSummary, summarize
from docmirror.sync.walker import walk_tree

__all__ = [
    "walk_tree",
    "summarize",
    "RemoteFile",
    "MirroredDocument",
    "RunRecord",
    "FileOutcome",
    "SyncSummary",
]
