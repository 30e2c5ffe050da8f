from prstate.github.api import API
from prstate.github.model import snapshot_from_graphql, snapshot_from_pull_request
from prstate.github.npm import NpmDownloads

__all__ = [
    "API",
    "NpmDownloads",
    "snapshot_from_graphql",
    "snapshot_from_pull_request",
]
