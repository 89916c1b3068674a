"""branchsync repository access.

This package provides ref-level access to Git repositories behind a
runtime-checkable protocol, so reconciliation can run against a real
repository or an in-memory fake.

Classes:
    GitRepository: dulwich-backed repository discovered from a directory.
    FakeRepository: In-memory repository with a commit graph, for tests.
    RepositoryProtocol: Runtime-checkable protocol for dependency injection.

Models:
    BranchRef: A branch name and the commit it points to.
    Divergence: Ahead/behind commit counts for a local/remote pair.
    HeadState: Snapshot of what HEAD points at.
    FetchResult: Tracking refs updated and pruned by a fetch.

Example:
    >>> from branchsync.repository import GitRepository
    >>> with GitRepository() as repo:
    ...     repo.fetch("origin", timeout=30)
    ...     print(sorted(repo.remote_branches("origin")))
"""

from branchsync.repository._fake import FakeRepository
from branchsync.repository._models import BranchRef, Divergence, FetchResult, HeadState
from branchsync.repository._protocol import RepositoryProtocol
from branchsync.repository._repository import GitRepository

__all__ = [
    "BranchRef",
    "Divergence",
    "FakeRepository",
    "FetchResult",
    "GitRepository",
    "HeadState",
    "RepositoryProtocol",
]
