# artifacts.py
from __future__ import annotations

from typing import Iterable, List

from .model import CLONE_SOURCE_PLACEHOLDER, Artifact


def has_clone_source(artifacts: Iterable[Artifact]) -> bool:
    return any(a.source == CLONE_SOURCE_PLACEHOLDER for a in artifacts)


def reconcile(artifacts: Iterable[Artifact]) -> List[Artifact]:
    """
    Make sure the task fetches the build's source archive.

    If the user already declared the clone source artifact anywhere in the
    list, their list is returned as-is (order, destination and options
    included). Otherwise the default artifact is put first so the source is
    fetched before anything else.
    """
    artifacts = list(artifacts)
    if has_clone_source(artifacts):
        return artifacts

    return [Artifact(source=CLONE_SOURCE_PLACEHOLDER)] + artifacts
