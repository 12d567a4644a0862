from __future__ import annotations

import json
from typing import List

import pytest

from jobbuilder.errors import RegistrationError
from jobbuilder.model import CanonicalJob
from jobbuilder.settings import Settings

FIXED_NOW = 1700000000


class FakeScheduler:
    """Records registered jobs; optionally fails every call."""

    def __init__(self, eval_id: str = "eval-123", error: Exception | None = None):
        self.eval_id = eval_id
        self.error = error
        self.jobs: List[CanonicalJob] = []

    def register(self, job: CanonicalJob) -> str:
        self.jobs.append(job)
        if self.error is not None:
            raise self.error
        return self.eval_id


def envelope(job_spec: str, source_archive: str = "s3://bucket/src.tar.gz") -> bytes:
    return json.dumps({"job_spec": job_spec, "source_archive": source_archive}).encode("utf-8")


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def settings():
    return Settings(nomad_addr="http://nomad.test:4646")


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def failing_scheduler():
    return FakeScheduler(error=RegistrationError("Nomad request failed: 500 Internal Server Error"))
