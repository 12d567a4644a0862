# assembler.py
from __future__ import annotations

import copy
from typing import Callable, Sequence, Union

from .artifacts import reconcile
from .model import (
    BUILDER_NAME,
    CLONE_SOURCE_META_KEY,
    CanonicalJob,
    JobSpec,
    RestartPolicy,
    Task,
    TaskGroup,
)

DEFAULT_DATACENTERS = ("dc1",)
JOB_ID_PREFIX = "ci-job/"

Clock = Callable[[], Union[int, float]]


def job_id(now: Clock) -> str:
    # Second resolution: two jobs assembled within the same second share an id.
    return f"{JOB_ID_PREFIX}{int(now())}"


def assemble(
    spec: JobSpec,
    source_archive: str,
    now: Clock,
    datacenters: Sequence[str] = DEFAULT_DATACENTERS,
) -> CanonicalJob:
    """
    Build the batch job that runs `spec` against `source_archive`.

    Args:
        spec: Decoded job spec
        source_archive: Locator of the packaged source; exposed to the task
            through the nomadci.clone_source meta key
        now: Clock returning unix seconds, used for the job id
        datacenters: Datacenters the job may be placed in

    Returns:
        CanonicalJob with one task group and one task, never restarted
    """
    jid = job_id(now)

    task = Task(
        name=BUILDER_NAME,
        # driver config is the driver's business; passed through unchecked
        driver=spec.driver,
        config=copy.deepcopy(spec.config),
        meta={CLONE_SOURCE_META_KEY: source_archive},
        env=dict(spec.env),
        resources=copy.deepcopy(spec.resources),
        artifacts=reconcile(spec.artifacts),
    )

    return CanonicalJob(
        id=jid,
        name=jid,
        datacenters=list(datacenters),
        task_groups=[
            TaskGroup(
                name=BUILDER_NAME,
                restart_policy=RestartPolicy(attempts=0, mode="fail"),
                tasks=[task],
            )
        ],
    )
