# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Artifact source that the scheduler interpolates with the task's
# nomadci.clone_source meta value at fetch time.
CLONE_SOURCE_PLACEHOLDER = "${NOMAD_META_nomadci_clone_source}"
CLONE_SOURCE_META_KEY = "nomadci.clone_source"

BUILDER_NAME = "builder"
JOB_TYPE_BATCH = "batch"

# lower-case resource keys accepted in job specs -> scheduler field names
_RESOURCE_KEYS = {
    "cpu": "CPU",
    "memory": "MemoryMB",
    "disk": "DiskMB",
    "iops": "IOPS",
    "networks": "Networks",
}


@dataclass(frozen=True)
class Artifact:
    """A file the task fetches before it starts."""
    source: str
    destination: Optional[str] = None
    options: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"source": self.source}
        if self.destination is not None:
            data["destination"] = self.destination
        if self.options is not None:
            data["options"] = self.options
        return data

    def to_nomad(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"GetterSource": self.source}
        if self.destination is not None:
            data["RelativeDest"] = self.destination
        if self.options is not None:
            data["GetterOptions"] = self.options
        return data


@dataclass
class JobSpec:
    """
    The user's description of the workload.

    driver/config/resources belong to the scheduler's task driver and are
    carried as-is.
    """
    driver: str
    config: Dict[str, Any]
    artifacts: List[Artifact] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    resources: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RestartPolicy:
    attempts: int = 0
    mode: str = "fail"


@dataclass
class Task:
    name: str
    driver: str
    config: Dict[str, Any]
    meta: Dict[str, str]
    env: Dict[str, str]
    resources: Dict[str, Any]
    artifacts: List[Artifact]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "driver": self.driver,
            "config": self.config,
            "meta": self.meta,
            "env": self.env,
            "resources": self.resources,
            "artifacts": [a.to_dict() for a in self.artifacts],
        }

    def to_nomad(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "Driver": self.driver,
            "Config": self.config,
            "Meta": self.meta,
            "Env": self.env,
            "Resources": {_RESOURCE_KEYS.get(k, k): v for k, v in self.resources.items()},
            "Artifacts": [a.to_nomad() for a in self.artifacts],
        }


@dataclass
class TaskGroup:
    name: str
    restart_policy: RestartPolicy
    tasks: List[Task]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "restart_policy": {
                "attempts": self.restart_policy.attempts,
                "mode": self.restart_policy.mode,
            },
            "tasks": [t.to_dict() for t in self.tasks],
        }

    def to_nomad(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "RestartPolicy": {
                "Attempts": self.restart_policy.attempts,
                "Mode": self.restart_policy.mode,
            },
            "Tasks": [t.to_nomad() for t in self.tasks],
        }


@dataclass
class CanonicalJob:
    """A scheduler-ready batch job: one group, one task, never restarted."""
    id: str
    name: str
    datacenters: List[str]
    task_groups: List[TaskGroup]
    type: str = JOB_TYPE_BATCH

    @property
    def task(self) -> Task:
        return self.task_groups[0].tasks[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "datacenters": list(self.datacenters),
            "type": self.type,
            "task_groups": [g.to_dict() for g in self.task_groups],
        }

    def to_nomad(self) -> Dict[str, Any]:
        """Body for the scheduler's job registration endpoint."""
        return {
            "Job": {
                "ID": self.id,
                "Name": self.name,
                "Datacenters": list(self.datacenters),
                "Type": self.type,
                "TaskGroups": [g.to_nomad() for g in self.task_groups],
            }
        }
