"""Data models for the collaboration client."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class GroupType(str, Enum):
    """Group visibility as stored by the backend."""

    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVE"


class Visibility(str, Enum):
    """Project visibility as stored by the backend."""

    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVE"


class ProjectStatus(str, Enum):
    """Project review status."""

    PENDING = "EN_ATTENTE"
    ACCEPTED = "ACCEPTE"
    REJECTED = "REJETE"
    CLOSED = "CLOTURE"


class TaskState(str, Enum):
    """Task state, which drives Kanban column placement."""

    TODO = "A_FAIRE"
    IN_PROGRESS = "EN_COURS"
    DONE = "TERMINE"


class Priority(str, Enum):
    """Task priority."""

    LOW = "BASSE"
    MEDIUM = "MOYENNE"
    HIGH = "HAUTE"


@dataclass
class Member:
    """A user referenced from a member list or as a creator."""

    id: int | None
    first_name: str = ""
    last_name: str = ""
    email: str = ""

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email or str(self.id)


@dataclass
class Group:
    """Represents a collaboration group."""

    id: int | None
    name: str
    description: str = ""
    type: str = GroupType.PRIVATE.value
    created_at: str | None = None
    creator: Member | None = None
    members: list[Member] | None = None
    member_count: int = 0
    confirmed: bool = True

    @property
    def label(self) -> str:
        return self.name

    @property
    def category(self) -> str:
        return self.type


@dataclass
class Project:
    """Represents a project attached to a group."""

    id: int | None
    name: str
    description: str = ""
    theme: str = ""
    status: str = ProjectStatus.PENDING.value
    visibility: str = Visibility.PRIVATE.value
    group_id: int | None = None
    deadline: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    creator_id: int | None = None
    member_count: int = 0
    task_count: int = 0
    completion_rate: float = 0.0
    members: list[Member] | None = None
    confirmed: bool = True

    @property
    def label(self) -> str:
        return self.name

    @property
    def category(self) -> str:
        return self.status


@dataclass
class Task:
    """Represents a task inside a project."""

    id: int | None
    title: str
    description: str = ""
    state: str = TaskState.TODO.value
    priority: str = Priority.MEDIUM.value
    project_id: int | None = None
    deadline: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    creator_id: int | None = None
    assignee_id: int | None = None
    subtask_count: int = 0
    subtasks_done: int = 0
    confirmed: bool = True

    @property
    def label(self) -> str:
        return self.title

    @property
    def category(self) -> str:
        return self.state


Entity = Group | Project | Task


def is_missing(value: Any) -> bool:
    """Return True when a server value counts as absent."""
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class Complete:
    """Server response that carried every field the client asked to persist."""

    entity: Entity


@dataclass
class Partial:
    """Server response that dropped one or more requested fields."""

    entity: Entity
    missing_fields: dict[str, Any] = field(default_factory=dict)


SubmissionResult = Complete | Partial


def classify(entity: Entity, expected: dict[str, Any]) -> SubmissionResult:
    """Tag a server entity as complete or partial against the expected field values.

    Args:
        entity: Entity parsed from the server response
        expected: Model field names mapped to the values the user supplied

    Returns:
        Complete when every expected field is present, otherwise Partial with the
        missing fields and the values the user asked for
    """
    missing = {
        name: value
        for name, value in expected.items()
        if not is_missing(value) and is_missing(getattr(entity, name, None))
    }
    if missing:
        return Partial(entity=entity, missing_fields=missing)
    return Complete(entity=entity)


@dataclass
class LocalMutation:
    """What the user asked for: a draft entity plus the optional fields to keep."""

    draft: Entity
    expected: dict[str, Any] = field(default_factory=dict)
