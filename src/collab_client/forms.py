"""Create forms and their local validation.

Forms hold the raw values the user typed. ``validate`` never touches the network
and leaves the form untouched, so a failed submit can be corrected and retried.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from collab_client.client import Session
from collab_client.errors import ValidationError
from collab_client.models import Group, GroupType, LocalMutation, Priority, Project, Task, TaskState, Visibility


def parse_iso_date(value: str) -> str:
    """Validate an ISO-8601 date or datetime string and return it normalized.

    Raises:
        ValueError: If the value does not parse
    """
    text = value.strip()
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        return datetime.fromisoformat(text).isoformat()


def parse_reference(value: Any) -> int:
    """Parse a numeric entity reference.

    Raises:
        ValueError: If the value is not an integer
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid reference: {value!r}")
    if isinstance(value, int):
        return value
    return int(str(value).strip())


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _check_date(errors: dict[str, str], name: str, value: str | None) -> None:
    if _blank(value):
        return
    try:
        parse_iso_date(value)
    except ValueError:
        errors[name] = "Invalid date, expected YYYY-MM-DD"


def _check_choice(errors: dict[str, str], name: str, value: str, choices: type) -> None:
    allowed = [choice.value for choice in choices]
    if value not in allowed:
        errors[name] = f"Must be one of: {', '.join(allowed)}"


@dataclass
class GroupForm:
    """Values entered in the create-group dialog."""

    name: str = ""
    description: str = ""
    type: str = GroupType.PRIVATE.value
    created_on: str | None = None

    def validate(self, session: Session) -> None:
        errors: dict[str, str] = {}
        if _blank(self.name):
            errors["name"] = "Group name is required"
        if _blank(self.description):
            errors["description"] = "Description is required"
        _check_choice(errors, "type", self.type, GroupType)
        _check_date(errors, "created_on", self.created_on)
        if not session.authenticated:
            errors["session"] = "User not authenticated"
        if errors:
            raise ValidationError(errors)

    @property
    def created_at(self) -> str | None:
        return None if _blank(self.created_on) else parse_iso_date(self.created_on)

    def mutation(self) -> LocalMutation:
        draft = Group(
            id=None,
            name=self.name.strip(),
            description=self.description.strip(),
            type=self.type,
            created_at=self.created_at,
        )
        expected = {"created_at": self.created_at} if self.created_at else {}
        return LocalMutation(draft=draft, expected=expected)


@dataclass
class ProjectForm:
    """Values entered in the create-project dialog."""

    name: str = ""
    description: str = ""
    group_id: str | int | None = None
    theme: str = ""
    visibility: str = Visibility.PRIVATE.value
    deadline: str | None = None

    def validate(self, session: Session) -> None:
        errors: dict[str, str] = {}
        if _blank(self.name):
            errors["name"] = "Project name is required"
        if _blank(self.description):
            errors["description"] = "Description is required"
        if self.group_id is None or (isinstance(self.group_id, str) and _blank(self.group_id)):
            errors["group_id"] = "A group is required to create a project"
        else:
            try:
                parse_reference(self.group_id)
            except ValueError:
                errors["group_id"] = "The selected group is invalid"
        _check_choice(errors, "visibility", self.visibility, Visibility)
        _check_date(errors, "deadline", self.deadline)
        if errors:
            raise ValidationError(errors)

    @property
    def group_ref(self) -> int:
        return parse_reference(self.group_id)

    @property
    def deadline_value(self) -> str | None:
        return None if _blank(self.deadline) else parse_iso_date(self.deadline)

    def body(self, session: Session) -> dict[str, Any]:
        """Wire body shared by every project submission shape, without the group reference."""
        return {
            "nom": self.name.strip(),
            "description": self.description.strip(),
            "theme": self.theme.strip(),
            "visibilite": self.visibility,
            "dateEcheance": self.deadline_value,
            "creatorId": session.user_id,
        }

    def mutation(self) -> LocalMutation:
        draft = Project(
            id=None,
            name=self.name.strip(),
            description=self.description.strip(),
            theme=self.theme.strip(),
            visibility=self.visibility,
            group_id=self.group_ref,
            deadline=self.deadline_value,
        )
        expected = {"deadline": self.deadline_value} if self.deadline_value else {}
        return LocalMutation(draft=draft, expected=expected)


@dataclass
class TaskForm:
    """Values entered in the create-task dialog."""

    title: str = ""
    project_id: str | int | None = None
    description: str = ""
    priority: str = Priority.MEDIUM.value
    deadline: str | None = None

    def validate(self, session: Session) -> None:
        errors: dict[str, str] = {}
        if _blank(self.title):
            errors["title"] = "Title is required"
        if self.project_id is None or (isinstance(self.project_id, str) and _blank(self.project_id)):
            errors["project_id"] = "Please select a project"
        else:
            try:
                parse_reference(self.project_id)
            except ValueError:
                errors["project_id"] = "The selected project is invalid"
        _check_choice(errors, "priority", self.priority, Priority)
        _check_date(errors, "deadline", self.deadline)
        if errors:
            raise ValidationError(errors)

    @property
    def project_ref(self) -> int:
        return parse_reference(self.project_id)

    @property
    def deadline_value(self) -> str | None:
        return None if _blank(self.deadline) else parse_iso_date(self.deadline)

    def body(self, session: Session) -> dict[str, Any]:
        """Wire body shared by every task submission shape, without the project reference."""
        return {
            "titre": self.title.strip(),
            "description": self.description.strip(),
            "priorite": self.priority,
            "dateEcheance": self.deadline_value,
            "etat": TaskState.TODO.value,
        }

    def mutation(self) -> LocalMutation:
        draft = Task(
            id=None,
            title=self.title.strip(),
            description=self.description.strip(),
            priority=self.priority,
            project_id=self.project_ref,
            deadline=self.deadline_value,
        )
        expected = {"deadline": self.deadline_value} if self.deadline_value else {}
        return LocalMutation(draft=draft, expected=expected)
