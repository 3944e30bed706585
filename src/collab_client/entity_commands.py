"""Group, project and task commands for the collab CLI."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Annotated

import structlog
from cyclopts import App, Parameter

from collab_client.board import kanban_columns
from collab_client.client import ApiClient, Session
from collab_client.create_flow import CreateFlow, CreateForm, CreateOutcome, group_flow, project_flow, task_flow
from collab_client.errors import TransportError
from collab_client.fetcher import EntityFetcher
from collab_client.fetchers import GroupFetcher, ProjectFetcher, TaskFetcher
from collab_client.forms import GroupForm, ProjectForm, TaskForm
from collab_client.models import GroupType, Priority, Visibility
from collab_client.sync import ListController, ListFilters, membership_of

logger = structlog.get_logger()

groups_app = App(name="groups", help="Browse, create and join groups")
projects_app = App(name="projects", help="Browse, create and join projects")
tasks_app = App(name="tasks", help="Browse and create tasks")


@contextmanager
def _connect() -> Iterator[tuple[ApiClient, Session]]:
    """Open a configured client for the duration of one command."""
    from collab_client.cli import build_client, build_session

    session = build_session()
    with build_client() as client:
        yield client, session


@contextmanager
def _loaded(fetcher_cls: type[EntityFetcher]) -> Iterator[tuple[ListController, Session]]:
    with _connect() as (client, session):
        controller = ListController(fetcher_cls(client))
        controller.load(session)
        if controller.error:
            print(f"Error: {controller.error}")
        yield controller, session


def _report(outcome: CreateOutcome, noun: str) -> None:
    if outcome.field_errors:
        for name, message in outcome.field_errors.items():
            print(f"  {name}: {message}")
        return
    if not outcome.ok:
        print(f"Error: {outcome.message}")
        return
    entity = outcome.entity
    suffix = "" if entity.confirmed else " (unconfirmed, shown locally)"
    print(f"Created {noun} {entity.id}: {entity.label}{suffix}")
    for warning in outcome.warnings:
        print(f"Warning: {warning.message}")


def _submit(
    fetcher: EntityFetcher,
    make_flow: Callable[[ListController], CreateFlow],
    form: CreateForm,
    session: Session,
    noun: str,
) -> None:
    outcome = make_flow(ListController(fetcher)).submit(form, session)
    _report(outcome, noun)


def _create(
    fetcher_cls: type[EntityFetcher],
    make_flow: Callable[[ListController], CreateFlow],
    form: CreateForm,
    noun: str,
) -> None:
    with _connect() as (client, session):
        _submit(fetcher_cls(client), make_flow, form, session, noun)


def _join(fetcher_cls: type[EntityFetcher], entity_id: int, noun: str) -> None:
    with _loaded(fetcher_cls) as (controller, session):
        error = controller.join(entity_id, session)
    if error:
        print(f"Error: {error}")
    else:
        print(f"Joined {noun} {entity_id}")


def _only_group(client: ApiClient, session: Session) -> int | None:
    """Return the id of the single visible group, or None when there is not exactly one."""
    try:
        groups = GroupFetcher(client).get_all(session)
    except TransportError as e:
        logger.warning("Could not load groups for default selection", status=e.status)
        return None
    if len(groups) != 1:
        return None
    return groups[0].id


@groups_app.command(name="list")
def list_groups(
    search: str | None = None,
    group_type: Annotated[str | None, Parameter(name="--type")] = None,
) -> None:
    """List groups, optionally filtered by text and type (PUBLIC or PRIVE)."""
    with _loaded(GroupFetcher) as (controller, session):
        groups = controller.view(ListFilters(search=search, category=group_type))
    if not groups:
        print("No groups match your filters" if search or group_type else "No groups found")
        return

    print(f"Found {len(groups)} group(s):\n")
    for group in groups:
        marker = "●" if membership_of(group, session.user_id) else "○"
        created = controller.display_value(group, "created_at") or "unknown"
        local = " (local)" if controller.is_override(group, "created_at") else ""
        print(f"{marker} {group.id}: {group.name} [{group.type}] {group.member_count} member(s), created {created}{local}")


@groups_app.command(name="create")
def create_group(
    name: str,
    description: str,
    group_type: Annotated[str, Parameter(name="--type")] = GroupType.PRIVATE.value,
    created_on: str | None = None,
) -> None:
    """Create a group."""
    form = GroupForm(name=name, description=description, type=group_type, created_on=created_on)
    _create(GroupFetcher, group_flow, form, "group")


@groups_app.command(name="join")
def join_group(group_id: int) -> None:
    """Join a public group."""
    _join(GroupFetcher, group_id, "group")


@projects_app.command(name="list")
def list_projects(search: str | None = None, status: str | None = None) -> None:
    """List projects, optionally filtered by text and status."""
    with _loaded(ProjectFetcher) as (controller, session):
        projects = controller.view(ListFilters(search=search, category=status))
    if not projects:
        print("No projects match your filters" if search or status else "No projects found")
        return

    print(f"Found {len(projects)} project(s):\n")
    for project in projects:
        marker = "●" if membership_of(project, session.user_id) else "○"
        due = controller.display_value(project, "deadline")
        due_text = f", due {due}" if due else ""
        print(
            f"{marker} {project.id}: {project.name} [{project.status}, {project.visibility}] "
            f"{project.completion_rate:g}% complete, {project.task_count} task(s){due_text}"
        )


@projects_app.command(name="create")
def create_project(
    name: str,
    description: str,
    group: str | None = None,
    theme: str = "",
    visibility: str = Visibility.PRIVATE.value,
    deadline: str | None = None,
) -> None:
    """Create a project in a group.

    When --group is omitted and exactly one group exists, that group is used.
    """
    with _connect() as (client, session):
        if group is None:
            only = _only_group(client, session)
            if only is not None:
                print(f"Using group {only}")
                group = str(only)
        form = ProjectForm(
            name=name,
            description=description,
            group_id=group,
            theme=theme,
            visibility=visibility,
            deadline=deadline,
        )
        _submit(ProjectFetcher(client), project_flow, form, session, "project")


@projects_app.command(name="join")
def join_project(project_id: int) -> None:
    """Join a public, accepted project."""
    _join(ProjectFetcher, project_id, "project")


@tasks_app.command(name="list")
def list_tasks(search: str | None = None, state: str | None = None) -> None:
    """List tasks, optionally filtered by text and state."""
    with _loaded(TaskFetcher) as (controller, _):
        tasks = controller.view(ListFilters(search=search, category=state))
    if not tasks:
        print("No tasks match your filters" if search or state else "No tasks found")
        return

    print(f"Found {len(tasks)} task(s):\n")
    for task in tasks:
        due = controller.display_value(task, "deadline")
        due_text = f" due {due}" if due else ""
        print(f"- {task.id}: {task.title} [{task.state}, {task.priority}]{due_text}")


@tasks_app.command(name="create")
def create_task(
    title: str,
    project: str,
    description: str = "",
    priority: str = Priority.MEDIUM.value,
    deadline: str | None = None,
) -> None:
    """Create a task in a project."""
    form = TaskForm(title=title, project_id=project, description=description, priority=priority, deadline=deadline)
    _create(TaskFetcher, task_flow, form, "task")


@tasks_app.command
def board(search: str | None = None) -> None:
    """Show tasks as a Kanban board."""
    with _loaded(TaskFetcher) as (controller, _):
        columns = kanban_columns(controller.view(ListFilters(search=search)))
    for column in columns:
        print(f"{column.title} ({len(column.tasks)})")
        for task in column.tasks:
            print(f"  - {task.id}: {task.title} [{task.priority}]")
        print()
