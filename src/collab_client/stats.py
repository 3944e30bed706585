"""Dashboard statistics over the project and task collections."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from collab_client.board import COLUMN_TITLES
from collab_client.models import Project, Task, TaskState


@dataclass
class DashboardStats:
    total_projects: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    project_status: dict[str, int] = field(default_factory=dict)
    task_state: dict[str, int] = field(default_factory=dict)


def summarize(projects: Iterable[Project], tasks: Iterable[Task]) -> DashboardStats:
    """Compute key metrics and status distributions.

    Project statuses are keyed by their raw value; task states are keyed by the
    Kanban column title, with unknown states grouped under "Done" as the dashboard did.
    """
    projects = list(projects)
    tasks = list(tasks)

    project_status = Counter(project.status for project in projects)
    task_state: Counter[str] = Counter()
    for task in tasks:
        task_state[COLUMN_TITLES.get(task.state, COLUMN_TITLES[TaskState.DONE.value])] += 1

    return DashboardStats(
        total_projects=len(projects),
        total_tasks=len(tasks),
        completed_tasks=sum(1 for task in tasks if task.state == TaskState.DONE.value),
        in_progress_tasks=sum(1 for task in tasks if task.state == TaskState.IN_PROGRESS.value),
        project_status=dict(project_status),
        task_state=dict(task_state),
    )
