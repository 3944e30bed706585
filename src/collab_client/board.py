"""Kanban board columns for tasks."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from collab_client.models import Task, TaskState

COLUMN_TITLES = {
    TaskState.TODO.value: "To Do",
    TaskState.IN_PROGRESS.value: "In Progress",
    TaskState.DONE.value: "Done",
}


@dataclass
class Column:
    state: str
    title: str
    tasks: list[Task] = field(default_factory=list)


def kanban_columns(tasks: Iterable[Task]) -> list[Column]:
    """Place tasks into the To Do / In Progress / Done columns by state.

    Tasks with an unknown state are left out.
    """
    columns = {state: Column(state=state, title=title) for state, title in COLUMN_TITLES.items()}
    for task in tasks:
        column = columns.get(task.state)
        if column is not None:
            column.tasks.append(task)
    return list(columns.values())
