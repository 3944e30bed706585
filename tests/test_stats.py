"""Tests for dashboard statistics."""

from collab_client.models import Project, Task
from collab_client.stats import summarize


def test_summarize_empty() -> None:
    """Test statistics over empty collections."""
    stats = summarize([], [])
    assert stats.total_projects == 0
    assert stats.total_tasks == 0
    assert stats.project_status == {}
    assert stats.task_state == {}


def test_summarize() -> None:
    """Test totals and distributions."""
    projects = [
        Project(id=1, name="A", status="ACCEPTE"),
        Project(id=2, name="B", status="EN_ATTENTE"),
        Project(id=3, name="C", status="ACCEPTE"),
    ]
    tasks = [
        Task(id=1, title="a", state="A_FAIRE"),
        Task(id=2, title="b", state="EN_COURS"),
        Task(id=3, title="c", state="TERMINE"),
        Task(id=4, title="d", state="TERMINE"),
    ]

    stats = summarize(projects, tasks)

    assert stats.total_projects == 3
    assert stats.total_tasks == 4
    assert stats.completed_tasks == 2
    assert stats.in_progress_tasks == 1
    assert stats.project_status == {"ACCEPTE": 2, "EN_ATTENTE": 1}
    assert stats.task_state == {"To Do": 1, "In Progress": 1, "Done": 2}
