"""Tests for the task fetcher."""

from unittest.mock import MagicMock

from collab_client.client import ApiClient, Session
from collab_client.fetchers.tasks import TaskFetcher


def test_from_payload() -> None:
    """Test converting a TacheDTO."""
    fetcher = TaskFetcher(MagicMock(spec=ApiClient))
    task = fetcher.from_payload(
        {
            "id": 20,
            "titre": "Write specs",
            "description": "",
            "projetId": 10,
            "etat": "EN_COURS",
            "priorite": "HAUTE",
            "dateEcheance": "2025-01-31",
            "assigneId": 8,
            "nombreSousTaches": 3,
            "sousTachesTerminees": 1,
        }
    )
    assert task.id == 20
    assert task.title == "Write specs"
    assert task.state == "EN_COURS"
    assert task.priority == "HAUTE"
    assert task.project_id == 10
    assert task.assignee_id == 8
    assert (task.subtask_count, task.subtasks_done) == (3, 1)


def test_get_all_skips_non_objects() -> None:
    """Test that stray non-object entries in the collection are ignored."""
    client = MagicMock(spec=ApiClient)
    client.request.return_value = [{"id": 1, "titre": "A"}, None, "junk"]

    tasks = TaskFetcher(client).get_all(Session())

    assert [task.id for task in tasks] == [1]
