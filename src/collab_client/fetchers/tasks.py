"""Task fetcher for the /taches endpoints."""

from typing import Any

import structlog

from collab_client.fetcher import EntityFetcher, to_int
from collab_client.models import Priority, Task, TaskState

logger = structlog.get_logger()


class TaskFetcher(EntityFetcher[Task]):
    """Fetches and creates tasks."""

    collection_path = "/taches"
    entity_name = "task"
    field_map = {
        "title": "titre",
        "description": "description",
        "state": "etat",
        "priority": "priorite",
        "project_id": "projetId",
        "deadline": "dateEcheance",
        "assignee_id": "assigneId",
    }

    def from_payload(self, payload: dict[str, Any]) -> Task:
        """Convert a TacheDTO into a Task."""
        project_id = to_int(payload.get("projetId"))
        if project_id is None and isinstance(payload.get("projet"), dict):
            project_id = to_int(payload["projet"].get("id"))

        task = Task(
            id=to_int(payload.get("id")),
            title=payload.get("titre") or "",
            description=payload.get("description") or "",
            state=payload.get("etat") or TaskState.TODO.value,
            priority=payload.get("priorite") or Priority.MEDIUM.value,
            project_id=project_id,
            deadline=payload.get("dateEcheance") or None,
            created_at=payload.get("dateCreation") or None,
            updated_at=payload.get("dateModification") or None,
            creator_id=to_int(payload.get("creatorId")),
            assignee_id=to_int(payload.get("assigneId")),
            subtask_count=to_int(payload.get("nombreSousTaches")) or 0,
            subtasks_done=to_int(payload.get("sousTachesTerminees")) or 0,
        )
        logger.debug("Converted payload to task", task_id=task.id, title=task.title)
        return task
