"""Project fetcher for the /projets endpoints."""

from typing import Any

import structlog

from collab_client.fetcher import EntityFetcher, parse_members, to_int
from collab_client.models import Project, ProjectStatus, Visibility

logger = structlog.get_logger()


class ProjectFetcher(EntityFetcher[Project]):
    """Fetches and creates projects.

    Creation goes through ``/projets/creer`` rather than the collection path.
    """

    collection_path = "/projets"
    create_path = "/projets/creer"
    entity_name = "project"
    field_map = {
        "name": "nom",
        "description": "description",
        "theme": "theme",
        "status": "statut",
        "visibility": "visibilite",
        "group_id": "groupeId",
        "deadline": "dateEcheance",
        "created_at": "dateCreation",
    }

    def from_payload(self, payload: dict[str, Any]) -> Project:
        """Convert a ProjetDTO into a Project."""
        group_id = to_int(payload.get("groupeId"))
        if group_id is None and isinstance(payload.get("groupe"), dict):
            group_id = to_int(payload["groupe"].get("id"))

        rate = payload.get("tauxCompletion")
        project = Project(
            id=to_int(payload.get("id")),
            name=payload.get("nom") or "",
            description=payload.get("description") or "",
            theme=payload.get("theme") or "",
            status=payload.get("statut") or ProjectStatus.PENDING.value,
            visibility=payload.get("visibilite") or Visibility.PRIVATE.value,
            group_id=group_id,
            deadline=payload.get("dateEcheance") or None,
            created_at=payload.get("dateCreation") or None,
            updated_at=payload.get("dateModification") or None,
            creator_id=to_int(payload.get("creatorId")),
            member_count=to_int(payload.get("nombreMembres")) or 0,
            task_count=to_int(payload.get("nombreTaches")) or 0,
            completion_rate=float(rate) if isinstance(rate, (int, float)) else 0.0,
            members=parse_members(payload.get("membres")),
        )
        logger.debug("Converted payload to project", project_id=project.id, name=project.name)
        return project
