"""Group fetcher for the /groupes endpoints."""

from typing import Any

import structlog

from collab_client.fetcher import EntityFetcher, parse_member, parse_members, to_int
from collab_client.models import Group, GroupType

logger = structlog.get_logger()


class GroupFetcher(EntityFetcher[Group]):
    """Fetches and creates groups."""

    collection_path = "/groupes"
    entity_name = "group"
    field_map = {
        "name": "nom",
        "description": "description",
        "type": "type",
        "created_at": "dateCreation",
    }

    def from_payload(self, payload: dict[str, Any]) -> Group:
        """Convert a GroupeDTO into a Group."""
        members = parse_members(payload.get("membres"))
        member_count = to_int(payload.get("nombreMembres"))
        if member_count is None:
            member_count = len(members) if members else 0

        group = Group(
            id=to_int(payload.get("id")),
            name=payload.get("nom") or "",
            description=payload.get("description") or "",
            type=payload.get("type") or GroupType.PRIVATE.value,
            created_at=payload.get("dateCreation") or None,
            creator=parse_member(payload.get("createur")),
            members=members,
            member_count=member_count,
        )
        logger.debug("Converted payload to group", group_id=group.id, name=group.name)
        return group
