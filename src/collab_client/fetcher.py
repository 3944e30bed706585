"""Entity fetcher interface shared by groups, projects and tasks."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import structlog

from collab_client.client import ApiClient, Session
from collab_client.errors import UnexpectedEmptyResponse
from collab_client.models import Member

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class RequestDescriptor:
    """One HTTP request shape produced by a submission strategy."""

    method: str
    path: str
    json: dict[str, Any] | None = None
    params: dict[str, Any] = field(default_factory=dict)


def to_int(value: Any) -> int | None:
    """Convert a wire value to int, returning None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_member(payload: Any) -> Member | None:
    """Convert a UtilisateurDTO into a Member."""
    if not isinstance(payload, dict):
        return None
    return Member(
        id=to_int(payload.get("id")),
        first_name=payload.get("prenom") or "",
        last_name=payload.get("nom") or "",
        email=payload.get("email") or "",
    )


def parse_members(payload: Any) -> list[Member] | None:
    """Convert a member list; anything that is not a list yields None."""
    if not isinstance(payload, list):
        return None
    members = []
    for item in payload:
        member = parse_member(item)
        if member is not None:
            members.append(member)
    return members


class EntityFetcher(ABC, Generic[T]):
    """Abstract base class for per-entity REST fetchers.

    Subclasses set ``collection_path``, ``entity_name`` and ``field_map`` (model
    attribute name to wire name) and implement ``from_payload``.
    """

    collection_path: str = ""
    entity_name: str = "entity"
    field_map: dict[str, str] = {}

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    @abstractmethod
    def from_payload(self, payload: dict[str, Any]) -> T:
        """Convert a wire DTO into a model instance."""
        pass

    def to_payload(self, changes: dict[str, Any]) -> dict[str, Any]:
        """Convert model field names to wire names, dropping unknown fields."""
        payload = {}
        for name, value in changes.items():
            wire_name = self.field_map.get(name)
            if wire_name is None:
                logger.debug("Ignoring unmapped field", entity=self.entity_name, field=name)
                continue
            payload[wire_name] = value
        return payload

    def item_path(self, entity_id: int) -> str:
        return f"{self.collection_path}/{entity_id}"

    def get_all(self, session: Session) -> list[T]:
        """Fetch the full collection."""
        logger.info("Fetching collection", entity=self.entity_name)
        data = self.client.request("GET", self.collection_path, session)
        if not isinstance(data, list):
            logger.debug("Collection body is not a list, treating as empty", entity=self.entity_name)
            return []
        items = [self.from_payload(item) for item in data if isinstance(item, dict)]
        logger.info("Fetched collection", entity=self.entity_name, count=len(items))
        return items

    def get_by_id(self, entity_id: int, session: Session) -> T:
        """Fetch one entity by ID."""
        logger.info("Fetching entity", entity=self.entity_name, entity_id=entity_id)
        status, data = self.client.send("GET", self.item_path(entity_id), session)
        if not isinstance(data, dict) or not data:
            raise UnexpectedEmptyResponse(status, data)
        return self.from_payload(data)

    def create(self, request: RequestDescriptor, session: Session) -> T:
        """Issue one create request shape and parse the created entity.

        Raises:
            TransportError: On failure
            UnexpectedEmptyResponse: When the server answered 2xx without an entity
        """
        logger.info("Creating entity", entity=self.entity_name, path=request.path, params=request.params)
        status, data = self.client.send(
            request.method,
            request.path,
            session,
            json=request.json,
            params=request.params or None,
        )
        if not isinstance(data, dict) or not data:
            logger.warning("Create returned no entity", entity=self.entity_name, path=request.path, status=status)
            raise UnexpectedEmptyResponse(status, data)
        entity = self.from_payload(data)
        logger.info("Entity created", entity=self.entity_name, entity_id=getattr(entity, "id", None))
        return entity

    def update(self, entity_id: int, changes: dict[str, Any], session: Session) -> T | None:
        """Patch an entity with model-named changes."""
        logger.info("Updating entity", entity=self.entity_name, entity_id=entity_id, fields=list(changes))
        data = self.client.request("PATCH", self.item_path(entity_id), session, json=self.to_payload(changes))
        if isinstance(data, dict) and data:
            return self.from_payload(data)
        return None

    def add_member(self, entity_id: int, user_id: int, session: Session) -> None:
        """Add a user to the entity's member list."""
        logger.info("Adding member", entity=self.entity_name, entity_id=entity_id, user_id=user_id)
        self.client.request(
            "POST",
            f"{self.item_path(entity_id)}/membres",
            session,
            json={"utilisateurId": user_id},
        )
        logger.info("Member added", entity=self.entity_name, entity_id=entity_id, user_id=user_id)
