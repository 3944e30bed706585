"""List synchronization: the authoritative local collection for one entity type.

The controller is the only thing that mutates its collection. Callers read the
``items`` tuple or a filtered ``view`` and go through ``load``, ``reconcile`` and
``join`` for changes.

Overrides are a local-only annotation layer keyed by entity id: values the user
supplied that the server failed to persist. They are never written back into
the cached entities, so server state and local intent stay distinguishable.
"""

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from collab_client.client import Session
from collab_client.errors import ReconciliationWarning, TransportError
from collab_client.fetcher import EntityFetcher
from collab_client.models import Entity, LocalMutation, Partial, SubmissionResult, is_missing

logger = structlog.get_logger()


@dataclass(frozen=True)
class ListFilters:
    """Active list predicates; empty values are inactive."""

    search: str | None = None
    category: str | None = None

    @property
    def active(self) -> bool:
        return bool(self.search) or bool(self.category)


def _text(value: Any) -> str:
    return "" if value is None else str(value).lower()


def _matches(entity: Any, filters: ListFilters) -> bool:
    if filters.search:
        needle = filters.search.lower()
        label = _text(getattr(entity, "label", None))
        description = _text(getattr(entity, "description", None))
        if needle not in label and needle not in description:
            return False
    if filters.category and getattr(entity, "category", None) != filters.category:
        return False
    return True


def apply_filters(collection: Iterable[Entity], filters: ListFilters) -> list[Entity]:
    """Return the entities matching every active predicate, in collection order."""
    items = list(collection)
    if not filters.active:
        return items
    return [entity for entity in items if _matches(entity, filters)]


def _member_id(member: Any) -> Any:
    if isinstance(member, Mapping):
        return member.get("id")
    return getattr(member, "id", None)


def membership_of(entity: Any, actor_id: int | None) -> bool:
    """Return True iff the entity's member list contains ``actor_id``.

    Absent, empty or malformed member lists yield False.
    """
    if actor_id is None:
        return False
    members = getattr(entity, "members", None)
    if not isinstance(members, (list, tuple)) or not members:
        return False
    return any(_member_id(member) == actor_id for member in members)


class ListController:
    """Owns the cached collection for one entity type."""

    def __init__(self, fetcher: EntityFetcher) -> None:
        self.fetcher = fetcher
        self._items: list[Entity] = []
        self.overrides: dict[int, dict[str, Any]] = {}
        self.warnings: list[ReconciliationWarning] = []
        self.error: str | None = None
        self.loading = False
        self._next_temp_id = -1

    @property
    def items(self) -> tuple[Entity, ...]:
        return tuple(self._items)

    @property
    def entity_name(self) -> str:
        return self.fetcher.entity_name

    def view(self, filters: ListFilters) -> list[Entity]:
        return apply_filters(self._items, filters)

    def find(self, entity_id: int) -> Entity | None:
        for entity in self._items:
            if entity.id == entity_id:
                return entity
        return None

    def load(self, session: Session) -> bool:
        """Fetch the full collection.

        On failure the previous collection is kept and ``error`` is set.

        Returns:
            True when the collection was replaced
        """
        self.loading = True
        try:
            fresh = self.fetcher.get_all(session)
        except TransportError as e:
            self.error = e.user_message(f"Failed to load {self.entity_name}s")
            logger.error("Failed to load collection", entity=self.entity_name, status=e.status, error=self.error)
            return False
        finally:
            self.loading = False

        self._items = self._carry_unconfirmed(fresh)
        self.error = None
        logger.info("Collection loaded", entity=self.entity_name, count=len(self._items))
        return True

    def refresh(self, session: Session) -> bool:
        """Load unless a load is already in flight."""
        if self.loading:
            logger.debug("Load already in flight, skipping refresh", entity=self.entity_name)
            return False
        return self.load(session)

    def _carry_unconfirmed(self, fresh: list[Entity]) -> list[Entity]:
        """Keep temporary entities the server still does not return."""
        merged = list(fresh)
        by_label = {entity.label: entity for entity in fresh}
        for entity in self._items:
            if entity.confirmed:
                continue
            match = by_label.get(entity.label)
            if match is None:
                merged.append(entity)
                continue
            logger.info(
                "Temporary entity confirmed by server",
                entity=self.entity_name,
                temp_id=entity.id,
                entity_id=match.id,
            )
            carried = self.overrides.pop(entity.id, {})
            still_missing = {name: value for name, value in carried.items() if is_missing(getattr(match, name, None))}
            if still_missing and match.id is not None:
                self.overrides.setdefault(match.id, {}).update(still_missing)
        return merged

    def _adopt(self, entity: Entity) -> Entity:
        """Return the collection's entity for ``entity.id``, appending ``entity`` if absent.

        A reloaded entity wins over the mutation response, which may omit fields.
        """
        current = self.find(entity.id)
        if current is not None:
            return current
        self._items.append(entity)
        return entity

    def _store_override(self, entity_id: int, missing: dict[str, Any]) -> None:
        self.overrides.setdefault(entity_id, {}).update(missing)
        for name, value in missing.items():
            message = f"The server did not save {name.replace('_', ' ')}; {value} is kept locally only"
            self.warnings.append(ReconciliationWarning(entity_id=entity_id, field=name, value=value, message=message))
            logger.warning("Stored local override", entity=self.entity_name, entity_id=entity_id, field=name)

    def _match_by_label(self, label: str, expected: dict[str, Any]) -> Entity | None:
        # TODO: prefer a server-issued correlation token once the create endpoints return one;
        # same-named entities can be misattributed here.
        for entity in reversed(self._items):
            if not entity.confirmed or entity.label != label:
                continue
            if all(is_missing(getattr(entity, name, None)) for name in expected):
                return entity
        return None

    def _temporary(self, draft: Entity) -> Entity:
        temp_id = self._next_temp_id
        self._next_temp_id -= 1
        return dataclasses.replace(draft, id=temp_id, confirmed=False)

    def reconcile(self, mutation: LocalMutation, result: SubmissionResult) -> Entity:
        """Merge a create/update result into the collection.

        Args:
            mutation: The draft and the optional values the user asked for
            result: Complete or Partial server result

        Returns:
            The entity now held in the collection for this mutation
        """
        entity = result.entity
        missing = dict(result.missing_fields) if isinstance(result, Partial) else {}

        if entity.id is not None:
            current = self._adopt(entity)
            missing = {name: value for name, value in missing.items() if is_missing(getattr(current, name, None))}
            if missing:
                self._store_override(current.id, missing)
            else:
                self.overrides.pop(current.id, None)
            logger.info(
                "Reconciled entity",
                entity=self.entity_name,
                entity_id=current.id,
                reloaded=current is not entity,
                partial=bool(missing),
            )
            return current

        label = entity.label or mutation.draft.label
        expected = {name: value for name, value in mutation.expected.items() if not is_missing(value)}
        match = self._match_by_label(label, expected)
        if match is not None:
            logger.warning("Matched created entity by name", entity=self.entity_name, entity_id=match.id, label=label)
            unsaved = {name: value for name, value in expected.items() if is_missing(getattr(match, name, None))}
            if unsaved:
                self._store_override(match.id, unsaved)
            return match

        temp = self._temporary(mutation.draft)
        self._items.append(temp)
        logger.warning("Added unconfirmed temporary entity", entity=self.entity_name, temp_id=temp.id, label=label)
        if expected:
            self._store_override(temp.id, expected)
        return temp

    def display_value(self, entity: Entity, field: str) -> Any:
        """Value to render for ``field``: the local override when present, else the server value."""
        if entity.id is not None and field in self.overrides.get(entity.id, {}):
            return self.overrides[entity.id][field]
        return getattr(entity, field, None)

    def is_override(self, entity: Entity, field: str) -> bool:
        return entity.id is not None and field in self.overrides.get(entity.id, {})

    def dismiss_warning(self, warning: ReconciliationWarning) -> None:
        if warning in self.warnings:
            self.warnings.remove(warning)

    def join(self, entity_id: int, session: Session) -> str | None:
        """Add the session user as a member, then reload the collection.

        Returns:
            None on success, otherwise a user-facing error message
        """
        if session.user_id is None:
            return "User not authenticated"
        try:
            self.fetcher.add_member(entity_id, session.user_id, session)
        except TransportError as e:
            message = e.user_message(f"Failed to join {self.entity_name}")
            logger.error("Failed to join", entity=self.entity_name, entity_id=entity_id, error=message)
            return message
        self.load(session)
        return None
