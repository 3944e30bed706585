"""Shared fixtures: an in-memory collaboration backend behind httpx.MockTransport."""

import json
from collections.abc import Iterator
from typing import Any

import httpx
import pytest
import structlog

from collab_client.cli import configure_logging
from collab_client.client import ApiClient, Session

BASE_URL = "http://collab.test"


@pytest.fixture(autouse=True)
def _quiet_logging() -> Iterator[None]:
    """Apply the CLI's default log level so structlog output stays out of captured stdout."""
    configure_logging("critical")
    yield
    structlog.reset_defaults()

USERS = {
    7: {"id": 7, "nom": "Martin", "prenom": "Alice", "email": "alice@example.com"},
    8: {"id": 8, "nom": "Durand", "prenom": "Bob", "email": "bob@example.com"},
}


def _json(request: httpx.Request) -> dict[str, Any]:
    if not request.content:
        return {}
    return json.loads(request.content)


def _int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class FakeBackend:
    """Minimal stand-in for the REST backend.

    Knobs reproduce the inconsistencies the client works around:
    ``project_group_in`` picks the only request shape /projets/creer accepts,
    ``drop_group_dates`` makes group creation ignore dateCreation,
    ``drop_deadlines`` does the same for project and task deadlines,
    ``ignore_patches`` makes PATCH succeed without persisting anything,
    ``omit_ids`` strips ids from create responses and
    ``bare_creates`` strips member lists and counts from create responses.
    """

    def __init__(self) -> None:
        self.groups: dict[int, dict[str, Any]] = {}
        self.projects: dict[int, dict[str, Any]] = {}
        self.tasks: dict[int, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.project_group_in = "body"
        self.drop_group_dates = False
        self.drop_deadlines = False
        self.ignore_patches = False
        self.omit_ids = False
        self.bare_creates = False
        self.fail_lists = False
        self._next_id = 1

    def _new_id(self) -> int:
        new_id = self._next_id
        self._next_id += 1
        return new_id

    def _created(self, record: dict[str, Any]) -> httpx.Response:
        body = dict(record)
        if self.omit_ids:
            body.pop("id", None)
        if self.bare_creates:
            body.pop("membres", None)
            body.pop("nombreMembres", None)
        return httpx.Response(201, json=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")
        resource = parts[0]
        store = {"groupes": self.groups, "projets": self.projects, "taches": self.tasks}.get(resource)
        if store is None:
            return httpx.Response(404, json={"message": "Not found"})

        if len(parts) == 1 and request.method == "GET":
            if self.fail_lists:
                return httpx.Response(503, text="Service Unavailable")
            return httpx.Response(200, json=list(store.values()))

        if resource == "groupes" and len(parts) == 1 and request.method == "POST":
            return self._create_group(request)
        if resource == "projets" and parts[1:] == ["creer"] and request.method == "POST":
            return self._create_project(request)
        if resource == "taches" and len(parts) == 1 and request.method == "POST":
            return self._create_task(request)

        entity_id = _int(parts[1]) if len(parts) > 1 else None
        record = store.get(entity_id)
        if record is None:
            return httpx.Response(404, json={"message": f"{resource} {parts[1]} introuvable"})

        if len(parts) == 2 and request.method == "GET":
            return httpx.Response(200, json=record)
        if len(parts) == 2 and request.method == "PATCH":
            if not self.ignore_patches:
                record.update(_json(request))
            return httpx.Response(200, json=record)
        if parts[2:] == ["membres"] and request.method == "POST":
            user = USERS.get(_json(request).get("utilisateurId"))
            if user is None:
                return httpx.Response(400, json={"message": "Utilisateur inconnu"})
            members = record.setdefault("membres", [])
            if all(member["id"] != user["id"] for member in members):
                members.append(user)
            record["nombreMembres"] = len(members)
            return httpx.Response(204)
        return httpx.Response(405, json={"message": "Method not allowed"})

    def _create_group(self, request: httpx.Request) -> httpx.Response:
        body = _json(request)
        creator_id = _int(request.url.params.get("createurId"))
        if creator_id is None:
            creator_id = _int(body.get("createurId"))
        if creator_id is None and isinstance(body.get("createur"), dict):
            creator_id = _int(body["createur"].get("id"))
        creator = USERS.get(creator_id)
        if creator is None:
            return httpx.Response(400, json={"message": "Createur requis"})

        group_id = self._new_id()
        record = {
            "id": group_id,
            "nom": body.get("nom"),
            "description": body.get("description"),
            "type": body.get("type", "PRIVE"),
            "dateCreation": None if self.drop_group_dates else body.get("dateCreation"),
            "createur": creator,
            "membres": [creator],
            "nombreMembres": 1,
        }
        self.groups[group_id] = record
        return self._created(record)

    def _create_project(self, request: httpx.Request) -> httpx.Response:
        body = _json(request)
        if self.project_group_in == "body":
            group_id = _int(body.get("groupeId"))
        elif self.project_group_in == "query":
            group_id = _int(request.url.params.get("groupeId"))
        elif self.project_group_in == "nested":
            nested = body.get("groupe")
            group_id = _int(nested.get("id")) if isinstance(nested, dict) else None
        else:
            group_id = None
        if group_id is None:
            return httpx.Response(400, json={"message": "Le groupe est requis"})

        project_id = self._new_id()
        record = {
            "id": project_id,
            "nom": body.get("nom"),
            "description": body.get("description"),
            "theme": body.get("theme"),
            "statut": "EN_ATTENTE",
            "visibilite": body.get("visibilite", "PRIVE"),
            "dateEcheance": None if self.drop_deadlines else body.get("dateEcheance"),
            "dateCreation": "2024-03-01T10:00:00",
            "groupeId": group_id,
            "creatorId": body.get("creatorId") or _int(request.url.params.get("creatorId")),
            "nombreMembres": 1,
            "nombreTaches": 0,
            "tauxCompletion": 0,
        }
        self.projects[project_id] = record
        return self._created(record)

    def _create_task(self, request: httpx.Request) -> httpx.Response:
        body = _json(request)
        project_id = _int(body.get("projetId"))
        if project_id is None and isinstance(body.get("projet"), dict):
            project_id = _int(body["projet"].get("id"))
        if project_id not in self.projects:
            return httpx.Response(400, json={"message": "Projet introuvable"})

        task_id = self._new_id()
        record = {
            "id": task_id,
            "titre": body.get("titre"),
            "description": body.get("description"),
            "etat": body.get("etat", "A_FAIRE"),
            "priorite": body.get("priorite", "MOYENNE"),
            "dateEcheance": None if self.drop_deadlines else body.get("dateEcheance"),
            "projetId": project_id,
            "nombreSousTaches": 0,
            "sousTachesTerminees": 0,
        }
        self.tasks[task_id] = record
        return self._created(record)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def api_client(backend: FakeBackend) -> Iterator[ApiClient]:
    client = ApiClient(base_url=BASE_URL, transport=httpx.MockTransport(backend.handler))
    yield client
    client.close()


@pytest.fixture
def session() -> Session:
    return Session(token="secret-token", user_id=7)
