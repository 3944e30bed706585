"""Ordered submission strategies for each create endpoint.

The backend's contract for where a reference belongs is inconsistent, so each
entity has a primary request shape followed by alternates. Every strategy is a
pure function from form data to a request descriptor.
"""

from dataclasses import dataclass
from typing import Any, Callable

from collab_client.client import Session
from collab_client.fetcher import RequestDescriptor
from collab_client.fetchers import GroupFetcher, ProjectFetcher, TaskFetcher
from collab_client.forms import GroupForm, ProjectForm, TaskForm


@dataclass(frozen=True)
class SubmissionStrategy:
    """A named way of turning a form into a create request."""

    name: str
    build: Callable[[Any, Session], RequestDescriptor]


def _group_body(form: GroupForm) -> dict[str, Any]:
    body: dict[str, Any] = {
        "nom": form.name.strip(),
        "description": form.description.strip(),
        "type": form.type,
    }
    if form.created_at:
        body["dateCreation"] = form.created_at
    return body


def group_creator_in_query(form: GroupForm, session: Session) -> RequestDescriptor:
    return RequestDescriptor(
        "POST", GroupFetcher.collection_path, json=_group_body(form), params={"createurId": session.user_id}
    )


def group_creator_in_body(form: GroupForm, session: Session) -> RequestDescriptor:
    body = _group_body(form)
    body["createurId"] = session.user_id
    return RequestDescriptor("POST", GroupFetcher.collection_path, json=body)


def group_creator_nested(form: GroupForm, session: Session) -> RequestDescriptor:
    body = _group_body(form)
    body["createur"] = {"id": session.user_id}
    return RequestDescriptor("POST", GroupFetcher.collection_path, json=body)


def project_group_in_body(form: ProjectForm, session: Session) -> RequestDescriptor:
    body = form.body(session)
    body["groupeId"] = form.group_ref
    return RequestDescriptor("POST", ProjectFetcher.create_path, json=body)


def project_group_in_query(form: ProjectForm, session: Session) -> RequestDescriptor:
    return RequestDescriptor(
        "POST", ProjectFetcher.create_path, json=form.body(session), params={"groupeId": form.group_ref}
    )


def project_group_nested(form: ProjectForm, session: Session) -> RequestDescriptor:
    body = form.body(session)
    body["groupe"] = {"id": form.group_ref}
    return RequestDescriptor("POST", ProjectFetcher.create_path, json=body)


def project_refs_in_query(form: ProjectForm, session: Session) -> RequestDescriptor:
    body = form.body(session)
    creator_id = body.pop("creatorId")
    return RequestDescriptor(
        "POST",
        ProjectFetcher.create_path,
        json=body,
        params={"groupeId": form.group_ref, "creatorId": creator_id},
    )


def task_project_in_body(form: TaskForm, session: Session) -> RequestDescriptor:
    body = form.body(session)
    body["projetId"] = form.project_ref
    return RequestDescriptor("POST", TaskFetcher.collection_path, json=body)


def task_project_nested(form: TaskForm, session: Session) -> RequestDescriptor:
    body = form.body(session)
    body["projet"] = {"id": form.project_ref}
    return RequestDescriptor("POST", TaskFetcher.collection_path, json=body)


GROUP_STRATEGIES = [
    SubmissionStrategy("creator-in-query", group_creator_in_query),
    SubmissionStrategy("creator-in-body", group_creator_in_body),
    SubmissionStrategy("creator-nested", group_creator_nested),
]

PROJECT_STRATEGIES = [
    SubmissionStrategy("group-in-body", project_group_in_body),
    SubmissionStrategy("group-in-query", project_group_in_query),
    SubmissionStrategy("group-nested", project_group_nested),
    SubmissionStrategy("refs-in-query", project_refs_in_query),
]

TASK_STRATEGIES = [
    SubmissionStrategy("project-in-body", task_project_in_body),
    SubmissionStrategy("project-nested", task_project_nested),
]
