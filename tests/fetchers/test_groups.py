"""Tests for the group fetcher."""

from unittest.mock import MagicMock, Mock

import pytest

from collab_client.client import ApiClient, Session
from collab_client.errors import UnexpectedEmptyResponse
from collab_client.fetcher import RequestDescriptor
from collab_client.fetchers.groups import GroupFetcher

GROUP_PAYLOAD = {
    "id": 3,
    "nom": "Team Alpha",
    "description": "Core team",
    "type": "PUBLIC",
    "dateCreation": "2024-01-05T09:00:00",
    "createur": {"id": 7, "nom": "Martin", "prenom": "Alice", "email": "alice@example.com"},
    "membres": [{"id": 7, "nom": "Martin", "prenom": "Alice", "email": "alice@example.com"}],
    "nombreMembres": 1,
}


@pytest.fixture
def mock_client() -> Mock:
    """Create a mock API client."""
    return MagicMock(spec=ApiClient)


@pytest.fixture
def fetcher(mock_client: Mock) -> GroupFetcher:
    return GroupFetcher(mock_client)


@pytest.fixture
def session() -> Session:
    return Session(token="t", user_id=7)


def test_from_payload(fetcher: GroupFetcher) -> None:
    """Test converting a GroupeDTO."""
    group = fetcher.from_payload(GROUP_PAYLOAD)
    assert group.id == 3
    assert group.name == "Team Alpha"
    assert group.type == "PUBLIC"
    assert group.created_at == "2024-01-05T09:00:00"
    assert group.creator.id == 7
    assert [member.id for member in group.members] == [7]
    assert group.member_count == 1


def test_from_payload_malformed_members(fetcher: GroupFetcher) -> None:
    """Test that a non-list member field yields None rather than failing."""
    group = fetcher.from_payload({"id": 4, "nom": "Broken", "membres": "oops"})
    assert group.members is None
    assert group.member_count == 0
    assert group.created_at is None


def test_get_all(fetcher: GroupFetcher, mock_client: Mock, session: Session) -> None:
    """Test fetching the collection."""
    mock_client.request.return_value = [GROUP_PAYLOAD]

    groups = fetcher.get_all(session)

    mock_client.request.assert_called_once_with("GET", "/groupes", session)
    assert [group.name for group in groups] == ["Team Alpha"]


def test_get_all_null_body(fetcher: GroupFetcher, mock_client: Mock, session: Session) -> None:
    """Test a null collection body is treated as empty."""
    mock_client.request.return_value = None
    assert fetcher.get_all(session) == []


def test_get_by_id(fetcher: GroupFetcher, mock_client: Mock, session: Session) -> None:
    """Test fetching one group."""
    mock_client.send.return_value = (200, GROUP_PAYLOAD)

    group = fetcher.get_by_id(3, session)

    mock_client.send.assert_called_once_with("GET", "/groupes/3", session)
    assert group.id == 3


def test_create(fetcher: GroupFetcher, mock_client: Mock, session: Session) -> None:
    """Test issuing a create request shape."""
    mock_client.send.return_value = (201, GROUP_PAYLOAD)
    request = RequestDescriptor("POST", "/groupes", json={"nom": "Team Alpha"}, params={"createurId": 7})

    group = fetcher.create(request, session)

    mock_client.send.assert_called_once_with(
        "POST", "/groupes", session, json={"nom": "Team Alpha"}, params={"createurId": 7}
    )
    assert group.id == 3


def test_create_empty_response(fetcher: GroupFetcher, mock_client: Mock, session: Session) -> None:
    """Test a 2xx create without a payload raises UnexpectedEmptyResponse."""
    mock_client.send.return_value = (204, None)

    with pytest.raises(UnexpectedEmptyResponse) as exc_info:
        fetcher.create(RequestDescriptor("POST", "/groupes", json={}), session)

    assert exc_info.value.status == 204


def test_get_by_id_empty_response_keeps_status(fetcher: GroupFetcher, mock_client: Mock, session: Session) -> None:
    """Test the real status is reported when a lookup returns no entity."""
    mock_client.send.return_value = (200, {})

    with pytest.raises(UnexpectedEmptyResponse) as exc_info:
        fetcher.get_by_id(3, session)

    assert exc_info.value.status == 200


def test_update_maps_field_names(fetcher: GroupFetcher, mock_client: Mock, session: Session) -> None:
    """Test that updates are sent with wire field names."""
    mock_client.request.return_value = GROUP_PAYLOAD

    fetcher.update(3, {"created_at": "2024-01-05", "unknown": 1}, session)

    mock_client.request.assert_called_once_with("PATCH", "/groupes/3", session, json={"dateCreation": "2024-01-05"})


def test_add_member(fetcher: GroupFetcher, mock_client: Mock, session: Session) -> None:
    """Test adding a member."""
    mock_client.request.return_value = None

    fetcher.add_member(3, 7, session)

    mock_client.request.assert_called_once_with("POST", "/groupes/3/membres", session, json={"utilisateurId": 7})
