"""TheBrainEngine — persistence engine using TheBrain Cloud API.

Self-contained: uses raw httpx. Each credential record is the note of a
member thought named ``"{user_id}/oauth2"`` under the vault home thought.

Member discovery uses labeled child links (``name == "hasMember"``) on
the vault home thought — no JSON note index.

Correct API endpoints (TheBrain Cloud API):
- Base URL: https://api.bra.in
- Read note: GET /notes/{brain_id}/{thought_id} -> JSON with ``markdown`` field
- Write note: POST /notes/{brain_id}/{thought_id}/update -> JSON body ``{"markdown": "..."}``
- Create thought: POST /thoughts/{brain_id} -> tolerate HTTP 500 with valid ``{"id": "..."}`` body
- Delete thought: DELETE /thoughts/{brain_id}/{thought_id}
- Get graph: GET /thoughts/{brain_id}/{thought_id}/graph -> JSON with ``children``, ``links`` arrays
- Update link: PATCH /links/{brain_id}/{link_id} -> JSON Patch body
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tokenvault.cipher import TokenCipher
from tokenvault.persistence import BackingStoreError, RecordNotFoundError
from tokenvault.record import PersistedCredential

logger = logging.getLogger(__name__)

_BASE_URL = "https://api.bra.in"
_MEMBER_LINK_NAME = "hasMember"
_MEMBER_SUFFIX = "/oauth2"


def member_name(user_id: str) -> str:
    """Thought name holding the credential note for ``user_id``."""
    return f"{user_id}{_MEMBER_SUFFIX}"


def _backing_error(action: str, target: str, exc: Exception) -> BackingStoreError:
    logger.warning("TheBrain %s failed for %s: %s", action, target, exc)
    return BackingStoreError(f"TheBrain {action} failed for {target}.")


class TheBrainHandle:
    """One session against TheBrain. Implements ``PersistenceHandle``.

    Owns a private ``httpx.Client`` that ``close()`` releases. The member
    index is cached for the lifetime of the handle only and invalidated
    whenever this handle adds or removes a member.
    """

    def __init__(
        self,
        client: httpx.Client,
        brain_id: str,
        home_thought_id: str,
        cipher: TokenCipher | None = None,
    ) -> None:
        self._client = client
        self._brain_id = brain_id
        self._home_thought_id = home_thought_id
        self._cipher = cipher
        self._index_cache: dict[str, str] | None = None
        self._closed = False

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._closed:
            return
        self._closed = True
        self._client.close()

    # -- TheBrain API helpers ------------------------------------------------

    def _get_note(self, thought_id: str) -> str | None:
        """Fetch a thought's note as markdown. Returns None when there is none."""
        try:
            resp = self._client.get(f"/notes/{self._brain_id}/{thought_id}")
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise _backing_error("note read", thought_id, exc) from exc
        return data.get("markdown") or None

    def _set_note(self, thought_id: str, markdown: str) -> None:
        """Create or update a thought's note."""
        try:
            resp = self._client.post(
                f"/notes/{self._brain_id}/{thought_id}/update",
                json={"markdown": markdown},
            )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise _backing_error("note write", thought_id, exc) from exc

    def _create_thought(self, name: str, parent_id: str) -> dict[str, Any]:
        """Create a child thought. Returns ``{"id": "..."}``.

        TheBrain API may return HTTP 500 on successful creates, so we
        check for an ``id`` field in the response body before raising.
        """
        try:
            resp = self._client.post(
                f"/thoughts/{self._brain_id}",
                json={
                    "name": name,
                    "kind": 1,
                    "acType": 1,  # Private
                    "sourceThoughtId": parent_id,
                    "relation": 1,  # Child
                },
            )
            try:
                data = resp.json()
            except ValueError:
                data = {}
            if isinstance(data, dict) and "id" in data:
                return data
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise _backing_error("thought create", name, exc) from exc
        raise BackingStoreError(f"TheBrain thought create returned no id for {name}.")

    def _delete_thought(self, thought_id: str) -> None:
        try:
            resp = self._client.delete(f"/thoughts/{self._brain_id}/{thought_id}")
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise _backing_error("thought delete", thought_id, exc) from exc

    def _get_graph(self, thought_id: str) -> dict[str, Any]:
        """GET /thoughts/{brainId}/{thoughtId}/graph -> full graph dict."""
        try:
            resp = self._client.get(f"/thoughts/{self._brain_id}/{thought_id}/graph")
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise _backing_error("graph read", thought_id, exc) from exc

    def _update_link(self, link_id: str, updates: dict[str, Any]) -> None:
        """PATCH /links/{brainId}/{linkId} with JSON Patch format."""
        patch = [
            {"op": "replace", "path": f"/{field}", "value": value}
            for field, value in updates.items()
        ]
        try:
            resp = self._client.patch(
                f"/links/{self._brain_id}/{link_id}",
                json=patch,
                headers={"Content-Type": "application/json-patch+json"},
            )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise _backing_error("link update", link_id, exc) from exc

    # -- Link-based member discovery -----------------------------------------

    def _child_links(self, graph: dict[str, Any]) -> list[tuple[str, dict[str, Any]]]:
        """Return ``(child_id, link)`` for each child link of the home thought."""
        home = self._home_thought_id
        result: list[tuple[str, dict[str, Any]]] = []
        for link in graph.get("links", []):
            if link.get("relation") != 1:
                continue
            a = link.get("thoughtIdA", "")
            b = link.get("thoughtIdB", "")
            if a == home:
                result.append((b, link))
            elif b == home:
                result.append((a, link))
        return result

    def _discover_members(self) -> dict[str, str]:
        """Map member name to thought id via hasMember-labeled child links."""
        if self._index_cache is not None:
            return self._index_cache

        graph = self._get_graph(self._home_thought_id)
        child_map = {c["id"]: c.get("name", "") for c in graph.get("children", [])}

        members: dict[str, str] = {}
        for child_id, link in self._child_links(graph):
            if link.get("name") != _MEMBER_LINK_NAME:
                continue
            child_name = child_map.get(child_id)
            if child_name is not None:
                members[child_name] = child_id

        self._index_cache = members
        return members

    def _register_member(self, thought_id: str) -> None:
        """Label the child link from home -> thought_id as 'hasMember'."""
        graph = self._get_graph(self._home_thought_id)
        for child_id, link in self._child_links(graph):
            if child_id == thought_id:
                self._update_link(link["id"], {"name": _MEMBER_LINK_NAME})
                self._index_cache = None
                return
        raise BackingStoreError(
            f"No child link from {self._home_thought_id} to {thought_id}; "
            "cannot register member."
        )

    def _member_thought(self, user_id: str) -> str:
        thought_id = self._discover_members().get(member_name(user_id))
        if not thought_id:
            raise RecordNotFoundError(user_id)
        return thought_id

    # -- note encoding -------------------------------------------------------

    def _encode(self, record: PersistedCredential) -> str:
        raw = record.to_json()
        return self._cipher.encrypt(raw) if self._cipher else raw

    def _decode(self, note: str) -> PersistedCredential:
        raw = self._cipher.decrypt(note) if self._cipher else note
        return PersistedCredential.from_json(raw)

    # -- PersistenceHandle protocol ------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise BackingStoreError("Persistence handle is closed.")

    def get_record(self, user_id: str) -> PersistedCredential:
        self._check_open()
        note = self._get_note(self._member_thought(user_id))
        if not note:
            raise RecordNotFoundError(user_id)
        record = self._decode(note)
        if record.user_id != user_id:
            raise BackingStoreError(
                f"Credential note for {user_id!r} belongs to {record.user_id!r}."
            )
        return record

    def insert(self, record: PersistedCredential) -> None:
        """Create the member thought, write its note, then label its link.

        A registered member whose note is empty or gone reads as absent in
        ``get_record``, so its thought is reused rather than duplicated.
        """
        self._check_open()
        name = member_name(record.user_id)
        existing_id = self._discover_members().get(name)
        if existing_id:
            if self._get_note(existing_id):
                raise BackingStoreError(
                    f"Duplicate key: a credential for {record.user_id!r} already exists."
                )
            self._set_note(existing_id, self._encode(record))
            return
        thought_id = self._create_thought(name, self._home_thought_id)["id"]
        self._set_note(thought_id, self._encode(record))
        self._register_member(thought_id)

    def update(self, record: PersistedCredential) -> None:
        self._check_open()
        self._set_note(self._member_thought(record.user_id), self._encode(record))

    def delete(self, record: PersistedCredential) -> None:
        self._check_open()
        self._delete_thought(self._member_thought(record.user_id))
        self._index_cache = None


class TheBrainEngine:
    """Opens TheBrain sessions on demand. Implements ``HandleFactory``.

    ``transport`` is passed through to ``httpx.Client`` (e.g. a
    ``MockTransport`` in tests).
    """

    def __init__(
        self,
        api_key: str,
        brain_id: str,
        home_thought_id: str,
        *,
        cipher: TokenCipher | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._brain_id = brain_id
        self._home_thought_id = home_thought_id
        self._cipher = cipher
        self._timeout = timeout
        self._transport = transport

    @property
    def encrypted(self) -> bool:
        return self._cipher is not None

    def open_handle(self) -> TheBrainHandle:
        client = httpx.Client(
            base_url=_BASE_URL,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=self._timeout,
            transport=self._transport,
        )
        return TheBrainHandle(
            client, self._brain_id, self._home_thought_id, cipher=self._cipher,
        )
