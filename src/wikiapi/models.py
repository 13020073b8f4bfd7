from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .errors import ResponseDecodeError

CONTENT_KEY = "*"


def _require_mapping(value: Any, *, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ResponseDecodeError(
            f"Expected a mapping for {what}, got {type(value).__name__}"
        )
    return value


@dataclass(slots=True)
class Revision:
    content: str | None
    content_model: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Revision:
        payload = _require_mapping(payload, what="revision")
        content = payload.get(CONTENT_KEY, payload.get("content"))
        return cls(
            content=content if isinstance(content, str) else None,
            content_model=payload.get("contentmodel"),
        )


@dataclass(slots=True)
class PageRecord:
    page_id: str
    title: str
    missing: bool = False
    redirect: bool = False
    namespace: int | None = None
    revisions: list[Revision] = field(default_factory=list)

    @classmethod
    def from_payload(cls, page_id: str, payload: Mapping[str, Any]) -> PageRecord:
        payload = _require_mapping(payload, what=f"page {page_id}")
        title = payload.get("title")
        if not isinstance(title, str):
            raise ResponseDecodeError(f"Page {page_id} has no title")
        return cls(
            page_id=str(page_id),
            title=title,
            # formatversion=1 marks flags with an empty string value
            missing="missing" in payload and payload["missing"] is not False,
            redirect="redirect" in payload and payload["redirect"] is not False,
            namespace=payload.get("ns"),
            revisions=[
                Revision.from_payload(revision)
                for revision in payload.get("revisions") or []
            ],
        )

    @property
    def content(self) -> str | None:
        if not self.revisions:
            return None
        return self.revisions[0].content


@dataclass(slots=True)
class UserRecord:
    name: str
    user_id: int | None
    missing: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> UserRecord:
        payload = _require_mapping(payload, what="user")
        user_id = payload.get("userid")
        return cls(
            name=str(payload.get("name", "")),
            user_id=int(user_id) if user_id is not None else None,
            missing="missing" in payload or "invalid" in payload,
        )


def decode_pages(data: Any) -> list[PageRecord]:
    """Decode the ``pages`` section of a query response.

    Pages come back keyed by page id, and missing pages are listed before
    existing ones, so the result order never matches the requested titles.
    """
    if not isinstance(data, Mapping):
        return []
    pages = data.get("pages")
    if not isinstance(pages, Mapping):
        return []
    return [PageRecord.from_payload(page_id, page) for page_id, page in pages.items()]


def decode_users(data: Any) -> list[UserRecord]:
    if not isinstance(data, Mapping):
        return []
    users = data.get("users") or []
    return [UserRecord.from_payload(user) for user in users]
