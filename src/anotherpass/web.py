"""Web page adapter for the another pass settings page."""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

import structlog

from .storage import (
    CredentialStore,
    CredentialStoreError,
    InvalidIndexError,
    InvalidRecordError,
    NoRecordsError,
    PersistenceError,
)

logger = structlog.get_logger(__name__)


@dataclass
class WebResponse:
    """What the host should render or where it should redirect."""

    rows: List[Dict[str, str]] = field(default_factory=list)
    redirect: Optional[str] = None
    error: Optional[str] = None


class WebPages:
    """Serves the index, add and delete pages for the logged-in user.

    Deletion addresses records by their listing id. Deleting by serialized
    line exposes the full salt and hash to the page, so it is only honored
    when ``allow_line_delete`` is set for a trusted front-end.
    """

    def __init__(
        self,
        store: CredentialStore,
        base_path: str = "/mods/global/anotherpass/",
        allow_line_delete: bool = False,
    ):
        self.store = store
        self.base_path = base_path
        self.allow_line_delete = allow_line_delete

    def render(
        self, user: str, page: str, params: Optional[Mapping[str, str]] = None
    ) -> Optional[WebResponse]:
        """Handle a page request.

        Returns:
            The response, or None if the page is not served here.
        """
        params = params or {}
        if page == "index":
            return self.index(user)
        if page == "add":
            return self.add(user, params)
        if page == "delete":
            return self.delete(user, params)
        return None

    def index(self, user: str) -> WebResponse:
        rows = [
            {"Id": str(v.index), "Remainder": v.remainder, "PassHash": v.hash_prefix}
            for v in self.store.list(user)
        ]
        return WebResponse(rows=rows)

    def add(self, user: str, params: Mapping[str, str]) -> WebResponse:
        response = WebResponse(redirect=self.base_path)
        try:
            if not self.store.add(user, params.get("pass", ""), params.get("remainder", "")):
                response.error = "Password is already added."
        except InvalidRecordError:
            response.error = "Invalid password or remainder."
        except PersistenceError as e:
            logger.warning("web_add_not_saved", user=user, error=str(e))
            response.error = "Password added but could not be saved."
        return response

    def delete(self, user: str, params: Mapping[str, str]) -> WebResponse:
        response = WebResponse(redirect=self.base_path)
        try:
            if "id" in params:
                self.store.delete_by_index(user, int(params["id"]))
            elif self.allow_line_delete and "line" in params:
                if not self.store.delete_by_value(user, params["line"]):
                    response.error = "No such password."
            else:
                response.error = "No password selected."
        except (ValueError, InvalidIndexError, NoRecordsError):
            response.error = "No such password."
        except CredentialStoreError as e:
            logger.warning("web_delete_failed", user=user, error=str(e))
            response.error = "Password could not be removed."
        return response
