"""Login pipeline hook accepting users by secondary password."""

from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Protocol, runtime_checkable

import structlog

from ..audit import EventType, audit_event
from ..commands import CommandHandler
from ..storage import CredentialStore, CredentialStoreError
from ..web import WebPages, WebResponse

logger = structlog.get_logger(__name__)


class LoginVerdict(str, Enum):
    """Outcome returned to the host login pipeline."""

    # Let the next checker decide
    CONTINUE = "continue"
    # Login accepted, stop checking
    HALT = "halt"


@runtime_checkable
class LoginAttempt(Protocol):
    """An in-flight login attempt owned by the host."""

    def get_username(self) -> str:
        ...

    def get_password(self) -> str:
        ...

    def accept_login(self, user: Any) -> None:
        """Accept the attempt as the given host user."""
        ...


@runtime_checkable
class UserDirectory(Protocol):
    """Lookup of currently existing users."""

    def find_user(self, name: str) -> Optional[Any]:
        """Return the host user object, or None if no such user exists."""
        ...


class StaticUserDirectory:
    """User directory backed by a fixed set of names."""

    def __init__(self, names: Iterable[str]):
        self._names = set(names)

    def find_user(self, name: str) -> Optional[str]:
        return name if name in self._names else None

    def add(self, name: str) -> None:
        self._names.add(name)

    def remove(self, name: str) -> None:
        self._names.discard(name)


class AnotherPassModule:
    """Host module wiring the credential store into the login pipeline.

    The module only ever accepts a login or passes it on; it never rejects
    one, leaving that to the other checkers.
    """

    web_menu_title = "another pass"
    description = "Allow users to authenticate via another password"

    def __init__(
        self,
        store: CredentialStore,
        users: UserDirectory,
        web_path: str = "/mods/global/anotherpass/",
    ):
        self.store = store
        self.users = users
        self.commands = CommandHandler(store)
        self.web = WebPages(store, web_path)

    def _is_known(self, name: str) -> bool:
        return self.users.find_user(name) is not None

    def on_boot(self) -> bool:
        """Load saved passwords, dropping those of users that no longer exist.

        Returns:
            True if loading succeeded.
        """
        try:
            self.store.load(self._is_known)
        except CredentialStoreError as e:
            logger.error("another_pass_load_failed", error=str(e))
            return False
        return True

    def on_post_rehash(self) -> bool:
        return self.on_boot()

    def on_login_attempt(self, attempt: LoginAttempt) -> LoginVerdict:
        """Accept the attempt if its password matches a saved one."""
        username = attempt.get_username()
        user = self.users.find_user(username)
        if user is None:
            return LoginVerdict.CONTINUE

        password = attempt.get_password()
        if not password:
            logger.debug("no_password_given", user=username)
            return LoginVerdict.CONTINUE

        if username not in self.store:
            logger.debug("no_saved_passwords", user=username)
            return LoginVerdict.CONTINUE

        try:
            passed = self.store.check_login(username, password)
        except Exception as e:
            logger.exception("another_pass_check_failed", user=username)
            audit_event(
                event_type=EventType.LOGIN_CONTINUE, user=username, success=False, error=e
            )
            return LoginVerdict.CONTINUE

        if not passed:
            logger.debug("another_pass_failed", user=username)
            audit_event(event_type=EventType.LOGIN_CONTINUE, user=username, success=False)
            return LoginVerdict.CONTINUE

        try:
            attempt.accept_login(user)
        except Exception as e:
            logger.exception("another_pass_accept_failed", user=username)
            audit_event(
                event_type=EventType.LOGIN_CONTINUE, user=username, success=False, error=e
            )
            return LoginVerdict.CONTINUE

        logger.info("another_pass_accepted", user=username)
        audit_event(event_type=EventType.LOGIN_ACCEPT, user=username, success=True)
        return LoginVerdict.HALT

    def on_module_command(self, username: str, line: str) -> List[str]:
        """Run a command for the calling user and return the reply lines."""
        return self.commands.handle(username, line)

    def on_web_request(
        self, username: str, page: str, params: Optional[Mapping[str, str]] = None
    ) -> Optional[WebResponse]:
        return self.web.render(username, page, params)
