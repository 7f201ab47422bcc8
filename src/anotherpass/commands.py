"""Chat-style command surface for managing a user's own passwords."""

import io
from typing import Callable, Dict, List, NamedTuple

import structlog
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .audit import EventType, audit_event
from .storage import (
    CredentialStore,
    InvalidIndexError,
    InvalidRecordError,
    NoRecordsError,
    PersistenceError,
)

logger = structlog.get_logger(__name__)

NO_PASSWORDS = "No passwords set for your user"
SAVE_WARNING = " (warning: could not be saved)"


class Command(NamedTuple):
    name: str
    args: str
    description: str


COMMANDS = (
    Command("Help", "[command]", "Generates this output"),
    Command("Add", "<pass> [remainder]", "Add a password, optionally labelled"),
    Command("Del", "<id>", "Remove the password with the given id"),
    Command("Clear", "", "Remove all previous set passwords"),
    Command("List", "", "List your passwords (password hash with remainder)"),
)


def render_table(table: Table, width: int = 100) -> List[str]:
    """Render a rich table into plain text lines."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=width, color_system=None, force_terminal=False)
    console.print(table)
    return buffer.getvalue().rstrip("\n").splitlines()


def _parse_id(text: str) -> int:
    try:
        value = int(text.strip())
    except ValueError:
        return 0
    return max(value, 0)


class CommandHandler:
    """Dispatches one command line on behalf of the calling user."""

    def __init__(self, store: CredentialStore):
        self.store = store
        self._handlers: Dict[str, Callable[[str, List[str]], List[str]]] = {
            "help": self.handle_help,
            "add": self.handle_add,
            "del": self.handle_del,
            "clear": self.handle_clear,
            "list": self.handle_list,
        }

    def handle(self, user: str, line: str) -> List[str]:
        """Run a command line and return the reply lines."""
        tokens = line.split()
        if not tokens:
            return self.handle_help(user, [])

        handler = self._handlers.get(tokens[0].lower())
        if handler is None:
            logger.debug("unknown_command", user=user, command=tokens[0])
            return [f"Unknown command [{tokens[0]}]", "Try: Help"]
        return handler(user, tokens[1:])

    def handle_help(self, user: str, args: List[str]) -> List[str]:
        wanted = args[0].lower() if args else None
        table = Table()
        table.add_column("Command")
        table.add_column("Description")
        for cmd in COMMANDS:
            if wanted and cmd.name.lower() != wanted:
                continue
            table.add_row(Text(f"{cmd.name} {cmd.args}".strip()), Text(cmd.description))
        if not table.row_count:
            return [f"No matches for '{args[0]}'"]
        return render_table(table)

    def handle_add(self, user: str, args: List[str]) -> List[str]:
        password = args[0] if args else ""
        remainder = args[1] if len(args) > 1 else ""
        if not password:
            return ["You did not supply a password."]

        try:
            added = self.store.add(user, password, remainder)
        except InvalidRecordError as e:
            return [f"Invalid remainder: {e}"]
        except PersistenceError:
            return ["Password added." + SAVE_WARNING]

        return ["Password added." if added else "Password is already added."]

    def handle_del(self, user: str, args: List[str]) -> List[str]:
        index = _parse_id(" ".join(args))
        try:
            self.store.delete_by_index(user, index)
        except NoRecordsError:
            return [NO_PASSWORDS]
        except InvalidIndexError:
            return ['Invalid #, check "list"']
        except PersistenceError:
            return ["Removed" + SAVE_WARNING]
        return ["Removed"]

    def handle_clear(self, user: str, args: List[str]) -> List[str]:
        try:
            cleared = self.store.clear(user)
        except PersistenceError:
            return ["Cleared" + SAVE_WARNING]
        return ["Cleared" if cleared else NO_PASSWORDS]

    def handle_list(self, user: str, args: List[str]) -> List[str]:
        rows = self.store.list(user)
        if not rows:
            return [NO_PASSWORDS]

        table = Table()
        table.add_column("Id")
        table.add_column("Remainder")
        table.add_column("PassHash")
        for row in rows:
            table.add_row(str(row.index), Text(row.remainder), Text(row.hash_prefix))

        audit_event(
            event_type=EventType.PASS_LIST, user=user, success=True,
            details={"count": len(rows)},
        )
        return render_table(table)
