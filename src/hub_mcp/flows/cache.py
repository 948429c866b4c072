"""Process-lifetime state shared between flow compilation and invocation.

Both objects are plain instances owned by a ``FlowManager``; there are no
module-level singletons. Concurrent writers only ever overwrite derived data,
so last-writer-wins is acceptable and no locking is done.
"""

from hub_mcp.telemetry import FLOW_COMMAND_REGISTERED, PARAMETER_ORDER_CACHED, get_logger

log = get_logger(__name__)


class ParameterOrderCache:
    """Positional parameter order per command.

    Entries are overwritten (never merged) on each compile of a command.
    Entries for commands whose rule was removed are left in place.
    """

    def __init__(self) -> None:
        self._orders: dict[str, list[str]] = {}

    def set(self, command: str, order: list[str]) -> None:
        """Record the parameter order for a command, replacing any previous one."""
        self._orders[command] = list(order)
        log.debug(PARAMETER_ORDER_CACHED, command=command, order=order)

    def get(self, command: str) -> list[str] | None:
        """Cached order for a command, or None if it has never been compiled."""
        order = self._orders.get(command)
        return list(order) if order is not None else None

    def __contains__(self, command: object) -> bool:
        return command in self._orders

    def __len__(self) -> int:
        return len(self._orders)

    def clear(self) -> None:
        """Forget every cached order."""
        self._orders.clear()


class KnownCommands:
    """Commands seen through discovery or invocation, in first-seen order."""

    def __init__(self) -> None:
        self._commands: dict[str, None] = {}

    def register(self, command: str) -> bool:
        """Add a command.

        Returns:
            True if the command was not known before.
        """
        if command in self._commands:
            return False
        self._commands[command] = None
        log.debug(FLOW_COMMAND_REGISTERED, command=command)
        return True

    def names(self) -> list[str]:
        """All known commands."""
        return list(self._commands)

    def __contains__(self, command: object) -> bool:
        return command in self._commands

    def __len__(self) -> int:
        return len(self._commands)
