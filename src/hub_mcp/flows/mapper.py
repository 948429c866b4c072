"""Token mapper: named tool arguments -> the marker trigger's positional tokens.

The marker trigger exposes ``command`` plus five string slots
``value1..value5``. The hub expects every slot to be present, so unused
slots are sent as empty strings.
"""

import json
from collections.abc import Mapping
from typing import Any

from hub_mcp.flows.cache import KnownCommands, ParameterOrderCache
from hub_mcp.flows.store import RuleStore
from hub_mcp.flows.types import TOKEN_SLOT_COUNT, ExecutionResult, TokenSet
from hub_mcp.telemetry import (
    FLOW_TRIGGER_FAILED,
    FLOW_TRIGGER_STARTED,
    FLOW_TRIGGERED,
    TOKEN_ORDER_FALLBACK,
    TOKEN_SLOTS_OVERFLOW,
    get_logger,
)

log = get_logger(__name__)


def coerce_token(value: Any) -> str:
    """Convert an argument value to its token string.

    Booleans use JSON spelling, integral floats drop the trailing ``.0``,
    lists and dicts become compact JSON, everything else uses ``str``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


class TokenMapper:
    """Builds token sets and fires the marker trigger."""

    def __init__(
        self,
        store: RuleStore,
        order_cache: ParameterOrderCache,
        known_commands: KnownCommands,
    ) -> None:
        self.store = store
        self.order_cache = order_cache
        self.known_commands = known_commands

    def build_tokens(self, command: str, parameters: Mapping[str, Any] | None = None) -> TokenSet:
        """Map named parameters into the five positional slots.

        With a cached order for the command, each present, non-None parameter
        goes to its position in that order. Without one, values are placed in
        the mapping's own iteration order, which is only as stable as the
        order in which the caller built the mapping. Positions past the fifth
        slot are dropped.

        Args:
            command: Command name.
            parameters: Named arguments from the tool call.

        Returns:
            A TokenSet with all five slots filled (empty string if unused).
        """
        slots = [""] * TOKEN_SLOT_COUNT
        parameters = parameters or {}
        if not parameters:
            return TokenSet.from_slots(command, slots)

        order = self.order_cache.get(command)
        if order:
            for index, name in enumerate(order):
                if index >= TOKEN_SLOT_COUNT:
                    log.warning(TOKEN_SLOTS_OVERFLOW, command=command, dropped=order[index:])
                    break
                value = parameters.get(name)
                if value is not None:
                    slots[index] = coerce_token(value)
        else:
            log.warning(TOKEN_ORDER_FALLBACK, command=command, keys=list(parameters))
            values = list(parameters.values())
            for index, value in enumerate(values[:TOKEN_SLOT_COUNT]):
                slots[index] = "" if value is None else coerce_token(value)
            if len(values) > TOKEN_SLOT_COUNT:
                log.warning(
                    TOKEN_SLOTS_OVERFLOW,
                    command=command,
                    dropped=list(parameters)[TOKEN_SLOT_COUNT:],
                )

        return TokenSet.from_slots(command, slots)

    async def map_and_invoke(
        self, command: str, parameters: Mapping[str, Any] | None = None
    ) -> ExecutionResult:
        """Fire the marker trigger for a command.

        The command is recorded as known before anything else, so commands
        called before discovery still show up in the known-command catalog.
        Trigger failures are returned, not raised.

        Args:
            command: Command name the listening rules match on.
            parameters: Named arguments to map into token slots.

        Returns:
            ExecutionResult with ``success`` and either ``message`` or ``error``.
        """
        self.known_commands.register(command)

        tokens = self.build_tokens(command, parameters)
        state = {"command": command}
        log.info(FLOW_TRIGGER_STARTED, command=command, tokens=tokens.as_tokens())

        try:
            await self.store.fire_trigger(tokens, state)
        except Exception as e:
            log.error(FLOW_TRIGGER_FAILED, command=command, error=str(e), exc_info=True)
            return ExecutionResult(success=False, error=str(e) or type(e).__name__, tokens=tokens)

        log.info(FLOW_TRIGGERED, command=command)
        return ExecutionResult(
            success=True,
            message=f"Command '{command}' triggered successfully",
            tokens=tokens,
        )
