"""Parameter DSL parser.

Rule authors describe the parameters of an AI-callable flow in free text,
one parameter per line::

    streamUrl: string - Radio stream URL
    volume: number(0-100)? - Volume level
    mode: string(on|off) - Device mode

Grammar: ``<name>: <type>[(<validation>)][?] - <description>``. The type
keyword is case-insensitive. Lines that do not match are prose and are
skipped. Source order is the positional order used for token mapping.
"""

import re

from hub_mcp.flows.types import ParsedParameters, PropertySchema
from hub_mcp.telemetry import PARAMETER_LINE_PARSED, get_logger

log = get_logger(__name__)

PARAMETER_LINE = re.compile(
    r"^\s*(?P<name>\w+):\s*(?P<type>string|number|boolean)"
    r"(?:\((?P<validation>[^)]+)\))?(?P<optional>\?)?\s*-\s*(?P<description>.+)$",
    re.IGNORECASE,
)
NUMBER_RANGE = re.compile(r"^([\d.]+)-([\d.]+)$")


def _parse_range(validation: str) -> tuple[float, float] | None:
    """Parse ``<float>-<float>``; None when either bound is not a number."""
    match = NUMBER_RANGE.match(validation)
    if not match:
        return None
    try:
        return float(match.group(1)), float(match.group(2))
    except ValueError:
        # "1.2.3-4" matches the character class but is not a float
        return None


def _build_property(param_type: str, validation: str | None, description: str) -> PropertySchema:
    """Build the schema for one parameter line."""
    prop = PropertySchema(type=param_type, description=description)  # type: ignore[arg-type]

    if not validation:
        return prop

    if param_type == "number":
        bounds = _parse_range(validation)
        if bounds is not None:
            prop.minimum, prop.maximum = bounds
    elif param_type == "string":
        prop.enum = [value.strip() for value in validation.split("|")]

    return prop


def parse_parameters(text: str | None) -> ParsedParameters:
    """Parse a parameter DSL block into a typed schema.

    Args:
        text: Free-text parameter description, possibly mixed with prose.

    Returns:
        ParsedParameters with the properties map, required names, and the
        positional order. A name declared twice keeps its last schema in
        ``properties`` but appears twice in ``order``.
    """
    result = ParsedParameters()
    if not text:
        return result

    for line in text.splitlines():
        match = PARAMETER_LINE.match(line)
        if not match:
            continue

        name = match.group("name")
        param_type = match.group("type").lower()
        validation = match.group("validation")
        optional = match.group("optional") is not None
        description = match.group("description").strip()

        result.order.append(name)
        result.properties[name] = _build_property(param_type, validation, description)
        if not optional:
            result.required.append(name)

        log.debug(
            PARAMETER_LINE_PARSED,
            parameter=name,
            type=param_type,
            validation=validation,
            required=not optional,
        )

    return result
