"""Security utilities for preventing information disclosure."""

import re


def sanitize_error_message(error: Exception) -> str:
    """Create a client-safe error message without exposing internal details.

    File paths, memory addresses, and line numbers are never echoed back;
    the exception is mapped onto a fixed message by category.

    Args:
        error: The exception that occurred

    Returns:
        A sanitized error message
    """
    error_type = type(error).__name__
    error_str = str(error)

    error_str = re.sub(r"/[^\s]+", "[path]", error_str)
    error_str = re.sub(r"0x[0-9a-fA-F]+", "[address]", error_str)
    error_str = re.sub(r"line \d+", "[line]", error_str)

    if "Connect" in error_type or "connection" in error_str.lower():
        return "Unable to reach the hub. Please try again in a moment."
    elif "Timeout" in error_type or "timeout" in error_str.lower():
        return "The hub took too long to respond. Please try again."
    elif "Permission" in error_type or "permission" in error_str.lower():
        return "Permission denied. Please check the hub API token."
    elif "Validation" in error_type or "validation" in error_str.lower():
        return "Invalid request format. Please check your input and try again."
    elif "Config" in error_type or "config" in error_str.lower():
        return "Service configuration error. Please check the server settings."
    else:
        return "An error occurred while processing the request."
