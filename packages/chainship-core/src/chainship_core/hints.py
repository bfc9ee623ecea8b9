"""Actionable hints for chain error messages.

ERROR_HINTS is checked top to bottom and the first match wins, so more
specific patterns must come before more general ones.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

# Common error patterns and helpful hints
ERROR_HINTS: list[tuple[re.Pattern[str] | str, str]] = [
    (
        re.compile(r"insufficient ram", re.IGNORECASE),
        "Try buying more RAM for the account before deploying again.",
    ),
    (
        re.compile(r"tx_cpu_usage_exceeded|billed CPU time", re.IGNORECASE),
        "CPU limit exceeded. Wait a few minutes for your CPU to reset, "
        "or stake more tokens for resources.",
    ),
    (
        re.compile(r"tx_net_usage_exceeded", re.IGNORECASE),
        "NET limit exceeded. Wait a few minutes for your NET to reset, "
        "or stake more tokens for resources.",
    ),
    (
        re.compile(r"unknown key", re.IGNORECASE),
        "The signing key is not available. Make sure the signing service holds "
        "the account's private key.",
    ),
    (
        re.compile(r"overdrawn balance|insufficient funds", re.IGNORECASE),
        "Insufficient token balance for this transaction.",
    ),
    (
        re.compile(r"missing authority|missing required authority", re.IGNORECASE),
        "You don't have permission to perform this action. Check the account and permission.",
    ),
    (
        re.compile(r"deadline exceeded", re.IGNORECASE),
        "Transaction timed out. The network may be congested, try again.",
    ),
    (
        re.compile(r"duplicate transaction", re.IGNORECASE),
        "This exact transaction was already submitted. Wait a moment before retrying.",
    ),
    (
        re.compile(r"account does not exist", re.IGNORECASE),
        "The specified account doesn't exist on this network.",
    ),
]


def hint_for(message: str) -> str | None:
    """Return the hint of the first entry matching `message`.

    String patterns match as case-insensitive substrings.

    Example:
        >>> hint_for("assertion failure: account does not exist")
        "The specified account doesn't exist on this network."
        >>> hint_for("something else") is None
        True
    """
    for pattern, hint in ERROR_HINTS:
        if isinstance(pattern, str):
            if pattern.lower() in message.lower():
                return hint
        elif pattern.search(message):
            return hint
    return None


def extract_error_message(err: object) -> str:
    """Pick the most specific message of an error.

    The first detail message reported by the node wins over the exception
    text, since nodes put the assertion text there.
    """
    details = getattr(err, "details", None)
    if isinstance(details, list) and details:
        first = details[0]
        if isinstance(first, dict) and first.get("message"):
            return str(first["message"])
    if isinstance(err, str):
        return err
    message = getattr(err, "message", None)
    if isinstance(message, str) and message:
        return message
    if isinstance(err, BaseException):
        return str(err)
    return ""


@dataclass(frozen=True)
class ClassifiedError:
    """An error ready to be shown to the operator.

    Attributes:
        message: Error text ("" when the error carried none).
        hint: Matching hint, if any.
        dump: Structured rendering used when there is no message text.
    """

    message: str
    hint: str | None = None
    dump: str | None = None

    @property
    def text(self) -> str:
        return self.message or self.dump or ""


def _dump(err: object) -> str:
    data: Any = getattr(err, "__dict__", None) or err
    try:
        return json.dumps(data, default=str, indent=2, sort_keys=True)
    except (TypeError, ValueError):
        return repr(err)


def classify_error(err: object) -> ClassifiedError:
    """Turn a raw error into message + hint. Never raises."""
    message = extract_error_message(err)
    if not message:
        return ClassifiedError(message="", dump=_dump(err))
    return ClassifiedError(message=message, hint=hint_for(message))
