"""
commit_status/reporter/status_resolver.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single canonical rule* for turning the
configured status preset into the `state` and `description` sent to
GitLab.

PRESET RULE
-----------
- Any preset other than "auto" is sent verbatim.
- "auto" defers to the ambient build result:
    - build succeeded -> "success"
    - otherwise       -> "failed"

The build result is passed in by the caller. This module never reads
the process environment.

DESCRIPTION RULE
----------------
- Configured description empty -> resolved state with its first
  character upper-cased ("failed" -> "Failed")
- Otherwise the configured description is used verbatim

Capitalization is ASCII-only and locale-independent.

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT:
- Perform I/O
- Log, raise, or handle exceptions
- Validate the preset (configuration loading already did)

It performs **pure, deterministic mapping only**.
"""

from __future__ import annotations

from typing import Tuple

from schemas.status_schema import AUTO_PRESET


def resolve_state(preset: str, build_succeeded: bool) -> str:
    if preset != AUTO_PRESET:
        return preset
    return "success" if build_succeeded else "failed"


def describe(description: str, state: str) -> str:
    if description:
        return description
    return _capitalize_ascii(state)


def resolve(
    preset: str,
    build_succeeded: bool,
    description: str = "",
) -> Tuple[str, str]:
    """
    Return (state, description) for one status report.

      resolve("auto", True)             -> ("success", "Success")
      resolve("canceled", True)         -> ("canceled", "Canceled")
      resolve("failed", False, "lint")  -> ("failed", "lint")
    """
    state = resolve_state(preset, build_succeeded)
    return state, describe(description, state)


def _capitalize_ascii(word: str) -> str:
    # str.upper() would also map non-ASCII letters
    if word and "a" <= word[0] <= "z":
        return chr(ord(word[0]) - 32) + word[1:]
    return word
