# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Regex-based scanner for component source text.

This module locates the pieces of a single-file component that the ancestor
search needs:
- <script> bodies (every block, e.g. a setup block and a plain block)
- import statements naming other components
- provide(...) call sites and their key/value arguments

Design:
- Best-effort by intent: no grammar, no AST. Malformed or unsupported syntax
  degrades to fewer entries or to the NON_VALID_PROVIDE sentinel, never to an
  exception.
- find_provide_calls() and parse_provide_argument() are the only entry points
  the indexes use, so a stricter parser can replace them in isolation.

Known Limitations:
- provide(...) matching is non-greedy: nested parentheses truncate the call.
- Object literals with nested objects, arrays, computed keys or spread are
  only partially understood; unsupported pairs are skipped silently.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List

from provide_seeker.models import NON_VALID_PROVIDE, ProvideEntry

logger = logging.getLogger(__name__)

# Every <script ...> ... </script> block, group 1 is the body
RX_SCRIPT_BLOCK = re.compile(r"<script[^>]*>([\s\S]*?)</script>")

# import { A, B } from '...'  and  import A from '...'
RX_IMPORT_STATEMENT = re.compile(r"""import\s+(\{?\s*[\w,\s]+\}?)\s+from\s+['"][^'"]+['"]""")

# Inner argument of provide(...)
RX_PROVIDE_CAPTURE = re.compile(r"provide\s*\(\s*([\s\S]*?)\s*\)")

# Whole provide(...) call
RX_PROVIDE_BLOCK = re.compile(r"provide\s*\(\s*[\s\S]*?\s*\)")

# Text that starts with a provide( call, as opposed to a bare argument
RX_PROVIDE_CALL_START = re.compile(r"^\s*provide\s*\(")

# key: value  or a bare key followed by "," or "}"
RX_OBJECT_PAIRS = re.compile(
    r"""(['"]?\w+['"]?)\s*:\s*(['"]?[\w\s]+['"]?)|(['"]?\w+['"]?)(?=\s*[},])"""
)

# Two-argument form: key, value (split on the first comma)
RX_KEY_VALUE_ARGS = re.compile(r"^([^,]+?)\s*,\s*([\s\S]+)$")

RX_QUOTES = re.compile(r"""^['"]|['"]$""")


def strip_quotes(text: str) -> str:
    """Remove one leading and one trailing quote character."""
    return RX_QUOTES.sub("", text)


def component_name_for(file_path: str) -> str:
    """Component name of a file: its base name without extension.

    Two files with the same base name map to the same component.
    """
    return Path(file_path).stem


def extract_script_body(text: str) -> str:
    """Concatenate the bodies of all <script> blocks, each newline-terminated.

    Returns:
        Combined script text, or "" when the text has no <script> block.
    """
    return "".join(match.group(1) + "\n" for match in RX_SCRIPT_BLOCK.finditer(text))


def imports_component(text: str, component_name: str) -> bool:
    """Check whether the script of a component imports ``component_name``.

    Only import statements inside <script> blocks are considered.

    Args:
        text: Raw file content.
        component_name: Identifier to look for in the import lists.

    Returns:
        True on the first import statement naming the component.
    """
    script = extract_script_body(text)
    for match in RX_IMPORT_STATEMENT.finditer(script):
        names = [name.strip() for name in re.sub(r"[{}]", "", match.group(1)).split(",")]
        if component_name in (name for name in names if name):
            return True
    return False


def find_provide_calls(text: str) -> List[str]:
    """Return every non-overlapping provide(...) call text in ``text``."""
    return [match.group(0) for match in RX_PROVIDE_BLOCK.finditer(text)]


def parse_key_value_pairs(object_text: str) -> List[ProvideEntry]:
    """Extract ``key: value`` and bare-key pairs from an object literal.

    A bare key (shorthand property) uses the key as its value. Pairs are
    returned in written order.
    """
    entries: List[ProvideEntry] = []
    for match in RX_OBJECT_PAIRS.finditer(object_text):
        key = match.group(1) or match.group(3)
        value = match.group(2) or match.group(3)
        entries.append(ProvideEntry(strip_quotes(key.strip()), strip_quotes(value.strip())))
    return entries


def _parse_two_arguments(argument: str) -> ProvideEntry:
    kv = RX_KEY_VALUE_ARGS.match(argument)
    if not kv:
        return NON_VALID_PROVIDE
    return ProvideEntry(strip_quotes(kv.group(1).strip()), strip_quotes(kv.group(2).strip()))


def _provide_arguments(call_text: str) -> List[str]:
    if RX_PROVIDE_CALL_START.match(call_text):
        matches = RX_PROVIDE_CAPTURE.finditer(call_text)
        return [(match.group(1) or "").strip() for match in matches]

    # Bare argument text, e.g. "key, value" or "{ a: 1 }"; a provide( inside it
    # is part of the value
    argument = call_text.strip()
    return [argument] if argument else []


def parse_provide_argument(call_text: str) -> List[ProvideEntry]:
    """Parse the argument of a provide call into ordered key/value entries.

    Accepts either call text, which starts with ``provide(`` and may hold
    several calls, or a bare argument such as ``key, value``. A bare argument
    is never searched for nested provide calls.
    Object literals go through parse_key_value_pairs(); anything else is read
    as ``key, value`` split on the first comma.

    Returns:
        Ordered entries. ``[NON_VALID_PROVIDE]`` when nothing can be recovered.
        Never raises.
    """
    entries: List[ProvideEntry] = []
    for argument in _provide_arguments(call_text):
        if argument.startswith("{"):
            entries.extend(parse_key_value_pairs(argument))
        else:
            entries.append(_parse_two_arguments(argument))

    if not entries:
        logger.debug(f"No provide entries recovered from: {call_text!r}")
        return [NON_VALID_PROVIDE]
    return entries


def parse_provide_calls(call_texts: Iterable[str]) -> List[ProvideEntry]:
    """Flatten the parsed entries of several provide call texts."""
    entries: List[ProvideEntry] = []
    for call_text in call_texts:
        entries.extend(parse_provide_argument(call_text))
    return entries
