"""Inbound trigger interface: one-shot "set this key" requests.

A trigger carries ``key`` (a dotted path, required), ``value`` (defaults to
an empty string) and ``type`` (``text|number|boolean|dictionary|list``,
defaults to ``text``).  Applying it coerces the value and deep-sets it into
the jar.  The parameters are consumed: they are removed from the mapping they
arrived in, so replaying the same entry point does nothing.

Triggers typically arrive as URLs from automation tools, e.g.::

    https://jar.example/?key=config.theme&value=light&type=text&action=set

``parse_trigger_url`` splits such a URL into its parameters and the cleaned
URL, and ``build_trigger_url`` produces one.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from data_jar.errors import InvalidTriggerError
from data_jar.result import SetOutcome
from data_jar.tree.mutator import deep_set_with_outcome
from data_jar.tree.nodes import Node, NodeKind

__all__ = [
    "TRIGGER_KINDS",
    "TRIGGER_PARAMS",
    "TriggerResult",
    "apply_trigger",
    "build_trigger_url",
    "coerce_trigger_value",
    "parse_trigger_kind",
    "parse_trigger_url",
]

logger = logging.getLogger(__name__)

TRIGGER_KINDS = frozenset(
    {
        NodeKind.TEXT,
        NodeKind.NUMBER,
        NodeKind.BOOLEAN,
        NodeKind.DICTIONARY,
        NodeKind.LIST,
    }
)

# Parameters removed from the entry point once a trigger is consumed.
TRIGGER_PARAMS = ("key", "value", "type", "action")

# Leading numeric prefix, as accepted by a lenient float parser ("12px" -> 12).
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True, slots=True)
class TriggerResult:
    """Outcome of applying one trigger.

    Attributes:
        root:    The jar after the trigger (unchanged when nothing happened).
        message: Transient acknowledgement for the user; None when the request
                 carried no key.
        outcome: What the deep-set did; None when the request carried no key.
        entry_point: For a trigger that arrived as a URL, that URL with the
                 trigger parameters removed, for the caller to navigate to.
    """

    root: tuple[Node, ...]
    message: str | None = None
    outcome: SetOutcome | None = None
    entry_point: httpx.URL | None = None

    @property
    def applied(self) -> bool:
        return self.outcome is not None and self.outcome.changed


def _parse_float(value: str) -> float:
    match = _FLOAT_PREFIX.match(value)
    if match is None:
        return math.nan
    return float(match.group(1))


def parse_trigger_kind(type_name: str | None) -> NodeKind:
    """Map a ``type`` parameter to a NodeKind (missing means text).

    Raises:
        InvalidTriggerError: If the type is not one of the trigger kinds.
    """
    if not type_name:
        return NodeKind.TEXT
    msg = f"Unsupported trigger type: {type_name!r}"
    try:
        kind = NodeKind(type_name)
    except ValueError:
        raise InvalidTriggerError(msg) from None
    if kind not in TRIGGER_KINDS:
        raise InvalidTriggerError(msg)
    return kind


def coerce_trigger_value(value: str, kind: NodeKind) -> Any:
    """Coerce a raw trigger value for ``kind``.

    ``number`` parses the leading float (NaN if there is none), ``boolean``
    is true only for the exact string "true", and containers are empty.
    """
    if kind is NodeKind.NUMBER:
        return _parse_float(value)
    if kind is NodeKind.BOOLEAN:
        return value == "true"
    if kind in (NodeKind.DICTIONARY, NodeKind.LIST):
        return None
    return value


def apply_trigger(
    root: Sequence[Node], params: MutableMapping[str, str]
) -> TriggerResult:
    """Consume the trigger parameters in ``params`` and apply them to ``root``.

    ``key``, ``value``, ``type`` and ``action`` are removed from ``params``
    whether or not the trigger succeeds.  A missing key is a silent no-op.

    Raises:
        InvalidTriggerError: If ``type`` is unsupported.
        InvalidPathError: If ``key`` is not a valid dotted path.
    """
    key, value, type_name, _ = (params.pop(name, None) for name in TRIGGER_PARAMS)
    if not key:
        return TriggerResult(root=tuple(root))

    kind = parse_trigger_kind(type_name)
    coerced = coerce_trigger_value(value or "", kind)
    new_root, outcome = deep_set_with_outcome(root, key, coerced, kind)

    if outcome is SetOutcome.BLOCKED:
        message = f'Key "{key}" is blocked by an existing value'
        logger.info("Trigger for %r blocked by a leaf", key)
    else:
        message = f'Updated key "{key}"'
        logger.info("Trigger set %r (%s): %s", key, kind, outcome)
    return TriggerResult(root=new_root, message=message, outcome=outcome)


def parse_trigger_url(url: str | httpx.URL) -> tuple[dict[str, str], httpx.URL]:
    """Split a trigger URL into its parameters and the URL without them.

    Only the first occurrence of each parameter is used.  Unrelated query
    parameters stay on the cleaned URL.
    """
    parsed = httpx.URL(url)
    params = {name: parsed.params[name] for name in TRIGGER_PARAMS if name in parsed.params}
    cleaned = parsed
    for name in TRIGGER_PARAMS:
        cleaned = cleaned.copy_remove_param(name)
    return params, cleaned


def build_trigger_url(
    base_url: str | httpx.URL,
    key: str,
    value: str = "",
    type_name: NodeKind | str = NodeKind.TEXT,
) -> httpx.URL:
    """Build a URL that, when opened by the jar, sets ``key`` to ``value``."""
    kind = parse_trigger_kind(str(type_name))
    return httpx.URL(base_url).copy_merge_params(
        {"key": key, "value": value, "type": str(kind), "action": "set"}
    )
