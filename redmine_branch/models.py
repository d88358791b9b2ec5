"""Data models for Redmine tickets.

Contains frozen dataclasses mirroring the subset of the Redmine issue JSON
we rely on:
    - IdProperty / NamedProperty / CustomField
    - Issue
    - Ticket           (the ``{"issue": {...}}`` envelope)

Usage:
    ticket = parse_ticket(body)              # raises TicketParseError
    ticket.issue.branch_name()               # "rd-42-abc-8.1-do-stuff-asap"
"""

import json
from dataclasses import dataclass, field
from typing import Any

from redmine_branch.naming import get_branch_name, get_target_version, get_trigram


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class TicketParseError(Exception):
    """Raised when a response body is not a valid Redmine ticket."""

    def __init__(self, message: str, body: str = "") -> None:
        super().__init__(message)
        self.body = body


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IdProperty:
    id: int


@dataclass(frozen=True)
class NamedProperty:
    id: int
    name: str


@dataclass(frozen=True)
class CustomField:
    id: int
    name: str
    value: str | None = None


@dataclass(frozen=True)
class Issue:
    id: int
    subject: str
    fixed_version: NamedProperty
    assigned_to: NamedProperty
    custom_fields: tuple[CustomField, ...] = field(default_factory=tuple)
    parent: IdProperty | None = None

    def target_version(self) -> str:
        return get_target_version(self.fixed_version.name)

    def trigram(self) -> str:
        return get_trigram(self.assigned_to.name)

    def branch_name(self) -> str:
        return get_branch_name(self)

    def custom_field(self, name: str) -> str | None:
        """Return the value of the custom field called *name*, if any."""
        for custom in self.custom_fields:
            if custom.name == name:
                return custom.value
        return None


@dataclass(frozen=True)
class Ticket:
    issue: Issue


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_ticket(body: str) -> Ticket:
    """Deserialize a Redmine ``/issues/<id>.json`` response body.

    Unknown fields are ignored.

    Raises:
        TicketParseError: malformed JSON, or a required field is missing or
                          has the wrong type.
    """
    try:
        raw = json.loads(body)
    except json.JSONDecodeError as exc:
        raise TicketParseError(f"Invalid JSON: {exc}", body) from exc

    try:
        return Ticket(issue=_parse_issue(_require(raw, "issue", dict)))
    except TicketParseError as exc:
        raise TicketParseError(str(exc), body) from exc


def _require(raw: Any, key: str, expected: type) -> Any:
    if not isinstance(raw, dict):
        raise TicketParseError(f"Expected an object around '{key}', got {type(raw).__name__}")
    if key not in raw:
        raise TicketParseError(f"Missing field '{key}'")
    value = raw[key]
    # bool is a subclass of int but never a valid id
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise TicketParseError(
            f"Field '{key}' should be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _parse_named(raw: dict, key: str) -> NamedProperty:
    prop = _require(raw, key, dict)
    return NamedProperty(id=_require(prop, "id", int), name=_require(prop, "name", str))


def _parse_custom_field(raw: Any) -> CustomField:
    value = raw.get("value") if isinstance(raw, dict) else None
    if value is not None and not isinstance(value, str):
        raise TicketParseError(f"Custom field value should be str or null, got {type(value).__name__}")
    return CustomField(
        id=_require(raw, "id", int),
        name=_require(raw, "name", str),
        value=value,
    )


def _parse_issue(raw: dict) -> Issue:
    parent = None
    if raw.get("parent") is not None:
        parent = IdProperty(id=_require(_require(raw, "parent", dict), "id", int))

    custom_fields: tuple[CustomField, ...] = ()
    if raw.get("custom_fields") is not None:
        custom_fields = tuple(
            _parse_custom_field(item) for item in _require(raw, "custom_fields", list)
        )

    return Issue(
        id=_require(raw, "id", int),
        subject=_require(raw, "subject", str),
        fixed_version=_parse_named(raw, "fixed_version"),
        assigned_to=_parse_named(raw, "assigned_to"),
        custom_fields=custom_fields,
        parent=parent,
    )
