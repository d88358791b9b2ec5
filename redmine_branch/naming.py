"""Branch name derivation.

Usage:
    name = get_branch_name(issue)            # "rd-42-abc-8.1-do-stuff-asap"
    cleanup_subject(" [Do] the - laundry ")  # "do-the-laundry"
    get_trigram("Arnold Bcon Tran")          # "abc"

All functions are pure and raise NamingError when the issue data cannot
produce a valid name.
"""

import re
from typing import TYPE_CHECKING

from text_unidecode import unidecode

if TYPE_CHECKING:
    from redmine_branch.models import Issue

BRANCH_PREFIX = "rd"

_MULTIPLE_DASH = re.compile(r"-+")
_FORBIDDEN_CHARS = re.compile(r"[\[\]\"'()]")


class NamingError(Exception):
    """Raised when issue data cannot be turned into a branch name."""


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------

def get_trigram(full_name: str) -> str:
    """Return the 3-letter code for an assignee name.

    First letter of the first name plus the first two letters of the second
    token, lowercased: "Arnold Bcon Tran" -> "abc".
    """
    tokens = full_name.split()
    if len(tokens) < 2:
        raise NamingError(
            f"Unable to read trigram from assignee '{full_name}': "
            "expected at least a first and a last name"
        )
    if len(tokens[1]) < 2:
        raise NamingError(
            f"Unable to read trigram from assignee '{full_name}': "
            f"'{tokens[1]}' is too short"
        )
    return (tokens[0][:1] + tokens[1][:2]).lower()


def get_target_version(version_name: str) -> str:
    """Return the ``major.minor`` prefix of a version name ("8.1.0" -> "8.1")."""
    if len(version_name) < 3:
        raise NamingError(
            f"Target version '{version_name}' is too short, expected 'major.minor[.patch]'"
        )
    return version_name[:3]


def remove_diacritics(text: str) -> str:
    """Transliterate *text* to ASCII ("é" -> "e", "ß" -> "ss", "Ł" -> "L").

    Non-Latin scripts are romanized rather than dropped.
    """
    return unidecode(text)


def cleanup_subject(subject: str) -> str:
    """Turn a ticket subject into a branch-name fragment.

    Applying it to its own output returns the same string.
    """
    cleaned = remove_diacritics(subject).strip()
    cleaned = cleaned.replace(" ", "-").replace(":", "=").lower()
    cleaned = _FORBIDDEN_CHARS.sub("", cleaned)
    # Stripping may glue dashes together, so collapse last
    return _MULTIPLE_DASH.sub("-", cleaned)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_branch_name(issue: "Issue") -> str:
    """Return ``rd-<id>-<trigram>-<major.minor>-<subject>`` for *issue*.

    Raises:
        NamingError: assignee name lacks two tokens, or the version name is
                     shorter than 3 characters.
    """
    trigram = get_trigram(issue.assigned_to.name)
    version = get_target_version(issue.fixed_version.name)
    subject = cleanup_subject(issue.subject)
    return f"{BRANCH_PREFIX}-{issue.id}-{trigram}-{version}-{subject}"
