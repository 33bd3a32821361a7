"""Well-known repository metadata files and funding information."""

import json
import re
from typing import Any, Iterable, Optional

import yaml

from reposync.main.logging import get_logger

logger = get_logger(__name__)

_PREFIX = r"(docs/)?(.github/)?(.gitlab/)?"

METADATA_FILE_PATTERNS: dict[str, re.Pattern] = {
    "readme": re.compile(r"^README", re.IGNORECASE),
    "changelog": re.compile(r"^CHANGE|^HISTORY", re.IGNORECASE),
    "contributing": re.compile(rf"^{_PREFIX}CONTRIBUTING", re.IGNORECASE),
    "funding": re.compile(rf"^{_PREFIX}FUNDING.yml", re.IGNORECASE),
    "license": re.compile(r"^LICENSE|^COPYING|^MIT-LICENSE", re.IGNORECASE),
    "code_of_conduct": re.compile(
        rf"^{_PREFIX}CODE[-_]OF[-_]CONDUCT", re.IGNORECASE
    ),
    "threat_model": re.compile(r"^THREAT[-_]MODEL", re.IGNORECASE),
    "audit": re.compile(r"^AUDIT", re.IGNORECASE),
    "citation": re.compile(r"^CITATION", re.IGNORECASE),
    "codeowners": re.compile(rf"^{_PREFIX}CODEOWNERS", re.IGNORECASE),
    "security": re.compile(rf"^{_PREFIX}SECURITY", re.IGNORECASE),
    "support": re.compile(rf"^{_PREFIX}SUPPORT$", re.IGNORECASE),
}

FUNDING_URL_TEMPLATES = {
    "github": "https://github.com/sponsors/{}",
    "tidelift": "https://tidelift.com/funding/github/{}",
    "community_bridge": "https://funding.communitybridge.org/projects/{}",
    "issuehunt": "https://issuehunt.io/r/{}",
    "open_collective": "https://opencollective.com/{}",
    "ko_fi": "https://ko-fi.com/{}",
    "liberapay": "https://liberapay.com/{}",
    "otechie": "https://otechie.com/{}",
    "patreon": "https://patreon.com/{}",
}


def classify_metadata_files(
    file_list: Iterable[str],
) -> Optional[dict[str, Optional[str]]]:
    """Map each metadata file kind to the first matching path.

    Returns None for an empty file list so callers can tell "nothing found"
    apart from "archive unavailable".
    """
    files = [file for file in file_list if file]
    if not files:
        return None

    return {
        kind: next((file for file in files if pattern.search(file)), None)
        for kind, pattern in METADATA_FILE_PATTERNS.items()
    }


def parse_funding_yaml(content: str) -> Optional[dict[str, Any]]:
    """Funding mapping from a FUNDING.yml, or None if it is not a valid mapping.

    YAML scalars such as dates are turned into strings so that the result can
    be stored in a JSON column.
    """
    try:
        funding = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        logger.debug("Ignoring invalid FUNDING.yml", extra={"error": str(exc)})
        return None

    if not isinstance(funding, dict):
        logger.debug("Ignoring FUNDING.yml that is not a mapping")
        return None

    try:
        return json.loads(json.dumps(funding, default=str))
    except (TypeError, ValueError) as exc:
        logger.debug("Ignoring unserializable FUNDING.yml", extra={"error": str(exc)})
        return None


def _as_list(value: Any) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def funding_links(
    metadata: Optional[dict[str, Any]], owner_links: Optional[list[str]] = None
) -> list[str]:
    """Sponsorship URLs for a repository, owner links first, without duplicates."""
    links: list[str] = list(owner_links or [])

    funding = (metadata or {}).get("funding")
    if isinstance(funding, dict):
        for key, value in funding.items():
            if not value:
                continue

            template = FUNDING_URL_TEMPLATES.get(key)
            for item in _as_list(value):
                if not item:
                    continue
                links.append(template.format(item) if template else item)

    return list(dict.fromkeys(link for link in links if isinstance(link, str)))
