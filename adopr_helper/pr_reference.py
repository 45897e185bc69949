"""
Pull request URL parsing.

Supports the two URL shapes Azure DevOps hands out for a pull request:

    https://dev.azure.com/{organization}/{project}/_git/{repository}/pullrequest/{id}
    https://{organization}.visualstudio.com/{project}/_git/{repository}/pullrequest/{id}
"""

import re
from urllib.parse import unquote

from adopr_helper.exceptions import ParseError
from adopr_helper.types.pulls import PrIdentity

_SEGMENT = r"[^/?#]+"
_TAIL = rf"/(?P<project>{_SEGMENT})/_git/(?P<repository>{_SEGMENT})/pullrequest/(?P<pull_request_id>\d+)(?:[/?#].*)?"

DEV_AZURE_PATTERN = re.compile(
    rf"^https://dev\.azure\.com/(?P<organization>{_SEGMENT}){_TAIL}$",
    re.IGNORECASE,
)
VISUAL_STUDIO_PATTERN = re.compile(
    rf"^https://(?P<organization>[^./?#]+)\.visualstudio\.com{_TAIL}$",
    re.IGNORECASE,
)

_PATTERNS = (DEV_AZURE_PATTERN, VISUAL_STUDIO_PATTERN)


def parse_pr_url(url: str) -> PrIdentity:
    """
    Parse a pull request URL into its structured identity.

    Path segments are percent-decoded, so a project named ``My Project``
    comes back as such rather than as ``My%20Project``.

    Args:
        url: Pull request URL in canonical or legacy form

    Returns:
        PrIdentity with organization, project, repository and pull request id

    Raises:
        ParseError: If the URL matches neither supported shape
    """
    candidate = url.strip()

    for pattern in _PATTERNS:
        match = pattern.match(candidate)
        if match is None:
            continue

        parts = {key: unquote(value) for key, value in match.groupdict().items()}
        if not all(part.strip() for part in parts.values()):
            break

        return PrIdentity(
            organization=parts["organization"],
            project=parts["project"],
            repository=parts["repository"],
            pull_request_id=parts["pull_request_id"],
        )

    raise ParseError(url)


def try_parse_pr_url(url: str) -> PrIdentity | None:
    """Parse a pull request URL, returning None instead of raising."""
    try:
        return parse_pr_url(url)
    except ParseError:
        return None
