"""Repository URL validation."""

import re


REPO_URL_PATTERNS = (
    re.compile(r"^https://github\.com/[\w\-.]+/[\w\-.]+/?$"),
    re.compile(r"^https://github\.com/[\w\-.]+/[\w\-.]+\.git$"),
    re.compile(r"^https://gitlab\.com/[\w\-.]+/[\w\-.]+/?$"),
    re.compile(r"^https://gitlab\.com/[\w\-.]+/[\w\-.]+\.git$"),
)


def validate_repo_url(url: str | None) -> bool:
    """Check that a URL points at a public GitHub or GitLab repository."""
    if not url or not isinstance(url, str):
        return False
    url = url.strip()
    return any(pattern.match(url) for pattern in REPO_URL_PATTERNS)


def is_github_url(url: str) -> bool:
    return "github.com" in url
