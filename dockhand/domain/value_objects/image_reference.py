"""
Image Reference Value Object

Architectural Intent:
- Fully qualified container image name substituted into the compose manifest
- Rejects tags and names docker would refuse, before anything reaches the host
"""

import re
from dataclasses import dataclass

# docker tag grammar: [A-Za-z0-9_][A-Za-z0-9_.-]{0,127}
_TAG_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}$")
_NAME_RE = re.compile(r"^[a-z0-9]+(?:[._-][a-z0-9]+)*$")

DEFAULT_TAG = "latest"


@dataclass(frozen=True)
class ImageReference:
    """
    Value Object for `[registry/]account/repository:tag`.
    """
    account: str
    repository: str
    tag: str = DEFAULT_TAG
    registry: str = ""

    def __post_init__(self) -> None:
        if not _NAME_RE.match(self.account):
            raise ValueError(f"Invalid registry account: {self.account!r}")
        if not _NAME_RE.match(self.repository):
            raise ValueError(f"Invalid image repository: {self.repository!r}")
        if not _TAG_RE.match(self.tag):
            raise ValueError(f"Invalid image tag: {self.tag!r}")
        if self.registry and ("/" in self.registry or " " in self.registry):
            raise ValueError(f"Invalid registry host: {self.registry!r}")

    @property
    def name(self) -> str:
        """Image name without the tag."""
        prefix = f"{self.registry}/" if self.registry else ""
        return f"{prefix}{self.account}/{self.repository}"

    def __str__(self) -> str:
        return f"{self.name}:{self.tag}"
