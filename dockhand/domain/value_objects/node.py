"""
Node Value Object

Architectural Intent:
- The one remote host a release is deployed to, as ssh sees it
- Rejects malformed hosts and users before they reach an ssh command line
- parse() accepts the forms operators type: host, user@host, user@host:port
  and user@[v6]:port
"""

import ipaddress
import re
from dataclasses import dataclass

DEFAULT_USER = "ubuntu"
DEFAULT_PORT = 22

# one RFC 1123 label
_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


def _is_ip(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def _is_valid_host(host: str) -> bool:
    if _is_ip(host):
        return True
    # dotted digits that failed as an address, e.g. 300.1.1.1
    if not host or len(host) > 253 or host.replace(".", "").isdigit():
        return False
    return all(_LABEL_RE.match(label) for label in host.split("."))


def _parse_port(text: str, target: str) -> int:
    if not text.isdigit():
        raise ValueError(f"Invalid port in {target!r}")
    return int(text)


@dataclass(frozen=True)
class Node:
    host: str
    user: str = DEFAULT_USER
    port: int = DEFAULT_PORT

    def __post_init__(self) -> None:
        if not self.user:
            raise ValueError("Node user cannot be empty")
        if "@" in self.user or any(c.isspace() for c in self.user):
            raise ValueError(f"Invalid user: {self.user!r}")
        if not (1 <= self.port <= 65535):
            raise ValueError(f"Port must be 1-65535, got {self.port}")
        if not _is_valid_host(self.host):
            raise ValueError(f"Invalid hostname: {self.host!r}")

    def __str__(self) -> str:
        return f"{self.user}@{self.host}:{self.port}"

    @property
    def ssh_target(self) -> str:
        """user@host form understood by ssh and scp."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.user}@{host}"

    @classmethod
    def parse(cls, target: str) -> "Node":
        user, at, rest = target.strip().rpartition("@")
        if not at:
            user = DEFAULT_USER
        port = DEFAULT_PORT

        if rest.startswith("["):
            host, closed, tail = rest[1:].partition("]")
            if not closed:
                raise ValueError(f"Unterminated IPv6 bracket in {target!r}")
            if tail:
                if not tail.startswith(":"):
                    raise ValueError(f"Unexpected text after ']' in {target!r}")
                port = _parse_port(tail[1:], target)
        elif rest.count(":") == 1:
            host, _, port_text = rest.partition(":")
            port = _parse_port(port_text, target)
        else:
            host = rest

        return cls(host=host, user=user, port=port)
