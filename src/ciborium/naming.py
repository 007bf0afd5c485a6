# naming.py
from __future__ import annotations

from typing import List, Optional

from .model import Node

IMAGE_PREFIX = "jenkins/"
DEFAULT_HOSTNAME = "jenkins.docker.io"


def image_name(project: str) -> str:
    """
    Default image name for a project.

    Every build of the same project gets the same name: `jenkins/<project>`.
    """
    return IMAGE_PREFIX + project


def hostname(node: Optional[Node]) -> str:
    """Display name of the node, or DEFAULT_HOSTNAME when it has none."""
    if node is None or not node.display_name:
        return DEFAULT_HOSTNAME
    return node.display_name


def tokenize(text: Optional[str]) -> List[str]:
    """Split on runs of whitespace; never returns empty strings."""
    if text is None:
        return []
    return text.split()
