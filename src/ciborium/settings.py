from __future__ import annotations
import os

SHELL = os.environ.get("CIBORIUM_SHELL", "/bin/sh")
DOCKER = os.environ.get("CIBORIUM_DOCKER", "docker")
NODE_NAME = os.environ.get("CIBORIUM_NODE_NAME", "")
