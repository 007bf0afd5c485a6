# ciborium_workflow.py
# Workflow for ciborium itself: test the package, then build and pull images.
from __future__ import annotations
from ciborium.dsl import wf, job, sh, docker_build, docker_pull

def workflow():
    return wf(
        # Test job - runs pytest on the codebase
        job(
            "test",
            sh("Install package", "pip install -e .[test]"),
            sh("Run pytest", "pytest -q"),
        ),

        # Pull the base image before building on top of it
        job(
            "base-image",
            docker_pull("Pull python", "python:3.12-slim"),
            requires="docker",
        ),

        # Image job - Dockerfile defined inline, no build context
        job(
            "ciborium",
            docker_build(
                "Build runner image",
                image="ciborium/runner",
                content="FROM python:3.12-slim\nRUN pip install ciborium",
            ),
            needs=["test", "base-image"],
            requires="docker",
        ),
    )
