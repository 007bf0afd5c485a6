# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from ciborium import naming
from ciborium.model import BuildImageConfig, Job, PullImageConfig
from ciborium.persistence import save_workflow
from ciborium.runner import StepContext, current_node, load_workflow, run_workflow
from ciborium.launcher import Launcher
from ciborium.step_workflows import docker_build, docker_pull
from ciborium.ui.console import Console, set_console, get_console


DEFAULT_WORKFLOWS = ("ciborium_workflow.py", "ciborium_workflow.json")


def discover_workflow(workflow_arg: str | None) -> Path:
    """
    The workflow named on the command line, else the first default workflow
    file found in the current directory. Exits with status 1 when none exists.
    """
    candidates = [workflow_arg] if workflow_arg else list(DEFAULT_WORKFLOWS)
    for candidate in candidates:
        path = Path(candidate)
        if path.is_file():
            return path

    get_console().print_error(
        "Workflow file not found",
        f"Looked for: {', '.join(candidates)}",
        hint="pass --workflow with a .py or .json workflow file",
    )
    sys.exit(1)


def _single_step(workspace: str, project: str, perform, config) -> None:
    """Run one image step outside of a workflow and exit like a job would."""
    console = get_console()
    root = Path(workspace).resolve()
    job = Job(name=project, steps=[])
    step_ctx = StepContext(
        job=job,
        workspace=root,
        launcher=Launcher(),
        console=console,
    )
    try:
        perform(config, step_ctx)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)
    console.print_success(project)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """Ciborium: CI jobs that build and pull Docker images."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option(
    "--workflow",
    default=None,
    help="Workflow file path, .py or .json (defaults to ciborium_workflow.py if present)",
)
@click.option("--repo-root", default=".", show_default=True, help="Workspace the jobs run in")
@click.option("--fail-fast/--no-fail-fast", default=True, help="Stop running jobs after the first failure")
@click.pass_context
def run(ctx, workflow, repo_root, fail_fast):
    """Run a Ciborium workflow."""
    console = get_console()

    workflow_path = discover_workflow(workflow)

    try:
        jobs = load_workflow(workflow_path)

        console.print_run_started(
            workflow=workflow_path.name,
            job_count=len(jobs),
            node=naming.hostname(current_node()),
        )

        results = run_workflow(jobs, repo_root=repo_root, fail_fast=fail_fast)

        console.print_results(results)

        if any(v == "failed" for v in results.values()):
            sys.exit(1)

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command("build")
@click.option("--dockerfile", default=None, help="Dockerfile, or directory holding one (default: .)")
@click.option("--image", default=None, help="Image tag (default: jenkins/<project>)")
@click.option("--content", default=None, help="Dockerfile content; wins over --dockerfile")
@click.option(
    "--content-file",
    default=None,
    type=click.File("r"),
    help="Read Dockerfile content from a file ('-' for stdin)",
)
@click.option("--project", default=None, help="Project name used for the default image (default: workspace name)")
@click.option("--workspace", default=".", show_default=True, help="Working directory for docker")
@click.pass_context
def build_image(ctx, dockerfile, image, content, content_file, project, workspace):
    """Build a Docker image, as a "Build Docker image" step would."""
    if content is not None and content_file is not None:
        raise click.UsageError("--content and --content-file are mutually exclusive")
    if content_file is not None:
        content = content_file.read()
    project = project or Path(workspace).resolve().name
    config = BuildImageConfig(dockerfile=dockerfile, image=image, content=content)
    _single_step(workspace, project, docker_build.perform, config)


@cli.command("pull")
@click.argument("image", required=False, default="")
@click.option("--workspace", default=".", show_default=True, help="Working directory for docker")
@click.pass_context
def pull_image(ctx, image, workspace):
    """Pull a Docker image, as a "Pull Docker image" step would."""
    project = Path(workspace).resolve().name
    _single_step(workspace, project, docker_pull.perform, PullImageConfig(image=image or None))


@cli.command("export")
@click.option("--workflow", default=None, help="Python workflow file to export")
@click.option("--output", required=True, help="JSON file to write")
@click.pass_context
def export(ctx, workflow, output):
    """Save a workflow's jobs as JSON."""
    console = get_console()
    workflow_path = discover_workflow(workflow)
    try:
        jobs = load_workflow(workflow_path)
    except Exception as e:
        console.print_error("Failed to load workflow", f"{workflow_path}: {e}")
        sys.exit(1)
    out = save_workflow(jobs, output)
    console.print_info(f"Saved {len(jobs)} job(s) to {out}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
