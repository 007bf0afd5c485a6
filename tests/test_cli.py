import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ciborium.cli import cli


@pytest.fixture
def cli_runner():
    """Provides a Click CLI runner for testing commands."""
    return CliRunner()


WORKFLOW = (
    "from ciborium.dsl import wf, job, docker_build, docker_pull\n"
    "def workflow():\n"
    "    return wf(\n"
    "        job('base', docker_pull('Pull', 'busybox')),\n"
    "        job('app', docker_build('Build', content='FROM busybox'), needs=['base']),\n"
    "    )\n"
)


class TestPull:

    def test_pull_without_image_fails_fast(self, cli_runner, make_launcher, tmp_path):
        launcher = make_launcher()
        with patch("ciborium.cli.Launcher", return_value=launcher):
            result = cli_runner.invoke(cli, ["pull", "--workspace", str(tmp_path)])
        assert result.exit_code == 1
        assert "No docker image defined" in result.output
        assert launcher.calls == []

    def test_pull(self, cli_runner, make_launcher, tmp_path):
        launcher = make_launcher()
        with patch("ciborium.cli.Launcher", return_value=launcher):
            result = cli_runner.invoke(cli, ["pull", "busybox", "--workspace", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert launcher.calls[0]["cmds"] == ["docker", "pull", "busybox"]

    def test_pull_failure(self, cli_runner, make_launcher, tmp_path):
        with patch("ciborium.cli.Launcher", return_value=make_launcher(codes=[137])):
            result = cli_runner.invoke(cli, ["pull", "busybox", "--workspace", str(tmp_path)])
        assert result.exit_code == 1
        assert "Unable to pull docker image: 'busybox'" in result.output

    def test_pull_interrupted(self, cli_runner, make_launcher, tmp_path):
        with patch("ciborium.cli.Launcher", return_value=make_launcher(interrupt=True)):
            result = cli_runner.invoke(cli, ["pull", "busybox", "--workspace", str(tmp_path)])
        assert result.exit_code == 130


class TestBuild:

    def test_build_content_with_project(self, cli_runner, make_launcher, tmp_path):
        launcher = make_launcher()
        with patch("ciborium.cli.Launcher", return_value=launcher):
            result = cli_runner.invoke(
                cli,
                ["build", "--content", "FROM busybox", "--project", "foo", "--workspace", str(tmp_path)],
            )
        assert result.exit_code == 0, result.output
        assert launcher.calls[0]["cmds"][2] == 'docker build -t "jenkins/foo" - <<EOF\nFROM busybox\nEOF'

    def test_build_content_file(self, cli_runner, make_launcher, tmp_path):
        (tmp_path / "inline.txt").write_text("FROM alpine")
        launcher = make_launcher()
        with patch("ciborium.cli.Launcher", return_value=launcher):
            result = cli_runner.invoke(
                cli,
                [
                    "build",
                    "--content-file", str(tmp_path / "inline.txt"),
                    "--image", "app",
                    "--workspace", str(tmp_path),
                ],
            )
        assert result.exit_code == 0, result.output
        assert launcher.calls[0]["cmds"][2] == 'docker build -t "app" - <<EOF\nFROM alpine\nEOF'

    def test_build_defaults_to_workspace_name(self, cli_runner, make_launcher, tmp_path):
        workspace = tmp_path / "shop"
        workspace.mkdir()
        launcher = make_launcher()
        with patch("ciborium.cli.Launcher", return_value=launcher):
            result = cli_runner.invoke(cli, ["build", "--workspace", str(workspace)])
        assert result.exit_code == 0, result.output
        assert launcher.calls[0]["cmds"][2] == 'docker build -t "jenkins/shop" .'

    def test_build_failure(self, cli_runner, make_launcher, tmp_path):
        with patch("ciborium.cli.Launcher", return_value=make_launcher(codes=[1])):
            result = cli_runner.invoke(
                cli, ["build", "--dockerfile", "Dockerfile.ci", "--workspace", str(tmp_path)]
            )
        assert result.exit_code == 1
        assert "Unable to build docker file: 'Dockerfile.ci'" in result.output

    def test_content_options_are_exclusive(self, cli_runner, tmp_path):
        (tmp_path / "inline.txt").write_text("FROM alpine")
        result = cli_runner.invoke(
            cli, ["build", "--content", "FROM x", "--content-file", str(tmp_path / "inline.txt")]
        )
        assert result.exit_code == 2


class TestRun:

    def test_run_workflow(self, cli_runner, make_launcher, tmp_path):
        path = tmp_path / "images_workflow.py"
        path.write_text(WORKFLOW)
        launcher = make_launcher()
        with patch("ciborium.runner.Launcher", return_value=launcher):
            result = cli_runner.invoke(
                cli, ["run", "--workflow", str(path), "--repo-root", str(tmp_path)]
            )
        assert result.exit_code == 0, result.output
        assert "RUN STARTED" in result.output
        assert "node=jenkins.docker.io" in result.output
        assert [c["cmds"][0] for c in launcher.calls] == ["docker", "/bin/sh"]

    def test_run_workflow_failure(self, cli_runner, make_launcher, tmp_path):
        path = tmp_path / "images_workflow.py"
        path.write_text(WORKFLOW)
        with patch("ciborium.runner.Launcher", return_value=make_launcher(codes=[1])):
            result = cli_runner.invoke(
                cli, ["run", "--workflow", str(path), "--repo-root", str(tmp_path)]
            )
        assert result.exit_code == 1
        assert "  base  FAILED" in result.output

    def test_run_missing_workflow(self, cli_runner, tmp_path):
        result = cli_runner.invoke(cli, ["run", "--workflow", str(tmp_path / "nope.py")])
        assert result.exit_code == 1


def test_export_then_run_json(cli_runner, make_launcher, tmp_path):
    path = tmp_path / "images_workflow.py"
    path.write_text(WORKFLOW)
    out = tmp_path / "images.json"

    result = cli_runner.invoke(cli, ["export", "--workflow", str(path), "--output", str(out)])
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert [j["name"] for j in data["jobs"]] == ["base", "app"]

    launcher = make_launcher()
    with patch("ciborium.runner.Launcher", return_value=launcher):
        result = cli_runner.invoke(cli, ["run", "--workflow", str(out), "--repo-root", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert len(launcher.calls) == 2


def test_export_rejects_cyclic_workflow(cli_runner, tmp_path):
    path = tmp_path / "loop_workflow.py"
    path.write_text(
        "from ciborium.dsl import wf, job, docker_pull\n"
        "JOBS = wf(\n"
        "    job('a', docker_pull('Pull', 'busybox'), needs='b'),\n"
        "    job('b', docker_pull('Pull', 'busybox'), needs='a'),\n"
        ")\n"
    )
    out = tmp_path / "loop.json"
    result = cli_runner.invoke(cli, ["export", "--workflow", str(path), "--output", str(out)])
    assert result.exit_code == 1
    assert "cycle" in result.output
    assert not out.exists()


class TestDiscovery:

    def test_default_python_workflow(self, cli_runner, make_launcher):
        launcher = make_launcher()
        with cli_runner.isolated_filesystem():
            with open("ciborium_workflow.py", "w") as f:
                f.write(WORKFLOW)
            with patch("ciborium.runner.Launcher", return_value=launcher):
                result = cli_runner.invoke(cli, ["run"])
        assert result.exit_code == 0, result.output
        assert "workflow=ciborium_workflow.py" in result.output

    def test_default_json_workflow(self, cli_runner, make_launcher):
        launcher = make_launcher()
        with cli_runner.isolated_filesystem():
            with open("ciborium_workflow.json", "w") as f:
                json.dump({"jobs": [{"name": "pull", "steps": [
                    {"name": "Pull", "kind": "docker_pull", "data": {"image": "busybox"}},
                ]}]}, f)
            with patch("ciborium.runner.Launcher", return_value=launcher):
                result = cli_runner.invoke(cli, ["run"])
        assert result.exit_code == 0, result.output
        assert launcher.calls[0]["cmds"] == ["docker", "pull", "busybox"]

    def test_no_workflow(self, cli_runner):
        with cli_runner.isolated_filesystem():
            result = cli_runner.invoke(cli, ["run"])
        assert result.exit_code == 1
        assert "ciborium_workflow.py, ciborium_workflow.json" in result.output
