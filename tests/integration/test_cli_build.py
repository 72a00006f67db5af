"""
Integration tests for ``kiln build`` and ``kiln status``.

Each test writes a kiln.toml into tmp_path and drives the CLI through
Click's CliRunner with ``-C tmp_path``.
"""

import pytest

from kiln.cli import cli
from kiln.graph.fingerprint import touch
from kiln.graph.graph import BuildGraph

pytestmark = pytest.mark.integration

BUILDFILE = """
default = ["app"]

[targets.app]
inputs = ["main.o", "util.o"]
command = "cat {inputs} > {target}"

[targets."main.o"]
inputs = ["main.c"]
command = "cp {input} {target}"

[targets."util.o"]
inputs = ["util.c"]
command = "cp {input} {target}"

[targets.docs]
inputs = ["README"]
command = "cp {input} {target}"
"""


@pytest.fixture
def project(tmp_path, make_file):
    """A small C-like project whose sources predate any build output."""
    (tmp_path / "kiln.toml").write_text(BUILDFILE)
    make_file("main.c", "main\n")
    make_file("util.c", "util\n")
    make_file("README", "readme\n")
    return tmp_path


def run(runner, project, *args):
    return runner.invoke(cli, ["-C", str(project), *args])


class TestBuildCommand:
    """kiln build."""

    def test_builds_default_targets(self, runner, project):
        result = run(runner, project, "build")

        assert result.exit_code == 0, result.output
        assert (project / "app").read_text() == "main\nutil\n"
        assert not (project / "docs").exists()
        assert "[OK] app" in result.output
        assert "[OK] main.o" in result.output
        assert "Rebuilt 3 target(s)" in result.output

    def test_second_build_is_noop(self, runner, project):
        run(runner, project, "build")

        result = run(runner, project, "build")

        assert result.exit_code == 0, result.output
        assert "Everything is up to date." in result.output
        assert "[OK]" not in result.output

    def test_rebuilds_after_source_change(self, runner, project):
        run(runner, project, "build")
        (project / "util.c").write_text("util v2\n")
        touch(project / "util.c")

        result = run(runner, project, "build")

        assert result.exit_code == 0, result.output
        assert "[OK] util.o" in result.output
        assert "[OK] app" in result.output
        assert "main.o" not in result.output
        assert (project / "app").read_text() == "main\nutil v2\n"

    def test_named_target(self, runner, project):
        result = run(runner, project, "build", "docs")

        assert result.exit_code == 0, result.output
        assert (project / "docs").exists()
        assert not (project / "app").exists()

    @pytest.mark.parametrize("strategy", ["layered", "fixpoint"])
    def test_strategy_and_jobs(self, runner, project, strategy):
        result = run(runner, project, "build", "--strategy", strategy, "-j", "2", "-q")

        assert result.exit_code == 0, result.output
        assert (project / "app").exists()
        assert "[OK]" not in result.output

    def test_failing_command_exits_1(self, runner, project):
        (project / "kiln.toml").write_text(
            BUILDFILE.replace('command = "cat {inputs} > {target}"', 'command = "exit 2"')
        )

        result = run(runner, project, "build")

        assert result.exit_code == 1
        assert "[FAIL] app" in result.output
        assert "Build failed" in result.output
        assert (project / "main.o").exists()

    def test_missing_source_fails(self, runner, project):
        (project / "util.c").unlink()

        result = run(runner, project, "build")

        assert result.exit_code == 1
        assert "util.c" in result.output
        assert not (project / "app").exists()

    def test_unknown_target(self, runner, project):
        result = run(runner, project, "build", "nope")

        assert result.exit_code != 0
        assert "Unknown target" in result.output

    def test_no_buildfile(self, runner, tmp_path):
        result = run(runner, tmp_path, "build")

        assert result.exit_code != 0
        assert "No kiln.toml found" in result.output

    def test_invalid_buildfile(self, runner, tmp_path):
        (tmp_path / "kiln.toml").write_text('[targets.app]\ninputs = ["a"]\n')

        result = run(runner, tmp_path, "build")

        assert result.exit_code != 0
        assert "Invalid buildfile" in result.output

    def test_cycle_is_reported(self, runner, tmp_path):
        (tmp_path / "kiln.toml").write_text(
            '[targets.a]\ninputs = ["b"]\ncommand = "touch {target}"\n\n'
            '[targets.b]\ninputs = ["a"]\ncommand = "touch {target}"\n'
        )

        result = run(runner, tmp_path, "build")

        assert result.exit_code != 0
        assert "cycle" in result.output
        assert not (tmp_path / "a").exists()

    def test_explicit_buildfile_option(self, runner, project):
        (project / "kiln.toml").rename(project / "other.toml")

        result = run(runner, project, "build", "-f", "other.toml")

        assert result.exit_code == 0, result.output
        assert (project / "app").exists()

    def test_missing_report_is_an_error(self, runner, project, monkeypatch):
        monkeypatch.setattr(BuildGraph, "last_report", property(lambda self: None))

        result = run(runner, project, "build")

        assert result.exit_code == 1
        assert "did not produce a report" in result.output


class TestStatusCommand:
    """kiln status."""

    def test_everything_out_of_date(self, runner, project):
        result = run(runner, project, "status")

        assert result.exit_code == 0, result.output
        assert "4 file(s) out of date:" in result.output
        assert "stale" in result.output

    def test_up_to_date_after_build(self, runner, project):
        run(runner, project, "build")
        run(runner, project, "build", "docs")

        result = run(runner, project, "status")

        assert result.exit_code == 0, result.output
        assert "Everything is up to date." in result.output

    def test_downstream_targets_listed(self, runner, project):
        run(runner, project, "build")
        touch(project / "main.c")

        result = run(runner, project, "status", "app")

        assert result.exit_code == 0, result.output
        lines = {line.split()[0]: line.split()[-1] for line in result.output.splitlines()[3:]}
        assert lines == {"main.o": "stale", "app": "downstream"}

    def test_missing_source_listed(self, runner, project):
        (project / "README").unlink()

        result = run(runner, project, "status", "docs")

        assert "missing source" in result.output


class TestCliGroup:
    """Top-level options."""

    def test_help_without_command(self, runner):
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "build" in result.output
        assert "status" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "kiln" in result.output

    def test_verbose_logs_to_stderr(self, runner, project):
        result = run(runner, project, "-v", "build")

        assert result.exit_code == 0, result.output
        assert "Rebuilding" in result.output

    def test_broken_config_file_warns_and_builds(self, runner, project):
        (project / ".kiln").mkdir()
        (project / ".kiln" / "config.toml").write_text("[scheduler\n")

        result = run(runner, project, "build")

        assert result.exit_code == 0, result.output
        assert "Failed to parse config file" in result.output
        assert (project / "app").exists()

    def test_invalid_config_values_warn_and_build(self, runner, project):
        (project / ".kiln").mkdir()
        (project / ".kiln" / "config.toml").write_text('[scheduler]\nstrategy = "bogus"\n')

        result = run(runner, project, "build")

        assert result.exit_code == 0, result.output
        assert "Invalid values in config file" in result.output
        assert "scheduler.strategy" in result.output
        assert (project / "app").exists()

    def test_invalid_env_setting_is_a_clean_error(self, runner, project, monkeypatch):
        monkeypatch.setenv("KILN_SCHEDULER__STRATEGY", "bogus")

        result = run(runner, project, "build")

        assert result.exit_code == 1
        assert "Invalid kiln settings" in result.output
        assert "Traceback" not in result.output


class TestRelativePaths:
    """Paths given relative to the directory kiln is started in."""

    @pytest.fixture
    def workdir(self, project, monkeypatch):
        monkeypatch.chdir(project.parent)
        return project.name

    def test_relative_directory_option(self, runner, project, workdir):
        result = runner.invoke(cli, ["-C", workdir, "build"])

        assert result.exit_code == 0, result.output
        assert (project / "app").read_text() == "main\nutil\n"

    def test_relative_directory_status(self, runner, project, workdir):
        result = runner.invoke(cli, ["-C", workdir, "status", "docs"])

        assert result.exit_code == 0, result.output
        assert "1 file(s) out of date:" in result.output

    def test_relative_buildfile_option(self, runner, project, workdir):
        (project / "kiln.toml").rename(project / "other.toml")

        result = runner.invoke(cli, ["-C", workdir, "build", "-f", "other.toml"])

        assert result.exit_code == 0, result.output
        assert (project / "app").exists()

    def test_relative_buildfile_without_directory_option(self, runner, project, workdir):
        result = runner.invoke(cli, ["build", "-f", f"{workdir}/kiln.toml"])

        assert result.exit_code == 0, result.output
        assert (project / "app").exists()
