"""Tests for veritune CLI commands and reporting."""

from datetime import timedelta

from rich.console import Console
from typer.testing import CliRunner

from veritune.cli.main import app
from veritune.models import TerminationReason
from veritune.report import ConsoleProgressReporter, load_history, render_history, save_history

runner = CliRunner()


class TestInitCommand:
    """Tests for veritune init command."""

    def test_init_creates_directory(self, temp_dir):
        """Test that init creates .veritune directory."""
        result = runner.invoke(app, ["init", str(temp_dir)])

        assert result.exit_code == 0
        assert (temp_dir / ".veritune").exists()
        assert (temp_dir / ".veritune" / "config.yaml").exists()

    def test_init_already_initialized(self, veritune_project):
        """Test init when already initialized."""
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "Already initialized" in result.stdout


class TestThresholdCommand:
    """Tests for veritune threshold command."""

    def test_threshold(self, veritune_project):
        """Test derived minimum pass rate output."""
        result = runner.invoke(app, ["threshold", "--samples", "100", "--successes", "85"])

        assert result.exit_code == 0
        assert "0.7800" in result.stdout
        assert "0.8500" in result.stdout

    def test_threshold_invalid(self, veritune_project):
        """Test that impossible counts are an error."""
        result = runner.invoke(app, ["threshold", "--samples", "10", "--successes", "11"])

        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestShowCommand:
    """Tests for veritune show command."""

    def test_show_saved_history(self, veritune_project, make_history):
        """Test rendering a saved history."""
        history = make_history([0.5, 0.8, 0.7])
        history = history.finalize(
            history.start_time + timedelta(seconds=3), TerminationReason.max_iterations(3)
        )
        path = save_history(history, veritune_project / "runs" / "run.json")

        result = runner.invoke(app, ["show", str(path)])

        assert result.exit_code == 0
        assert "summarize" in result.stdout
        assert "0.8000" in result.stdout
        assert "Reached maximum iterations" in result.stdout

    def test_show_missing_file(self, veritune_project):
        """Test show with a missing file."""
        result = runner.invoke(app, ["show", "nope.json"])

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_show_invalid_file(self, veritune_project):
        """Test show with a file that is not a history."""
        path = veritune_project / "bad.json"
        path.write_text('{"use_case_id": 3}')

        result = runner.invoke(app, ["show", str(path)])

        assert result.exit_code == 1
        assert "Invalid history file" in result.stdout


class TestReport:
    """Tests for reporting helpers."""

    def test_save_and_load(self, temp_dir, make_history):
        """Test the JSON snapshot round trip."""
        history = make_history([0.4, 0.6])
        path = save_history(history, temp_dir / "nested" / "history.json")

        restored = load_history(path)

        assert restored.iteration_count == 2
        assert restored.best_factor_value == 1.0

    def test_progress_reporter(self, make_history):
        """Test one line per iteration."""
        console = Console(record=True, width=120)
        reporter = ConsoleProgressReporter(console)

        for record in make_history([0.25, 0.5]).iterations:
            reporter(record)

        text = console.export_text()
        assert "#0" in text
        assert "score=0.5000" in text

    def test_render_history_without_iterations(self, make_history):
        """Test rendering an empty history."""
        console = Console(record=True, width=120)

        render_history(make_history([]), console)

        assert "No iterations recorded" in console.export_text()
