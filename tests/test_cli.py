"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from run import app
from social_insights.loaders.langflow_client import MockLangflowClient


runner = CliRunner()


@pytest.fixture
def answer_file(tmp_path):
    path = tmp_path / "answer.md"
    path.write_text(MockLangflowClient.SAMPLE_REPLY)
    return path


class TestExtractCommand:
    """Test the extract command."""

    def test_json_output(self, answer_file):
        """Test printing the record as JSON."""
        result = runner.invoke(app, ["--log-level", "WARNING", "extract", str(answer_file), "-f", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["metrics"]["likes"] == "1245"
        assert data["recommendations"]["hashtags"][0] == "#SummerVibes"

    def test_stdin(self):
        """Test reading the answer from stdin."""
        result = runner.invoke(
            app, ["--log-level", "WARNING", "extract", "-", "-f", "json"], input="Likes: 12,345\n"
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["metrics"]["likes"] == "12345"

    def test_markdown_to_file(self, answer_file, tmp_path):
        """Test saving a markdown report."""
        output = tmp_path / "report.md"
        result = runner.invoke(
            app, ["extract", str(answer_file), "-f", "markdown", "-o", str(output)]
        )

        assert result.exit_code == 0
        assert "**Avg. Likes:** 1245" in output.read_text(encoding="utf-8")

    def test_json_to_file(self, tmp_path):
        """Test saving JSON with non-ASCII text to a file."""
        source = tmp_path / "answer.md"
        source.write_text("### Suggestions\nTiming: après 6pm\nHashtags: #Café #Été", encoding="utf-8")
        output = tmp_path / "record.json"
        result = runner.invoke(app, ["extract", str(source), "-f", "json", "-o", str(output)])

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["recommendations"]["timing"] == "après 6pm"
        assert data["recommendations"]["hashtags"] == ["#Café", "#Été"]

    def test_missing_file(self, tmp_path):
        """Test a missing answer file."""
        result = runner.invoke(app, ["extract", str(tmp_path / "missing.md")])
        assert result.exit_code == 1

    def test_unknown_format(self, answer_file):
        """Test rejecting an unknown output format."""
        result = runner.invoke(app, ["extract", str(answer_file), "-f", "yaml"])
        assert result.exit_code == 1


class TestAskCommand:
    """Test the ask command."""

    def test_mock_answer(self, tmp_path):
        """Test asking offline with the canned reply."""
        result = runner.invoke(
            app, ["ask", "Best day?", "--mock", "--data", str(tmp_path / "none.csv")]
        )

        assert result.exit_code == 0
        assert "1245" in result.stdout
