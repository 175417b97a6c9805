"""
Tests for the journal-storybook CLI.
"""

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from core.models import Storybook, StoryPage
from pipeline.run_storybook import app
from pipeline.storybook import StorybookError

runner = CliRunner()


def flat(output: str) -> str:
    """Collapse console line wrapping."""
    return " ".join(output.split())


class TestParseCommand:
    """Tests for the parse command."""

    def test_recognized_terms(self):
        result = runner.invoke(app, ["parse", "anime, happy, a boy with curly hair"])

        assert result.exit_code == 0
        output = flat(result.output)
        assert "anime" in output
        assert "happy" in output
        assert "Character hints: boy curly hair" in output

    def test_nothing_recognized(self):
        result = runner.invoke(app, ["parse", "just do your best"])

        assert result.exit_code == 0
        output = flat(result.output)
        assert "Style: Classic children's storybook style" in output
        assert "Character hints: -" in output


class TestPromptCommand:
    """Tests for the prompt command."""

    def test_prompt(self):
        result = runner.invoke(app, ["prompt", "A dog runs.", "-i", "watercolor"])

        assert result.exit_code == 0
        output = flat(result.output)
        assert "Scene: A dog runs." in output
        assert "watercolor painting" in output

    def test_prompt_with_character(self):
        result = runner.invoke(app, ["prompt", "A dog runs.", "-c", "a boy wearing a red cap"])

        assert result.exit_code == 0
        assert "MUST wear a red cap" in flat(result.output)


class TestGenerateCommand:
    """Tests for the generate command."""

    def test_error_exits_nonzero(self, tmp_path):
        image = tmp_path / "journal.png"
        image.write_bytes(b"png")

        with patch("pipeline.run_storybook.ensure_directories"), \
             patch("pipeline.run_storybook._generate", new=AsyncMock(side_effect=StorybookError("No key"))):
            result = runner.invoke(app, ["generate", str(image), "-o", str(tmp_path)])

        assert result.exit_code == 1
        assert "No key" in result.output

    def test_success_prints_pages(self, tmp_path):
        image = tmp_path / "journal.png"
        image.write_bytes(b"png")
        storybook = Storybook(
            transcription="t",
            story="One.",
            pages=[StoryPage(index=0, sentence="One.", image_url="https://img.example/1.png")],
        )
        html_path = tmp_path / "storybook.html"

        with patch("pipeline.run_storybook.ensure_directories"), \
             patch("pipeline.run_storybook._generate", new=AsyncMock(return_value=(storybook, html_path))):
            result = runner.invoke(app, ["generate", str(image), "-o", str(tmp_path)])

        assert result.exit_code == 0
        assert "Storybook saved to" in flat(result.output)
