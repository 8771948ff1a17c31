"""Integration tests for full CLI flow.

Tests complete CLI workflows: translating a file, validating the output
and inspecting the dictionaries the translation relied on.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from puretrans.cli.main import app

runner = CliRunner()


@pytest.fixture
def legal_text_file(tmp_path: Path) -> Path:
    """Arabic legal text polluted with interface artifacts."""
    path = tmp_path / "source.txt"
    path.write_text("بموجب المادة 5 من القانون المدني Pro V2 [object Object]", encoding="utf-8")
    return path


@pytest.mark.integration
class TestCLIIntegrationFlow:
    """Test complete CLI workflows."""

    def test_translate_then_validate(self, legal_text_file: Path, tmp_path: Path) -> None:
        """Test a translated file passes validation in the target language."""
        output = tmp_path / "translation.txt"

        translated = runner.invoke(
            app,
            ["translate", f"@{legal_text_file}", "-s", "ar", "-t", "fr", "-o", str(output)],
        )

        assert (
            translated.exit_code == 0
        ), f"Expected success, got exit_code={translated.exit_code}, output: {translated.stdout}"
        assert output.exists(), "Translation file should be created"
        text = output.read_text(encoding="utf-8")
        for artifact in ("Pro", "V2", "[object Object]"):
            assert artifact not in text

        validated = runner.invoke(app, ["validate", f"@{output}", "--lang", "fr", "--json"])

        assert validated.exit_code == 0, validated.stdout
        payload = json.loads(validated.stdout)
        assert payload["purity"]["score"]["overall"] == 100.0
        assert payload["purity"]["violations"] == []

    def test_json_result_structure(self, legal_text_file: Path) -> None:
        """Test the JSON result carries purity, quality and metadata."""
        result = runner.invoke(
            app, ["translate", f"@{legal_text_file}", "-s", "ar", "-t", "fr", "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["purity_score"] == 100.0
        assert set(data["quality_metrics"]) >= {
            "purity_score",
            "terminology_accuracy",
            "readability_score",
        }
        assert data["metadata"]["attempts"] >= 0
        assert any("contaminating" in w for w in data["warnings"])

    def test_export_and_search_agree(self, tmp_path: Path) -> None:
        """Test exported terms are found by search."""
        output = tmp_path / "family.json"

        exported = runner.invoke(app, ["terms", "export", "family", "-o", str(output)])
        assert exported.exit_code == 0

        entries = json.loads(output.read_text(encoding="utf-8"))["entries"]
        assert entries, "Family dictionary should not be empty"

        searched = runner.invoke(
            app, ["terms", "search", entries[0]["french"], "--domain", "family"]
        )
        assert searched.exit_code == 0
        assert "No terms found" not in searched.stdout
