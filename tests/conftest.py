"""Shared pytest fixtures for acd-batch tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from acd_batch.config import BatchConfig

SERVICE_URL = "https://acd.example.test/api/v1/analyze?flow=wh_acd.ibm_clinical_insights"


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Return an empty input directory."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Return a (not yet created) output directory."""
    return tmp_path / "output"


@pytest.fixture
def batch_config(data_dir: Path, output_dir: Path) -> BatchConfig:
    """Config pointing at temporary directories with retry delays disabled."""
    return BatchConfig(
        data_dir=data_dir,
        output_dir=output_dir,
        url=SERVICE_URL,
        retry_delay_seconds=0.0,
    )


@pytest.fixture
def annotation_body() -> dict[str, Any]:
    """Service response for the text 'Patient has severe chest pain today.'"""
    return {
        "unstructured": [
            {
                "text": "Patient has severe chest pain today.",
                "data": {
                    "SymptomDiseaseInd": [
                        {
                            "type": "aci.SymptomDiseaseInd",
                            "begin": 19,
                            "end": 29,
                            "coveredText": "chest pain",
                        }
                    ],
                    "concepts": [
                        {"type": "umls.SignOrSymptom", "begin": 19, "end": 29},
                    ],
                },
            }
        ]
    }


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """Factory for mocked httpx responses.

    Usage:
        response = make_response(200, {"unstructured": [...]})
    """

    def _make(status_code: int, body: Any = None, text: str | None = None) -> MagicMock:
        if text is None:
            text = json.dumps(body) if body is not None else ""
        return MagicMock(
            status_code=status_code,
            text=text,
            headers={"content-type": "application/json"},
            json=lambda: json.loads(text),
        )

    return _make


@pytest.fixture
def mock_http() -> Iterator[AsyncMock]:
    """Patch httpx.AsyncClient and yield the client whose ``post`` is called."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client_class.return_value.__aenter__.return_value = mock_client
        yield mock_client
