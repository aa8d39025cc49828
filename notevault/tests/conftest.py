"""Shared pytest fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pydantic_ai.models.test import TestModel

from notevault.config import Settings
from notevault.dependencies import OperationDependencies
from notevault.generation import TextGenerator
from notevault.main import create_app
from notevault.vault import Vault


@pytest.fixture
def vault_path(tmp_path: Path) -> Path:
    """Create an empty temporary vault directory."""
    vault = tmp_path / "vault"
    vault.mkdir()
    return vault


@pytest.fixture
def vault(vault_path: Path) -> Vault:
    """Create a Vault over the temporary directory."""
    return Vault(root=vault_path)


@pytest.fixture
def sample_vault(vault_path: Path) -> Path:
    """Populate the vault with a few notes in different folders."""
    (vault_path / "Work").mkdir()
    (vault_path / "Personal").mkdir()
    (vault_path / "Work" / "Planning.md").write_text("Review the #project plan", encoding="utf-8")
    (vault_path / "Personal" / "Shopping.md").write_text("Buy milk", encoding="utf-8")
    (vault_path / "Work" / "Standup.md").write_text(
        "---\ntags:\n  - work\n  - meeting\n---\nDaily standup about the API project\n",
        encoding="utf-8",
    )
    return vault_path


@pytest.fixture
def make_generator() -> Callable[[str], TextGenerator]:
    """Factory for generators whose model always answers with fixed text."""

    def _make(text: str = "Generated text") -> TextGenerator:
        return TextGenerator(model=TestModel(custom_output_text=text))

    return _make


@pytest.fixture
def generator(make_generator: Callable[[str], TextGenerator]) -> TextGenerator:
    """Generator answering 'Generated text'."""
    return make_generator("Generated text")


@pytest.fixture
def deps(vault: Vault, generator: TextGenerator) -> OperationDependencies:
    """Create OperationDependencies with the temporary vault."""
    return OperationDependencies(vault=vault, generator=generator, trace_id="test-123")


@pytest.fixture
def settings(vault_path: Path) -> Settings:
    """Settings pointing at the temporary vault, ignoring any .env file."""
    return Settings(openai_api_key="sk-test-key", vault_path=vault_path, _env_file=None)


@pytest.fixture
def client(settings: Settings, generator: TextGenerator) -> TestClient:
    """Create a FastAPI test client over the temporary vault."""
    return TestClient(create_app(settings, generator=generator))
