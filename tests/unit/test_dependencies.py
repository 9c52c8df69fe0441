"""
Tests that pyproject.toml exists and is valid TOML with required structure.
"""
from pathlib import Path
import tomllib


REPO_ROOT = Path(__file__).parent.parent.parent
REQUIRED_PACKAGES = ["anthropic", "pydantic", "PyYAML", "tiktoken"]


def _load_pyproject() -> dict:
    return tomllib.loads((REPO_ROOT / "pyproject.toml").read_text(encoding="utf-8"))


def test_pyproject_toml_exists() -> None:
    assert (REPO_ROOT / "pyproject.toml").exists(), "pyproject.toml must exist"


def test_pyproject_requires_python_311() -> None:
    requires = _load_pyproject()["project"].get("requires-python", "")
    assert "3.11" in requires, (
        f"pyproject.toml must require Python 3.11+, got: {requires!r}"
    )


def test_runtime_dependencies_declared() -> None:
    dependencies = " ".join(_load_pyproject()["project"]["dependencies"])
    for pkg in REQUIRED_PACKAGES:
        assert pkg in dependencies, f"Required package missing from pyproject.toml: {pkg}"


def test_pyproject_has_pytest_config() -> None:
    tool = _load_pyproject().get("tool", {})
    assert "ini_options" in tool.get("pytest", {}), (
        "pyproject.toml must contain [tool.pytest.ini_options]"
    )
