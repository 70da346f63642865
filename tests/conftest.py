import os
import textwrap

import pytest


def write_file(path, content):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(textwrap.dedent(content))
    return path


@pytest.fixture
def project_dir(tmp_path):
    """An empty project named 'demo' with the prompt directories in place."""
    project = tmp_path / "demo"
    (project / ".simone" / "prompts" / "partials").mkdir(parents=True)
    return project


@pytest.fixture
def builtin_dir(tmp_path):
    builtin = tmp_path / "builtin"
    (builtin / "partials").mkdir(parents=True)
    return builtin


@pytest.fixture
def project_prompt(project_dir):
    def _write(name, content, suffix=".yaml"):
        return write_file(
            str(project_dir / ".simone" / "prompts" / f"{name}{suffix}"), content
        )

    return _write


@pytest.fixture
def builtin_prompt(builtin_dir):
    def _write(name, content, suffix=".yaml"):
        return write_file(str(builtin_dir / f"{name}{suffix}"), content)

    return _write


@pytest.fixture
def project_partial(project_dir):
    def _write(name, content):
        return write_file(
            str(project_dir / ".simone" / "prompts" / "partials" / f"{name}.j2"),
            content,
        )

    return _write


@pytest.fixture
def builtin_partial(builtin_dir):
    def _write(name, content):
        return write_file(str(builtin_dir / "partials" / f"{name}.j2"), content)

    return _write


@pytest.fixture
def project_config(project_dir):
    def _write(content):
        return write_file(str(project_dir / ".simone" / "project.yaml"), content)

    return _write


@pytest.fixture
def constitution(project_dir):
    def _write(content):
        return write_file(str(project_dir / ".simone" / "constitution.md"), content)

    return _write
