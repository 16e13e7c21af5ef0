"""
Shared pytest fixtures and configuration for wp-export tests.

This module provides:
- Environment isolation (no WPEXPORT_* leakage from the developer shell)
- Log context cleanup between tests
- A scripted stub site: three post types, one custom permalink, one author
- Settings and run-context factories rooted in ``tmp_path``

Usage:
    def test_something(site_channel, make_context):
        ctx = make_context(site_channel)
        ...
"""

import sys
from pathlib import Path

import pytest

# Ensure wpexport package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from wpexport.core.context import RunContext, new_run_context
from wpexport.core.settings import ExportSettings
from wpexport.execution.channels import StubChannel
from wpexport.framework.logging import clear_context


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path) or "pipeline" in test_path.name:
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Drop WPEXPORT_* variables and run from an empty directory (no stray .env)."""
    import os

    for key in list(os.environ):
        if key.startswith("WPEXPORT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture(autouse=True)
def clean_log_context():
    clear_context()
    yield
    clear_context()


# =============================================================================
# Stub Site
# =============================================================================

PRIMARY_HEADER = "ID,post_title,post_name,post_date,post_status,post_type\n"
OVERRIDE_HEADER = "ID,custom_permalink\n"
USER_HEADER = "ID,user_login,user_email,first_name,last_name,display_name,roles\n"


def primary_key(category: str) -> str:
    return f"--post_type={category} --post_status=any --fields=ID,post_title"


def override_key(category: str) -> str:
    return f"--post_type={category} --post_status=any --fields=ID,custom_permalink"


def site_responses() -> dict:
    """A small site: posts 1-2, page 3, an empty case_study type, one permalink, one author."""
    return {
        "post-type list --field=name --public=true": "post\npage\ncase_study\n",
        primary_key("post"): PRIMARY_HEADER
        + '1,"Hello, World",hello-world,2024-01-01 10:00:00,publish,post\n'
        + "2,Second Post,second-post,2024-01-02 10:00:00,draft,post\n",
        primary_key("page"): PRIMARY_HEADER + "3,About,about,2024-01-03 10:00:00,publish,page\n",
        primary_key("case_study"): PRIMARY_HEADER,
        override_key("post"): OVERRIDE_HEADER + "1,blog/hello-world\n",
        override_key("page"): OVERRIDE_HEADER,
        override_key("case_study"): OVERRIDE_HEADER,
        "user list": USER_HEADER + "1,admin,admin@example.com,Ada,Lovelace,Ada L,administrator\n",
        "--author=1 --format=count": "3\n",
    }


@pytest.fixture
def site_channel() -> StubChannel:
    return StubChannel(site_responses())


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides) -> ExportSettings:
        values = {"output_dir": tmp_path / "out", "base_domain": "example.org"}
        values.update(overrides)
        return ExportSettings(**values)

    return _make


@pytest.fixture
def make_context(make_settings):
    def _make(channel, **overrides) -> RunContext:
        return new_run_context(make_settings(**overrides), channel)

    return _make
