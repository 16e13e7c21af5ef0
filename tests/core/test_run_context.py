"""Tests for wpexport.core.context - RunContext."""

from __future__ import annotations

from datetime import datetime

import pytest

from wpexport.core.context import new_run_context
from wpexport.execution.channels import StubChannel


class TestRunContext:
    def test_defaults_from_settings(self, make_settings):
        settings = make_settings()
        ctx = new_run_context(settings, StubChannel())
        assert ctx.base_domain == "example.org"
        assert len(ctx.run_id) == 12
        assert ctx.scratch_dir is None

    def test_output_dir_uses_timestamp(self, make_settings, tmp_path):
        ctx = new_run_context(make_settings(), StubChannel(), started_at=datetime(2024, 5, 6, 7, 8, 9))
        assert ctx.output_dirname == "export_wp_posts_20240506_070809"
        assert ctx.output_dir == tmp_path / "out" / "export_wp_posts_20240506_070809"

    def test_base_domain_override(self, make_settings):
        ctx = new_run_context(make_settings(), StubChannel(), base_domain="staging.example.org")
        assert ctx.base_domain == "staging.example.org"

    def test_scratch_path_requires_allocation(self, make_settings, tmp_path):
        ctx = new_run_context(make_settings(), StubChannel())
        with pytest.raises(RuntimeError):
            ctx.scratch_path("x.csv")
        ctx.scratch_dir = tmp_path
        assert ctx.scratch_path("x.csv") == tmp_path / "x.csv"
