"""Tests for wpexport.execution.commands - wp-cli argument construction."""

from __future__ import annotations

import shlex

import pytest

from wpexport.execution import commands
from wpexport.execution.commands import quote_remote_path


class TestDiscoveryCommands:
    def test_structured(self):
        assert commands.post_type_list_public().args == (
            "post-type", "list", "--field=name", "--public=true", "--format=csv",
        )

    def test_unstructured(self):
        assert commands.post_type_list().args == ("post-type", "list", "--field=name")

    def test_eval_skips_attachment(self):
        cmd = commands.eval_public_post_types()
        assert cmd.args[0] == "eval"
        assert 'get_post_types(array("public"=>true))' in cmd.args[1]
        assert '$t!="attachment"' in cmd.args[1]


class TestRecordCommands:
    def test_primary(self):
        assert str(commands.post_list_primary("page")) == (
            "wp post list --post_type=page --post_status=any "
            "--fields=ID,post_title,post_name,post_date,post_status,post_type --format=csv"
        )

    def test_override(self):
        assert str(commands.post_list_overrides("post")) == (
            "wp post list --post_type=post --post_status=any "
            "--fields=ID,custom_permalink --meta_key=custom_permalink --format=csv"
        )

    def test_user_list(self):
        assert "--fields=ID,user_login,user_email,first_name,last_name,display_name,roles" in commands.user_list().args

    def test_author_count(self):
        cmd = commands.post_count_for_author(["post", "page"], 12)
        assert "--post_type=post,page" in cmd.args
        assert "--author=12" in cmd.args
        assert "--format=count" in cmd.args


class TestArgv:
    def test_local_argv(self):
        argv = commands.post_type_list().to_argv("wp", wp_path="/srv/www", allow_root=True)
        assert argv == ["wp", "post-type", "list", "--field=name", "--path=/srv/www", "--allow-root"]

    def test_local_argv_without_path(self):
        assert commands.post_type_list().to_argv("/usr/local/bin/wp")[0] == "/usr/local/bin/wp"

    def test_remote_line_round_trips_through_shell(self):
        line = commands.eval_public_post_types().to_remote_line("wp", wp_path="/htdocs")
        assert line.startswith("cd /htdocs && ")
        tokens = shlex.split(line.split(" && ", 1)[1])
        assert tokens == ["wp", *commands.eval_public_post_types().args]

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/htdocs", "/htdocs"),
            ("~/public_html", "~/public_html"),
            ("~", "~"),
            ("/sites/my site", "'/sites/my site'"),
            ("~/my site", "~/'my site'"),
        ],
    )
    def test_quote_remote_path(self, path, expected):
        assert quote_remote_path(path) == expected
