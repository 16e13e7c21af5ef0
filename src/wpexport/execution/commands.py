"""
wp-cli command builder.

Every backend interaction is one ``WpCommand``: the wp-cli arguments plus a
short label for logs.  Channels turn a command into an argv (local) or a
remote shell line (ssh); nothing else in the package assembles wp-cli
arguments by hand.

Examples:
    >>> cmd = post_list_primary("page")
    >>> cmd.args[:2]
    ('post', 'list')
    >>> cmd.to_argv("wp", wp_path="/srv/www")[-1]
    '--path=/srv/www'

Tags:
    wp-cli, commands, wp-export
"""

from __future__ import annotations

import shlex
from collections.abc import Iterable
from dataclasses import dataclass

from wpexport.core.models import AUTHOR_FIELDS, PRIMARY_FIELDS

OVERRIDE_META_KEY = "custom_permalink"

# Server-side listing of public post types without the attachment type.
PUBLIC_POST_TYPES_PHP = (
    'foreach(get_post_types(array("public"=>true)) as $t) '
    'if($t!="attachment") echo $t."\\n";'
)


@dataclass(frozen=True)
class WpCommand:
    """A single wp-cli invocation."""

    args: tuple[str, ...]
    label: str

    def to_argv(self, binary: str = "wp", *, wp_path: str | None = None, allow_root: bool = False) -> list[str]:
        """Argument vector for a local subprocess."""
        argv = [binary, *self.args]
        if wp_path:
            argv.append(f"--path={wp_path}")
        if allow_root:
            argv.append("--allow-root")
        return argv

    def to_remote_line(self, binary: str = "wp", *, wp_path: str | None = None, allow_root: bool = False) -> str:
        """Shell line run by the remote login shell: ``cd <path> && wp ...``."""
        parts = [shlex.quote(binary), *(shlex.quote(a) for a in self.args)]
        if allow_root:
            parts.append("--allow-root")
        line = " ".join(parts)
        if wp_path:
            line = f"cd {quote_remote_path(wp_path)} && {line}"
        return line

    def __str__(self) -> str:
        return " ".join(("wp", *self.args))


def quote_remote_path(path: str) -> str:
    """Quote a remote path, leaving a leading ``~/`` unquoted so the remote shell expands it."""
    if path == "~":
        return "~"
    if path.startswith("~/"):
        rest = path[2:]
        return "~/" + shlex.quote(rest) if rest else "~/"
    return shlex.quote(path)


# ── Discovery ────────────────────────────────────────────────────


def post_type_list_public() -> WpCommand:
    return WpCommand(
        args=("post-type", "list", "--field=name", "--public=true", "--format=csv"),
        label="post-type.list.public",
    )


def post_type_list() -> WpCommand:
    return WpCommand(args=("post-type", "list", "--field=name"), label="post-type.list")


def eval_public_post_types() -> WpCommand:
    return WpCommand(args=("eval", PUBLIC_POST_TYPES_PHP), label="eval.post-types")


# ── Records ──────────────────────────────────────────────────────


def post_list_primary(category: str) -> WpCommand:
    return WpCommand(
        args=(
            "post",
            "list",
            f"--post_type={category}",
            "--post_status=any",
            f"--fields={','.join(PRIMARY_FIELDS)}",
            "--format=csv",
        ),
        label="post.list.primary",
    )


def post_list_overrides(category: str) -> WpCommand:
    return WpCommand(
        args=(
            "post",
            "list",
            f"--post_type={category}",
            "--post_status=any",
            f"--fields=ID,{OVERRIDE_META_KEY}",
            f"--meta_key={OVERRIDE_META_KEY}",
            "--format=csv",
        ),
        label="post.list.override",
    )


# ── Authors ──────────────────────────────────────────────────────


def user_list() -> WpCommand:
    return WpCommand(
        args=("user", "list", f"--fields={','.join(AUTHOR_FIELDS)}", "--format=csv"),
        label="user.list",
    )


def post_count_for_author(categories: Iterable[str], author_id: int) -> WpCommand:
    return WpCommand(
        args=(
            "post",
            "list",
            f"--post_type={','.join(categories)}",
            "--post_status=any",
            f"--author={author_id}",
            "--format=count",
        ),
        label="post.count.author",
    )
