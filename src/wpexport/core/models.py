"""
Record types that flow through an export run.

All records are transient: parsed from a wp-cli stream, held for the length
of one merge, then emitted and discarded.

Manifesto:
    The merged dataset has a fixed shape of seven columns in a fixed order.
    Keeping that shape in one place (``MERGED_COLUMNS``) means the
    reconciliation engine, the validation pass and every renderer agree on
    it without passing it around.

Tags:
    wp-export, models, dataclass, records

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

# Column order of the primary stream requested from wp-cli.
PRIMARY_FIELDS: Final[tuple[str, ...]] = (
    "ID",
    "post_title",
    "post_name",
    "post_date",
    "post_status",
    "post_type",
)

OVERRIDE_FIELDS: Final[tuple[str, ...]] = ("ID", "custom_permalink")

MERGED_COLUMNS: Final[tuple[str, ...]] = (
    "ID",
    "post_title",
    "post_name",
    "custom_permalink",
    "post_date",
    "post_status",
    "post_type",
)

AUTHOR_FIELDS: Final[tuple[str, ...]] = (
    "ID",
    "user_login",
    "user_email",
    "first_name",
    "last_name",
    "display_name",
    "roles",
)

AUTHOR_COLUMNS: Final[tuple[str, ...]] = AUTHOR_FIELDS + ("post_count",)


class _Unavailable:
    """Sentinel for a record count the channel could not provide."""

    _instance: _Unavailable | None = None

    def __new__(cls) -> _Unavailable:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNAVAILABLE"

    def __str__(self) -> str:
        return "N/A"

    def __bool__(self) -> bool:
        return False


UNAVAILABLE: Final = _Unavailable()


@dataclass(frozen=True)
class ContentRecord:
    """One row of the primary stream."""

    id: int
    title: str
    slug: str
    date: str
    status: str
    category: str


@dataclass(frozen=True)
class OverrideRecord:
    """A replacement path for a content record."""

    id: int
    override_path: str


@dataclass(frozen=True)
class MergedRow:
    """
    A content record joined with its override path.

    ``values()`` yields exactly ``len(MERGED_COLUMNS)`` strings in column
    order.
    """

    id: int
    title: str
    slug: str
    override_path: str
    date: str
    status: str
    category: str

    @classmethod
    def join(cls, record: ContentRecord, override: OverrideRecord | None = None) -> MergedRow:
        return cls(
            id=record.id,
            title=record.title,
            slug=record.slug,
            override_path=override.override_path if override else "",
            date=record.date,
            status=record.status,
            category=record.category,
        )

    def values(self) -> tuple[str, ...]:
        return (
            str(self.id),
            self.title,
            self.slug,
            self.override_path,
            self.date,
            self.status,
            self.category,
        )

    def to_dict(self) -> dict[str, str]:
        return dict(zip(MERGED_COLUMNS, self.values()))


@dataclass
class AuthorRecord:
    """A WordPress user plus the number of records they authored."""

    id: int
    login: str
    email: str
    first_name: str
    last_name: str
    display_name: str
    roles: str
    record_count: int | _Unavailable = UNAVAILABLE

    @property
    def has_count(self) -> bool:
        return self.record_count is not UNAVAILABLE

    def values(self) -> tuple[str, ...]:
        return (
            str(self.id),
            self.login,
            self.email,
            self.first_name,
            self.last_name,
            self.display_name,
            self.roles,
            str(self.record_count),
        )
