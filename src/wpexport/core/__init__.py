"""
Core primitives: errors, settings, record models, rejects, CSV helpers and
the run context.  Nothing here talks to a backend.
"""

from wpexport.core.errors import (
    ChannelError,
    ConfigError,
    ExitCode,
    ExportError,
    FatalRunError,
    NoCategoriesError,
    NoMergedRowsError,
    NoRecordsError,
    ParseError,
)
from wpexport.core.models import (
    MERGED_COLUMNS,
    UNAVAILABLE,
    AuthorRecord,
    ContentRecord,
    MergedRow,
    OverrideRecord,
)
from wpexport.core.rejects import Reject, RejectTally
from wpexport.core.settings import ChannelKind, ExportSettings, get_settings

__all__ = [
    "AuthorRecord",
    "ChannelError",
    "ChannelKind",
    "ConfigError",
    "ContentRecord",
    "ExitCode",
    "ExportError",
    "ExportSettings",
    "FatalRunError",
    "MERGED_COLUMNS",
    "MergedRow",
    "NoCategoriesError",
    "NoMergedRowsError",
    "NoRecordsError",
    "OverrideRecord",
    "ParseError",
    "Reject",
    "RejectTally",
    "UNAVAILABLE",
    "get_settings",
]
