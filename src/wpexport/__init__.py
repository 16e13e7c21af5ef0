"""
wp-export - WordPress content exporter.

Discovers the exportable post types of a WordPress site through wp-cli,
fetches posts and their custom permalinks (locally or over SSH), merges
them into a validated seven-column CSV, and optionally exports authors
with per-author post counts.

Packages:
    core        errors, settings, records, rejects, CSV helpers
    execution   wp-cli command builder and execution channels
    export      discovery, fetch, reconcile, aggregate, pipeline
    renderers   CSV and XLSX writers
    cli         ``wp-export`` command line
"""

__version__ = "0.1.0"
