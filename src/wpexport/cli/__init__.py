"""wp-export command line interface."""

from wpexport.cli.app import app

__all__ = ["app"]
