"""
wp-export framework - application infrastructure shared by the export stages.

This module provides:
- Structured logging with run context (``wpexport.framework.logging``)
- Pipeline base classes (``wpexport.framework.pipelines``)
"""
