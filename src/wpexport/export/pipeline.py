"""
Export pipeline - discovery, fetch, reconcile, aggregate, render, promote.

.. code-block:: text

    ExportPipeline.run()
      ├── scratch dir   <output_dir>/.wpexport-<run_id>-*/
      ├── discovery     → categories (never empty; NoCategoriesError guard)
      ├── fetch         → primary + override accumulators (NoRecordsError if 0 rows)
      ├── reconcile     → merged CSV, streamed (NoMergedRowsError if 0 rows)
      ├── aggregate     → authors CSV (optional)
      ├── render        → XLSX workbook (optional, failure is a warning)
      ├── promote       → outputs staged in scratch, one os.replace to export_wp_posts_<timestamp>/
      └── finally       → scratch removed, summary completed

A fatal condition or an interrupt promotes nothing.  Everything else is a
warning on the summary and the run still exits 0.

Tags:
    pipeline, controller, export, wp-export
"""

from __future__ import annotations

import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path

from wpexport.core.context import RunContext
from wpexport.core.errors import ExitCode, FatalRunError, NoCategoriesError, NoMergedRowsError, NoRecordsError
from wpexport.core.rejects import RejectTally
from wpexport.export.aggregator import Aggregator
from wpexport.export.discovery import CategoryDiscovery
from wpexport.export.fetcher import FetchReport, RecordFetcher
from wpexport.export.reconcile import ReconciliationEngine
from wpexport.export.summary import RunSummary
from wpexport.framework.logging import clear_context, get_logger, log_step, set_context
from wpexport.framework.pipelines import Pipeline, PipelineStatus
from wpexport.renderers import read_merged, render_workbook, write_authors, write_merged

logger = get_logger(__name__)

PRIMARY_ACCUMULATOR = "export_all_posts.csv"
OVERRIDE_ACCUMULATOR = "export_custom_permalinks.csv"
USERS_FILE = "export_users_with_post_counts.csv"
PROMOTE_DIR = "promote"


class ExportPipeline(Pipeline):
    """Run one export against the context's channel."""

    name = "export"
    description = "Export WordPress posts, custom permalinks and authors"

    def __init__(self, context: RunContext, discovery: CategoryDiscovery | None = None) -> None:
        super().__init__(context)
        settings = context.settings
        self.discovery = discovery or CategoryDiscovery(
            extra_categories=settings.extra_categories,
            skip_discovery=settings.skip_discovery,
        )

    def run(self) -> RunSummary:
        ctx = self.context
        channel = ctx.channel
        summary = RunSummary(
            status=PipelineStatus.RUNNING,
            started_at=datetime.now(),
            run_id=ctx.run_id,
            channel=channel.describe(),
        )
        set_context(run_id=ctx.run_id, channel=channel.kind)

        output_parent = Path(ctx.settings.output_dir)
        output_parent.mkdir(parents=True, exist_ok=True)
        ctx.scratch_dir = Path(tempfile.mkdtemp(prefix=f".wpexport-{ctx.run_id}-", dir=output_parent))
        logger.info("pipeline.start", channel=channel.describe(), scratch=str(ctx.scratch_dir))

        try:
            self._execute(summary)
            summary.status = PipelineStatus.COMPLETED
        except FatalRunError as exc:
            logger.error("pipeline.fatal", error=exc.message, exit_code=int(exc.exit_code))
            summary.fail(exc.message, exc.exit_code)
        except KeyboardInterrupt:
            logger.warning("pipeline.interrupted")
            summary.fail("interrupted", ExitCode.INTERRUPTED)
            summary.status = PipelineStatus.CANCELLED
        except Exception as exc:
            logger.exception("pipeline.error", error=str(exc))
            summary.fail(f"{type(exc).__name__}: {exc}", ExitCode.ERROR)
        finally:
            shutil.rmtree(ctx.scratch_dir, ignore_errors=True)
            ctx.scratch_dir = None
            summary.degraded = channel.degraded
            summary.completed_at = datetime.now()
            logger.info(
                "pipeline.end",
                status=summary.status.value,
                exit_code=int(summary.exit_code),
                rows_emitted=summary.rows_emitted,
                duration_seconds=summary.duration_seconds,
            )
            clear_context()

        return summary

    # ── Stages ───────────────────────────────────────────────────

    def _execute(self, summary: RunSummary) -> None:
        ctx = self.context
        settings = ctx.settings
        channel = ctx.channel

        with log_step("discovery") as timer:
            discovered = self.discovery.discover(channel)
            timer.add_metric("strategy", discovered.strategy)
            timer.add_metric("categories", len(discovered.categories))
        if not discovered.categories:
            raise NoCategoriesError()
        categories = discovered.categories
        summary.categories = categories
        summary.discovery_strategy = discovered.strategy
        if discovered.used_baseline:
            summary.warn("category discovery exhausted; using baseline post types")

        primary_path = ctx.scratch_path(PRIMARY_ACCUMULATOR)
        override_path = ctx.scratch_path(OVERRIDE_ACCUMULATOR)
        with log_step("fetch", categories=len(categories)) as timer:
            report = RecordFetcher(channel, primary_path, override_path).fetch_all(categories)
            timer.add_metric("primary_rows", report.primary_rows)
            timer.add_metric("override_rows", report.override_rows)
        self._record_fetch(summary, report)
        if report.primary_rows == 0:
            raise NoRecordsError()

        tally = RejectTally()
        merged_path = ctx.scratch_path(f"{ctx.output_dirname}.csv")
        engine = ReconciliationEngine(primary_path, override_path, tally)
        with log_step("reconcile") as timer:
            written = write_merged(engine.iter_rows(), merged_path)
            timer.add_metric("rows_emitted", written)
        stats = engine.stats
        summary.override_entries = stats.override_entries
        summary.rows_merged = stats.rows_merged
        summary.rows_emitted = written
        summary.rows_dropped = stats.rows_dropped
        summary.duplicates = stats.duplicates
        summary.metrics["reconcile"] = stats.to_dict()
        if stats.rows_dropped:
            summary.warn(f"{stats.rows_dropped} row(s) dropped by validation")
        if written == 0:
            summary.rejects_by_reason = tally.by_reason()
            raise NoMergedRowsError()

        outputs: dict[str, Path] = {"merged_csv": merged_path}

        if settings.export_users:
            with log_step("aggregate") as timer:
                aggregate = Aggregator(channel, tally).aggregate(categories)
                timer.add_metric("authors", aggregate.author_count)
            summary.users_exported = aggregate.fetched
            summary.authors_exported = aggregate.author_count
            summary.author_counts_available = aggregate.counts_available
            if aggregate.fetched:
                users_path = ctx.scratch_path(USERS_FILE)
                write_authors(aggregate.authors, users_path)
                outputs["users_csv"] = users_path
            else:
                summary.warn("author export failed")
            if aggregate.fetched and not aggregate.counts_available:
                summary.warn(f"author record counts unavailable: {aggregate.unavailable_reason}")

        if settings.write_xlsx:
            xlsx_path = ctx.scratch_path(f"{ctx.output_dirname}.xlsx")
            try:
                with log_step("render") as timer:
                    timer.add_metric("rows", render_workbook(read_merged(merged_path), xlsx_path, ctx.base_domain))
                outputs["xlsx"] = xlsx_path
            except Exception as exc:
                logger.warning("render.xlsx.failed", error=str(exc))
                summary.warn(f"workbook not written: {exc}")

        if settings.keep_intermediate:
            outputs["primary_accumulator"] = primary_path
            outputs["override_accumulator"] = override_path

        summary.rejects_by_reason = tally.by_reason()
        if channel.degraded:
            summary.warn("execution channel degraded during the run; some streams may be incomplete")

        self._promote(summary, outputs)

    def _record_fetch(self, summary: RunSummary, report: FetchReport) -> None:
        summary.primary_records = report.primary_rows
        summary.metrics["rows_by_category"] = report.rows_by_category()
        summary.failed_categories = report.failed_categories
        for category in report.failed_categories:
            summary.warn(f"fetch failed for category '{category}'")
        for category in report.empty_categories:
            summary.warn(f"no records for category '{category}'")

    def _promote(self, summary: RunSummary, outputs: dict[str, Path]) -> None:
        """Stage finished outputs in scratch, then rename the directory into place.

        The run directory either appears complete or not at all.  Scratch
        lives under the output directory, so the rename never crosses a
        filesystem.
        """
        staged = self.context.scratch_path(PROMOTE_DIR)
        staged.mkdir()
        for source in outputs.values():
            os.replace(source, staged / source.name)

        final_dir = self.context.output_dir
        if final_dir.exists():
            final_dir = final_dir.with_name(f"{final_dir.name}_{self.context.run_id[:6]}")
        os.replace(staged, final_dir)

        promoted = {name: final_dir / source.name for name, source in outputs.items()}
        summary.output_dir = final_dir
        summary.outputs = promoted
        logger.info("pipeline.promoted", output_dir=str(final_dir), files=len(promoted))
