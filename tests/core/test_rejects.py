"""Tests for wpexport.core.rejects - in-memory reject tally."""

from __future__ import annotations

from wpexport.core.rejects import Reject, RejectTally


def _make_reject(**overrides) -> Reject:
    defaults = dict(
        stage="reconcile.primary",
        reason_code="FIELD_COUNT",
        reason_detail="expected >= 6 fields, got 3",
        raw_data="1,foo,bar",
        source_locator="primary",
        line_number=42,
    )
    defaults.update(overrides)
    return Reject(**defaults)


# ── Reject dataclass ─────────────────────────────────────────────────────


class TestReject:
    def test_construction(self):
        r = _make_reject()
        assert r.stage == "reconcile.primary"
        assert r.reason_code == "FIELD_COUNT"
        assert r.line_number == 42

    def test_defaults_are_none(self):
        r = Reject(stage="reconcile.validate", reason_code="BAD", reason_detail="detail")
        assert r.raw_data is None
        assert r.source_locator is None
        assert r.line_number is None


# ── RejectTally ──────────────────────────────────────────────────────────


class TestRejectTally:
    def test_write_single(self):
        tally = RejectTally()
        tally.write(_make_reject())
        assert tally.count == 1

    def test_by_reason_sorted(self):
        tally = RejectTally()
        tally.write(_make_reject(stage="reconcile.validate"))
        tally.write(_make_reject(reason_code="BAD_ID"))
        tally.write(_make_reject(reason_code="BAD_ID"))
        assert tally.by_reason() == {
            "reconcile.primary:BAD_ID": 2,
            "reconcile.validate:FIELD_COUNT": 1,
        }

    def test_count_for(self):
        tally = RejectTally()
        tally.write(_make_reject())
        tally.write(_make_reject(reason_code="BAD_ID"))
        tally.write(_make_reject(stage="reconcile.override"))
        assert tally.count_for("reconcile.primary") == 2
        assert tally.count_for("reconcile.primary", "BAD_ID") == 1
        assert tally.count_for("aggregate.authors") == 0

    def test_samples_bounded(self):
        tally = RejectTally(keep_samples=2)
        for i in range(5):
            tally.write(_make_reject(line_number=i))
        assert tally.count == 5
        assert [r.line_number for r in tally.samples] == [0, 1]
