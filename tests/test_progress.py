import logging

import pytest

from hclust.progress import (
    PHASE_DISTANCES,
    PHASE_MERGES,
    ProgressReporter,
    log_progress,
    overall_progress,
)


def test_overall_progress_splits_two_phases():
    assert overall_progress(PHASE_DISTANCES, 0.0) == 0.0
    assert overall_progress(PHASE_DISTANCES, 1.0) == pytest.approx(0.5)
    assert overall_progress(PHASE_MERGES, 0.5) == pytest.approx(0.75)
    assert overall_progress(PHASE_MERGES, 1.0) == pytest.approx(1.0)


def test_reporter_without_callback_is_disabled():
    reporter = ProgressReporter()

    assert reporter.enabled is False
    reporter.update(PHASE_MERGES, 1.0)


def test_reporter_clamps_into_unit_interval():
    updates = []
    reporter = ProgressReporter(updates.append)

    reporter.update(PHASE_MERGES, 3.0)
    reporter.update(PHASE_DISTANCES, -1.0)

    assert updates == [1.0, 0.0]


def test_reporter_disables_failed_callback(caplog):
    calls = []

    def broken(progress):
        calls.append(progress)
        raise ValueError("no")

    reporter = ProgressReporter(broken)
    with caplog.at_level(logging.WARNING, logger="hclust.progress"):
        reporter.update(PHASE_DISTANCES, 0.5)
        reporter.update(PHASE_MERGES, 0.5)

    assert calls == [0.25]
    assert reporter.enabled is False
    assert len(caplog.records) == 1
    assert caplog.records[0].exc_info is not None


def test_log_progress_formats_percentage(caplog):
    with caplog.at_level(logging.INFO, logger="hclust.progress"):
        log_progress(0.4567)

    assert caplog.records[0].getMessage() == "Clustering: 45.7%"
