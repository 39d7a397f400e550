from __future__ import annotations

from unittest.mock import Mock, patch

import pytest

from kr_sheet_translator.services.progress import PIPELINE_STEPS, ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    def test_init_with_tty_enabled(self):
        with patch("kr_sheet_translator.services.progress.is_tty_enabled", return_value=True), \
             patch("kr_sheet_translator.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(description="Translating en")

            assert tracker.enabled is True
            assert tracker.total_weight == sum(w for _, w in PIPELINE_STEPS)
            mock_tqdm.assert_called_once_with(
                total=6,
                desc="Translating en",
                unit="step",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch("kr_sheet_translator.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker()
            assert tracker.enabled is False
            assert tracker.pbar is None
            # no-ops without a bar
            tracker.start_step("Analyzing data")
            tracker.finish_step()
            tracker.set_postfix(json=1)
            tracker.close()
            assert tracker.completed == ["Analyzing data"]

    def test_finish_step_advances_by_weight(self):
        mock_pbar = Mock()
        with patch("kr_sheet_translator.services.progress.is_tty_enabled", return_value=True), \
             patch("kr_sheet_translator.services.progress.tqdm", return_value=mock_pbar):
            tracker = ProgressTracker()
            tracker.start_step("Merging translations")
            mock_pbar.set_description.assert_called_with("Translating sheet (Merging translations)")
            tracker.finish_step()
            mock_pbar.update.assert_called_once_with(2)
            assert tracker.current_step is None

            tracker.set_postfix(json=3)
            mock_pbar.set_postfix.assert_called_once_with(json=3)

    def test_unknown_step(self):
        with patch("kr_sheet_translator.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker([("only", 1)])
            with pytest.raises(KeyError):
                tracker.start_step("Loading spreadsheet")

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()
        with patch("kr_sheet_translator.services.progress.is_tty_enabled", return_value=True), \
             patch("kr_sheet_translator.services.progress.tqdm", return_value=mock_pbar):
            with ProgressTracker() as tracker:
                pass
            mock_pbar.close.assert_called_once()
            assert tracker.pbar is None
