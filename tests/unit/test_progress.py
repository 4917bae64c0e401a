from __future__ import annotations

from unittest.mock import Mock, patch

from tabmap.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    def test_init_with_tty_enabled(self):
        with patch("tabmap.services.progress.is_tty_enabled", return_value=True), \
             patch("tabmap.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(5, description="Jobs")
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=5, desc="Jobs", unit="job", leave=True, position=0, ncols=80, ascii=True
            )

    def test_init_with_tty_disabled(self):
        with patch("tabmap.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker(5)
            assert tracker.enabled is False
            assert tracker.pbar is None
            tracker.start_job("a")
            tracker.set_postfix(success=1)
            tracker.finish_job()
            tracker.close()
            assert tracker.current_job == 1

    def test_job_lifecycle_updates_bar(self):
        mock_pbar = Mock()
        with patch("tabmap.services.progress.is_tty_enabled", return_value=True), \
             patch("tabmap.services.progress.tqdm", return_value=mock_pbar):
            with ProgressTracker(2, description="Running jobs") as tracker:
                tracker.start_job("people")
                mock_pbar.set_description.assert_called_with("Running jobs (people)")
                tracker.set_postfix(success=1, failed=0)
                mock_pbar.set_postfix.assert_called_once_with(success=1, failed=0)
                tracker.finish_job(success=True)
                mock_pbar.update.assert_called_once_with(1)
                mock_pbar.set_description.assert_called_with("Running jobs")
            mock_pbar.close.assert_called_once()
            assert tracker.pbar is None
