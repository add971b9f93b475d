from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from delivery_tracker.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


def test_tracker_with_tty_drives_tqdm():
    with patch("delivery_tracker.services.progress.is_tty_enabled", return_value=True), \
         patch("delivery_tracker.services.progress.tqdm") as mock_tqdm:
        with ProgressTracker(2, description="Test files") as tracker:
            assert tracker.enabled is True
            bar = mock_tqdm.return_value
            tracker.start_file(Path("rotas.xlsx"))
            bar.set_description.assert_called_with("Test files (rotas.xlsx)")
            tracker.set_postfix(ok=1, failed=0)
            bar.set_postfix.assert_called_once_with(ok=1, failed=0)
            tracker.finish_file()
            bar.update.assert_called_once_with(1)
        bar.close.assert_called_once()
        assert tracker.pbar is None
        assert mock_tqdm.call_args.kwargs["total"] == 2


def test_tracker_without_tty_is_silent():
    with patch("delivery_tracker.services.progress.is_tty_enabled", return_value=False), \
         patch("delivery_tracker.services.progress.tqdm") as mock_tqdm:
        tracker = ProgressTracker(3)
        tracker.start_file(Path("a.xlsx"))
        tracker.finish_file(success=False)
        tracker.close()
        mock_tqdm.assert_not_called()
        assert tracker.current_file == 1
