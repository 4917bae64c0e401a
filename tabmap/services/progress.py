from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

One bar per pipeline run, advanced once per job. In non-TTY environments (CI, pipes) no bar
is created so the labeled log lines stay clean.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Job-level progress bar; a no-op when stdout is not a TTY."""

    def __init__(self, total_jobs: int, *, description: str = "Running jobs") -> None:
        self.total_jobs = total_jobs
        self.description = description
        self.current_job = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_jobs,
                desc=description,
                unit="job",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_job(self, job_name: str) -> None:
        self.current_job += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({job_name})")

    def finish_job(self, success: bool = True) -> None:
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
