from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Step progress display with tqdm (TTY only).

A run goes through a fixed list of weighted steps (load, analyze, merge
translations, build JSON, prepare write-back). The bar advances by each
step's weight. In non-TTY environments (CI, pipes) no bar is created so
log output stays free of control sequences.
"""

__all__ = [
    "PIPELINE_STEPS",
    "ProgressTracker",
    "is_tty_enabled",
]

PIPELINE_STEPS: list[tuple[str, int]] = [
    ("Loading spreadsheet", 1),
    ("Analyzing data", 1),
    ("Merging translations", 2),
    ("Generating JSON", 1),
    ("Preparing write-back", 1),
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Weighted step progress bar.

    Steps are started and finished by name; finishing a step advances the
    bar by its weight.
    """

    def __init__(
        self,
        steps: list[tuple[str, int]] | None = None,
        *,
        description: str = "Translating sheet",
    ) -> None:
        self.steps = list(steps if steps is not None else PIPELINE_STEPS)
        self.weights = dict(self.steps)
        self.total_weight = sum(self.weights.values())
        self.description = description
        self.current_step: str | None = None
        self.completed: list[str] = []

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=self.total_weight,
                desc=description,
                unit="step",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_step(self, name: str) -> None:
        if name not in self.weights:
            raise KeyError(f"unknown step: {name}")
        self.current_step = name
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({name})")

    def finish_step(self, name: str | None = None) -> None:
        name = name or self.current_step
        if name is None:
            return
        self.completed.append(name)
        self.current_step = None
        if self.enabled and self.pbar is not None:
            self.pbar.update(self.weights[name])
            self.pbar.set_description(self.description)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
