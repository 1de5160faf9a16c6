from __future__ import annotations

import dataclasses


@dataclasses.dataclass
class PairCounters:
    """Per-run tallies. Only ever incremented."""

    left_paired: int = 0
    right_paired: int = 0
    left_single: int = 0
    right_single: int = 0
    left_duplicates: int = 0
    right_duplicates: int = 0

    def to_dict(self) -> dict[str, int]:
        return dataclasses.asdict(self)

    def summary_lines(self, *, include_duplicates: bool = False) -> list[str]:
        lines = [
            f"Left paired: {self.left_paired:<14d} Right paired: {self.right_paired}",
            f"Left single: {self.left_single:<14d} Right single: {self.right_single}",
        ]
        if include_duplicates:
            lines.append(
                f"Left duplicates: {self.left_duplicates:<10d} Right duplicates: {self.right_duplicates}"
            )
        return lines
