from __future__ import annotations

from dataclasses import dataclass, field
import logging

from eventscraper.utils.timing import format_duration


@dataclass
class ScraperStatus:
    name: str
    success: bool = False
    inserted: int = 0
    updated: int = 0
    filtered: int = 0
    error: str = ""
    duration_s: float = 0.0


@dataclass
class CycleReport:
    loop: int
    duration_s: float = 0.0
    inserted: int = 0
    filtered: int = 0
    statuses: list[ScraperStatus] = field(default_factory=list)
    cancelled: bool = False

    def add(self, status: ScraperStatus) -> None:
        self.statuses.append(status)
        if status.success:
            self.inserted += status.inserted
            self.filtered += status.filtered

    def summary_lines(self) -> list[str]:
        state = "STOPPED" if self.cancelled else "COMPLETED"
        lines = [
            "=" * 80,
            f"CYCLE #{self.loop} {state}",
            f"   Duration  : {format_duration(self.duration_s)}",
            f"   Inserted  : {self.inserted} events",
            f"   Filtered  : {self.filtered} events",
            "-" * 80,
        ]
        for status in self.statuses:
            line = f"  {'OK  ' if status.success else 'FAIL'} {status.name:<20} | inserted: {status.inserted}"
            if status.updated:
                line += f" | updated: {status.updated}"
            if status.filtered:
                line += f" | filtered: {status.filtered}"
            if status.error:
                line += f" | error: {status.error}"
            lines.append(line)
        lines.append("=" * 80)
        return lines

    def log_summary(self, logger: logging.Logger) -> None:
        for line in self.summary_lines():
            logger.info(line)
