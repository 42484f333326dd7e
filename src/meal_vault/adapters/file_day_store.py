"""Filesystem storage for meal plan day documents."""

import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from meal_vault.services.meal_plans import DayStore

_DAY_FILE_RE = re.compile(r"(\d{4}-\d{2}-\d{2})\.md")


@dataclass
class FileDayStore(DayStore):
    """Stores one ``{date}.md`` file per day inside a vault directory."""

    root: Path
    directory_name: str = "days"

    @property
    def directory(self) -> Path:
        """Directory holding the day documents."""
        return self.root / self.directory_name

    def path_for(self, date: str) -> Path:
        """Return the file path for a date."""
        return self.directory / f"{date}.md"

    def read_day(self, date: str) -> str:
        """Read a day document, raising FileNotFoundError when absent."""
        return self.path_for(date).read_text(encoding="utf-8")

    def write_day(self, date: str, content: str) -> None:
        """Write a day document through a temporary file and rename it."""
        target = self.path_for(date)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
                handle.write(content)
            Path(temp_name).replace(target)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def list_dates(self) -> list[str]:
        """Return dates of stored day documents in ascending order."""
        if not self.directory.is_dir():
            return []
        dates = []
        for path in self.directory.iterdir():
            match = _DAY_FILE_RE.fullmatch(path.name)
            if match and path.is_file():
                dates.append(match.group(1))
        return sorted(dates)
