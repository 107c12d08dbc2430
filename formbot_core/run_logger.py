"""
Run Logger - one Markdown file per run, readable next to its screenshots

    run_logger = RunLogger(target="chaicode-signup", url="https://ui.chaicode.com/auth/signup")
    run_logger.log_step("Navigation")          # "## Step 1: Navigation"
    run_logger.log_kv("navigated", url)
    run_logger.log_image(path, "Landing page")
    run_logger.finalize(success=True, duration_ms=1234)
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence


def _cell(value: Any) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


def markdown_table(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    """Render a padded Markdown table; short rows are filled with blanks."""
    body = [[_cell(c) for c in list(row)[:len(headers)]] + [""] * (len(headers) - len(row)) for row in rows]
    widths = [max([len(h)] + [len(r[i]) for r in body]) for i, h in enumerate(headers)]

    def line(cells: Sequence[str]) -> str:
        return "| " + " | ".join(c.ljust(widths[i]) for i, c in enumerate(cells)) + " |"

    lines = [line(headers), "|" + "|".join("-" * (w + 2) for w in widths) + "|"]
    lines.extend(line(r) for r in body)
    return "\n".join(lines) + "\n\n"


class RunLogger:
    """Markdown run log: numbered steps, key/value facts, tables and screenshots."""

    def __init__(
        self,
        target: str,
        url: Optional[str],
        command_line: Optional[str] = None,
        log_dir: str = "./logs",
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or datetime.now().strftime("%Y%m%d-%H%M%S")
        self.dir = Path(log_dir)
        self.dir.mkdir(parents=True, exist_ok=True)
        self.path = self.dir / f"run-{self.session_id}.md"
        self.step = 0

        header = [f"# formbot Run Log ({self.session_id})", ""]
        if command_line:
            header += ["```bash", command_line, "```", ""]
        if target:
            header.append(f"- **Target**: {target}")
        if url:
            header.append(f"- **URL**: {url}")
        self.path.write_text("\n".join(header) + "\n\n", encoding="utf-8")

    def _append(self, text: str) -> None:
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(text)

    def log_step(self, title: str) -> None:
        self.step += 1
        self._append(f"\n---\n\n## Step {self.step}: {title}\n\n")

    def log_text(self, text: str) -> None:
        self._append(f"{text}\n\n")

    def log_kv(self, key: str, value: str) -> None:
        self._append(f"- {key}: {value}\n")

    def log_code(self, lang: str, code: str) -> None:
        self._append(f"```{lang}\n{code}\n```\n\n")

    def log_json(self, data: Any, title: str = "Data") -> None:
        self._append(f"### {title}\n\n")
        self.log_code("json", json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def log_image(self, image_path: str, alt: str = "") -> None:
        """Embed a screenshot by its path relative to the log directory."""
        img = Path(image_path)
        try:
            rel = os.path.relpath(img.resolve(), start=self.dir.resolve())
        except ValueError:
            # Different drive on Windows
            rel = str(img)
        self._append(f"![{alt or img.name}]({rel})\n\n")

    def log_table(self, headers: List[str], rows: List[List[str]], title: str = "") -> None:
        if title:
            self._append(f"### {title}\n\n")
        if headers and rows:
            self._append(markdown_table(headers, rows))

    def log_error(self, message: str) -> None:
        self._append(f"**ERROR:** {message}\n\n")

    def log_warning(self, message: str) -> None:
        self._append(f"**WARNING:** {message}\n\n")

    def finalize(self, success: bool, duration_ms: int = 0, error: Optional[str] = None) -> None:
        summary = [
            "",
            "---",
            "",
            "## Summary",
            "",
            f"**Status:** {'SUCCESS' if success else 'FAILED'}",
            f"**Steps:** {self.step}",
            f"**Duration:** {duration_ms}ms",
        ]
        if error:
            summary += ["", f"**Error:** {error}"]
        self._append("\n".join(summary) + "\n")
