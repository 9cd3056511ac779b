# src/eztest/runtime/reporter.py
"""
Terminal rendering for runs: the pre-run banner, the results screen and
the interactive rerun prompt.
"""
import io
from enum import Enum, auto
from typing import TextIO

import structlog
from rich.console import Console, Group, RenderableType
from rich.padding import Padding
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from eztest.styles import current_palette
from eztest.testing.parser import synthesize_runtime_failure
from eztest.testing.progress import render_progress_bar
from eztest.testing.protocols import FailureDetail, RunOutcome

log = structlog.get_logger("runtime.reporter")

FAILURE_CARD_WIDTH = 96
COMPACT_DETAIL_MAX_LINES = 8
BANNER_FULL_LIST_LIMIT = 10

LOGO = """
  ███████╗███████╗████████╗
  ██╔════╝╚══███╔╝╚══██╔══╝
  █████╗    ███╔╝    ██║
  ██╔══╝   ███╔╝     ██║
  ███████╗███████╗   ██║
  ╚══════╝╚══════╝   ╚═╝"""


class RerunAction(Enum):
    QUIT = auto()
    ALL = auto()
    FAILED = auto()


def format_metric(value: int) -> str:
    return "unknown" if value < 0 else str(value)


def format_duration(duration: str) -> str:
    return duration.strip() or "unknown"


def safe_percent(value: int, total: int) -> int:
    if total <= 0:
        return 0
    value = min(max(value, 0), total)
    return int(value / total * 100)


def graph_counts(outcome: RunOutcome) -> tuple[int, int, int]:
    """(total, passed, failed), treating unknown values conservatively."""
    fail = outcome.stats.failures
    if fail < 0:
        fail = len(outcome.failures)
    fail = max(fail, 0)

    total = outcome.stats.tests
    if total < 0:
        total = fail
    total = max(total, fail)

    return total, max(total - fail, 0), fail


def _is_stack_frame_line(line: str) -> bool:
    line = line.strip()
    if not line:
        return False
    if "_test.exs:" in line:
        return True
    return line.startswith("(") and ") " in line


def _format_error_line(line: str) -> str:
    lower = line.lower()
    for label in ("code:", "left:", "right:"):
        if lower.startswith(label):
            return f"{label[:-1].capitalize()}: {line[len(label):].strip()}"
    return line


def compact_error_details(raw: str) -> str:
    """Drops stack frames and log preambles, keeping the first few meaningful lines."""
    out: list[str] = []
    for line in raw.replace("\r\n", "\n").split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue
        lower = trimmed.lower()
        if lower.startswith("stacktrace:"):
            break
        if _is_stack_frame_line(trimmed) or lower.startswith("the following output was logged:"):
            continue
        out.append(_format_error_line(trimmed))
        if len(out) >= COMPACT_DETAIL_MAX_LINES:
            break
    return "\n".join(out)


def _style_detail_line(line: str) -> Text:
    palette = current_palette()
    trimmed = line.strip()
    lower = trimmed.lower()

    labelled = (
        ("code:", "Code:", palette.title, palette.text),
        ("left:", "Left:", palette.failure, palette.error),
        ("right:", "Right:", palette.status, palette.secondary),
        ("expected:", "Expected:", palette.status, palette.text),
        ("actual:", "Actual:", palette.failure, palette.text),
    )
    if trimmed.startswith("** ("):
        return Text(trimmed, style=palette.failure)
    for prefix, label, label_style, body_style in labelled:
        if lower.startswith(prefix):
            text = Text(label, style=label_style)
            text.append(" " + trimmed[len(prefix):].strip(), style=body_style)
            return text
    if "assertion" in lower:
        return Text(trimmed, style=f"bold {palette.text}")
    return Text(trimmed, style=palette.text)


def render_failure_card(failure: FailureDetail) -> Panel:
    palette = current_palette()

    if failure.index > 0:
        title = f"✗ #{failure.index}  {failure.name.strip() or 'Test failure'}"
    else:
        title = f"✗ {failure.name.strip() or 'Runtime error'}"

    lines: list[Text] = [Text(title, style=palette.failure)]
    if failure.module:
        lines.append(Text(f"Module: {failure.module}", style=palette.title))
    if failure.location:
        lines.append(Text(f"File: {failure.location}", style=palette.dim_text))

    detail = compact_error_details(failure.details) or "No parsed error detail available."
    lines.extend(_style_detail_line(line) for line in detail.split("\n"))

    return Panel(
        Group(*lines),
        box=box.ROUNDED,
        border_style=palette.error,
        padding=(0, 1),
        width=FAILURE_CARD_WIDTH,
        expand=False,
    )


def render_run_graphs(outcome: RunOutcome) -> Panel:
    palette = current_palette()
    total, passed, failed = graph_counts(outcome)
    row_total = max(total, passed + failed)

    table = Table.grid(padding=(0, 1))
    table.add_column(width=10)
    table.add_column()
    table.add_column(width=10, justify="right")
    for label, value in (("Pass", passed), ("Fail", failed)):
        denominator = row_total if row_total > 0 else max(value, 1)
        value = min(max(value, 0), denominator)
        table.add_row(
            Text(f"{label}:", style=f"bold {palette.dim_text}"),
            render_progress_bar(value, denominator),
            Text(f"{value}/{denominator}", style=f"bold {palette.text}"),
        )

    if total > 0:
        rate = f"Pass rate: {safe_percent(passed, total)}%  •  Total tests: {total}"
    else:
        rate = "Pass rate: unknown  •  Total tests: unknown"

    body = Group(
        Text("Run Graphs", style=palette.title),
        table,
        Text(rate, style=palette.muted),
        Text(f"Describe blocks: {max(outcome.stats.describe_count, 0)}", style=palette.muted),
    )
    return Panel(body, box=box.ROUNDED, border_style=palette.border, padding=(0, 1), expand=False)


def _render_passing(outcome: RunOutcome) -> RenderableType:
    palette = current_palette()
    stats = outcome.stats
    metrics = "\n".join(
        [
            f"Tests: {format_metric(stats.tests)}",
            f"Describe blocks: {stats.describe_count}",
            f"Failures: {format_metric(stats.failures)}",
            f"Duration: {format_duration(stats.duration)}",
        ]
    )
    return Group(
        Text("EZTest Results", style=palette.title),
        Text("Status: PASS", style=palette.status),
        Text(""),
        Panel(Text(metrics), box=box.ROUNDED, border_style=palette.border, padding=(0, 1), expand=False),
        Text(""),
        render_run_graphs(outcome),
        Text(""),
        Text("All tests passed.", style=palette.status),
    )


def _render_failing(outcome: RunOutcome) -> RenderableType:
    palette = current_palette()
    failures = list(outcome.failures) or [synthesize_runtime_failure(outcome.raw_output)]

    reported = outcome.stats.failures if outcome.stats.failures >= 0 else len(outcome.failures)
    header_label = "runtime error(s)" if reported == 0 else "failing test(s)"
    section = "Error Details" if reported == 0 else "Failed Tests"

    parts: list[RenderableType] = [
        Text("EZTest Failures", style=palette.failure),
        Text(f"{max(reported, len(failures))} {header_label}", style=palette.failure),
        Text(""),
        render_run_graphs(outcome),
        Text(""),
        Text(section, style=f"bold underline {palette.error}"),
        Text(""),
    ]
    for i, failure in enumerate(failures):
        if i > 0:
            parts.append(Text(""))
        parts.append(render_failure_card(failure))
    return Group(*parts)


def render_results(outcome: RunOutcome, exit_code: int) -> RenderableType:
    if exit_code != 0:
        return _render_failing(outcome)
    return _render_passing(outcome)


def render_to_text(renderable: RenderableType, width: int = 120) -> str:
    """Plain-text rendering, used for non-terminal output and tests."""
    buffer = io.StringIO()
    Console(file=buffer, width=width, color_system=None, highlight=False).print(renderable)
    return buffer.getvalue()


def parse_rerun_action(raw: str, allow_rerun_failed: bool) -> tuple[RerunAction, bool]:
    normalized = raw.strip().lower()
    if normalized in ("q", "quit", ""):
        return RerunAction.QUIT, True
    if normalized == "r":
        return RerunAction.ALL, True
    if normalized == "rf" and allow_rerun_failed:
        return RerunAction.FAILED, True
    return RerunAction.QUIT, False


def prompt_rerun_action(outcome: RunOutcome, stdin: TextIO, stdout: TextIO) -> RerunAction:
    """Asks until the answer is valid; end of input quits."""
    allow_failed = outcome.has_failure_signal
    question = (
        "Action [r] rerun, [rf] rerun failed, [q] quit: "
        if allow_failed
        else "Action [r] rerun, [q] quit: "
    )
    while True:
        stdout.write(question)
        stdout.flush()
        answer = stdin.readline()
        if not answer:
            return RerunAction.QUIT
        action, ok = parse_rerun_action(answer, allow_failed)
        if ok:
            log.debug("Rerun action chosen", action=action.name)
            return action


class ResultsReporter:
    """Prints banners and result screens to one rich Console."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False)

    def print_run_banner(self, files: list[str], failed_only: bool) -> None:
        palette = current_palette()
        self.console.print(Text(LOGO, style=palette.title))
        self.console.print()

        if failed_only:
            self.console.print(Text("  Running previously failed tests (--failed)", style=palette.status))
            bullets = ["mix test --failed", "Uses ExUnit's previous-failure tracking"]
        else:
            header = Text("  Running ", style=palette.status)
            header.append(str(len(files)), style=palette.title)
            header.append(" test file(s)", style=palette.status)
            self.console.print(header)
            if len(files) <= BANNER_FULL_LIST_LIMIT:
                bullets = list(files)
            else:
                bullets = [*files[:5], f"... and {len(files) - 8} more ...", *files[-3:]]

        for bullet in bullets:
            self.console.print(Padding(Text(f"• {bullet}", style=palette.dim_text), (0, 0, 0, 4)))
        self.console.print()
        self.console.print(Text("─" * 50, style=palette.border))
        self.console.print()

    def print_scan_summary(self, expected_total: int, failed_only: bool) -> None:
        palette = current_palette()
        if failed_only:
            line = Text("Scan: skipped for --failed run.", style=palette.dim_text)
        elif expected_total > 0:
            line = Text(f"Scan: {expected_total} tests discovered in selected files.", style=palette.status)
        else:
            line = Text("Scan: no test macros discovered; tracking live results only.", style=palette.dim_text)
        self.console.print(line)
        self.console.print()

    def print_results(self, outcome: RunOutcome, exit_code: int) -> None:
        self.console.print(render_results(outcome, exit_code))

# 🧪⚙️
