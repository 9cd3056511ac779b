#
# src/eztest/testing/parser.py
#
"""
Post-run parsing of captured `mix test` output.

Runs once the process has exited, over stdout and stderr interleaved in
arrival order. Nothing here raises on odd input: missing data comes back
as `UNKNOWN` stats, an empty failure list or an empty file set.
"""
import re
from collections.abc import Iterable

import structlog

from eztest.testing.estimator import count_describe_blocks
from eztest.testing.protocols import UNKNOWN, FailureDetail, RunStats

log = structlog.get_logger("testing.parser")

TEST_FILE_SUFFIX = "_test.exs"

ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
TEST_SUMMARY_PATTERN = re.compile(r"(\d+)\s+tests?,\s+(\d+)\s+failures?")
DURATION_PATTERN = re.compile(r"^Finished in ([^\n]+)$", re.MULTILINE)
FAILURE_HEADER_PATTERN = re.compile(r"^\s*(\d+)\)\s+(.+)\s+\(([^)]+)\)\s*$")
FAILURE_FILE_PATTERN = re.compile(r"^\s*([^\s]+_test\.exs):(\d+)")

_TOKEN_PUNCTUATION = "\"'`()[]{}<>:,;"
FALLBACK_ERROR_MAX_LINES = 6
NO_OUTPUT_MESSAGE = "No error output captured."
NO_STRUCTURED_ERROR_MESSAGE = "Test run failed and no structured error lines were found."


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_PATTERN.sub("", text)


def unique_sorted(files: Iterable[str]) -> list[str]:
    return sorted(set(files))


def parse_run_stats(output: str, run_files: Iterable[str] = ()) -> RunStats:
    """Extracts duration and the tests/failures summary; counts describe blocks from source."""
    clean = strip_ansi(output)

    duration = ""
    if match := DURATION_PATTERN.search(clean):
        duration = match.group(1).strip()

    tests = failures = UNKNOWN
    if match := TEST_SUMMARY_PATTERN.search(clean):
        tests = int(match.group(1))
        failures = int(match.group(2))
        if failures > tests:
            log.warning("Summary reports more failures than tests", tests=tests, failures=failures)
            tests = failures

    return RunStats(
        tests=tests,
        failures=failures,
        describe_count=count_describe_blocks(run_files),
        duration=duration,
    )


def parse_failure_details(output: str) -> list[FailureDetail]:
    """
    Splits the output into numbered failure blocks.

    Each block runs from its `k) name (Module)` header to the next header or
    the `Finished in` line. The first `path_test.exs:N` line sets the
    location; every other line is kept as detail, blank edges trimmed.
    """
    lines = strip_ansi(output).split("\n")
    details: list[FailureDetail] = []

    i = 0
    while i < len(lines):
        header = FAILURE_HEADER_PATTERN.match(lines[i])
        if not header:
            i += 1
            continue

        file, line_no = "", 0
        body: list[str] = []
        j = i + 1
        while j < len(lines):
            raw = lines[j]
            if FAILURE_HEADER_PATTERN.match(raw) or raw.strip().startswith("Finished in "):
                break
            j += 1

            stripped = raw.rstrip("\r").strip()
            if not file:
                if location := FAILURE_FILE_PATTERN.match(stripped):
                    file, line_no = location.group(1), int(location.group(2))
                    continue

            if not stripped and not body:
                continue
            body.append(stripped)

        while body and not body[-1]:
            body.pop()

        details.append(
            FailureDetail(
                index=int(header.group(1)),
                name=header.group(2).strip(),
                module=header.group(3).strip(),
                file=file,
                line=line_no,
                details="\n".join(body),
            )
        )
        i = j

    return details


def path_from_token(token: str) -> str:
    """Returns the `*_test.exs` path embedded in a whitespace token, or ""."""
    token = token.strip().strip(_TOKEN_PUNCTUATION)
    idx = token.find(TEST_FILE_SUFFIX)
    if idx < 0:
        return ""
    path = token[: idx + len(TEST_FILE_SUFFIX)]
    path = path.removeprefix("./").replace("\\", "/")
    return path


def extract_failed_files(output: str, run_files: Iterable[str] | None = None) -> list[str]:
    """
    Scans every token of the output for test-file paths.

    With `run_files`, only requested files are kept, matched exactly or as a
    path suffix (absolute paths in stack traces). Without, every observed
    path is kept.
    """
    run_set = set(run_files or ())
    found: set[str] = set()

    for token in strip_ansi(output).split():
        path = path_from_token(token)
        if not path:
            continue
        if not run_set:
            found.add(path)
            continue
        if path in run_set:
            found.add(path)
            continue
        for candidate in run_set:
            if path.endswith("/" + candidate):
                found.add(candidate)

    return sorted(found)


def failed_files_from_details(details: Iterable[FailureDetail]) -> list[str]:
    return unique_sorted(d.file.strip() for d in details if d.file.strip())


def resolve_failed_files(
    output: str,
    details: list[FailureDetail],
    run_files: list[str],
    failed_only: bool,
    runner_failed: bool,
) -> list[str]:
    """
    Picks the failing file set from whichever method yields something.

    A previously-failed run knows no file list up front, so the parsed
    failure records are trusted first. An explicit run prefers scanning for
    requested paths. If the runner failed and neither method found a file,
    every requested file is assumed to have failed.
    """
    if failed_only:
        files = failed_files_from_details(details) or extract_failed_files(output, None)
    else:
        files = extract_failed_files(output, run_files) or failed_files_from_details(details)

    if runner_failed and not failed_only and not files:
        log.info("No failing files identified, marking every requested file", count=len(run_files))
        files = unique_sorted(run_files)
    return files


def _normalize_runtime_line(line: str) -> str:
    return line.strip().lstrip(".").strip()


def is_relevant_runtime_error_line(line: str) -> bool:
    """True for lines that look like real errors rather than process-lifecycle log noise."""
    if not line:
        return False
    lower = line.lower()

    if "nonode@nohost" in lower and "[error]" in lower:
        return False
    if "task #pid<" in lower and "terminating" in lower:
        return False
    if lower == "terminating":
        return False

    if line.startswith("** "):
        return True
    if "compilation error" in lower or "mix " in lower:
        return True
    return "error" in lower or "failure" in lower or lower.startswith("exit:")


def extract_fallback_error(raw: str) -> str:
    """Best-effort error summary for runs that produced no failure records."""
    if not raw.strip():
        return NO_OUTPUT_MESSAGE

    out: list[str] = []
    seen: set[str] = set()
    for line in raw.replace("\r\n", "\n").split("\n"):
        candidate = _normalize_runtime_line(strip_ansi(line))
        if not is_relevant_runtime_error_line(candidate) or candidate in seen:
            continue
        seen.add(candidate)
        out.append(candidate)
        if len(out) >= FALLBACK_ERROR_MAX_LINES:
            break

    if not out:
        return NO_STRUCTURED_ERROR_MESSAGE
    return "\n".join(out)


def synthesize_runtime_failure(raw: str) -> FailureDetail:
    return FailureDetail(index=0, name="Runtime error", details=extract_fallback_error(raw))

# 🧪⚙️
