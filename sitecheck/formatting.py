from __future__ import annotations

import json
import sys
from typing import TextIO

from sitecheck.checks.results import CheckResult
from sitecheck.state import StatsStore

SUMMARY_HEADER = "--- stats summary ---"
SUMMARY_FOOTER = "---------------------"


def format_result(result: CheckResult) -> str:
    return json.dumps(result.to_dict())


def format_summary(stats: StatsStore) -> str:
    lines = [SUMMARY_HEADER, *stats.summary_lines(), SUMMARY_FOOTER]
    return "\n".join(lines)


def print_result(result: CheckResult, out: TextIO | None = None) -> None:
    out = out or sys.stdout
    print(format_result(result), file=out, flush=True)


def print_summary(stats: StatsStore, out: TextIO | None = None) -> None:
    out = out or sys.stdout
    print(format_summary(stats), file=out, flush=True)
