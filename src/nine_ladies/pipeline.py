"""Processing pipeline: validate each candidate, call the model, stream records.

Per-item stages return either their result or an ``ItemFailure``; the loop
logs the failure and moves to the next candidate, so no single item can end
the run.
"""
from __future__ import annotations

from typing import Iterable, Iterator

from tqdm import tqdm

from .errors import RequestFailed
from .logging import get_logger
from .schemas import (
    FailureKind,
    ItemFailure,
    OutputRecord,
    PromptConfig,
    RunSummary,
    ValidatedImage,
    printable_path,
)
from .utils import RateLimiter
from .utils.concurrency import ordered_map
from .validate import check_readable, validate_image
from .vlm import ModelClient
from .writer import JsonlWriter

logger = get_logger(__name__)


def _progress(candidates: Iterable[str], enabled: bool, desc: str) -> Iterable[str]:
    if not enabled:
        return candidates
    return tqdm(candidates, desc=desc, unit="img")


def process_one(
    path: str,
    config: PromptConfig,
    client: ModelClient,
    model: str | None = None,
    limiter: RateLimiter | None = None,
) -> OutputRecord | ItemFailure:
    try:
        path.encode("utf-8")
    except UnicodeEncodeError:
        # undecodable filename; it could not be written to the output stream
        return ItemFailure(path, FailureKind.UNREADABLE, "path is not valid UTF-8")
    checked = validate_image(path)
    if isinstance(checked, ItemFailure):
        return checked
    image: ValidatedImage = checked
    if limiter:
        limiter.acquire()
    try:
        result = client.infer(image, config, model)
    except RequestFailed as e:
        return ItemFailure(path, FailureKind.REQUEST_FAILED, str(e))
    return OutputRecord(file=path, response=result)


def iter_records(
    candidates: Iterable[str],
    config: PromptConfig,
    client: ModelClient,
    model: str | None = None,
    max_workers: int = 1,
    limiter: RateLimiter | None = None,
) -> Iterator[OutputRecord | ItemFailure]:
    """Yield one outcome per candidate, in input order."""

    def _one(path: str) -> OutputRecord | ItemFailure:
        return process_one(path, config, client, model, limiter)

    return ordered_map(_one, candidates, max_workers)


def run_live(
    candidates: Iterable[str],
    config: PromptConfig,
    client: ModelClient,
    writer: JsonlWriter,
    model: str | None = None,
    max_workers: int = 1,
    rpm: int = 0,
    progress: bool = False,
) -> RunSummary:
    summary = RunSummary()
    limiter = RateLimiter(rpm=rpm) if rpm > 0 else None
    logger.debug("live run workers=%d rpm=%d", max_workers, rpm)
    outcomes = iter_records(
        _progress(candidates, progress, "describe"), config, client, model, max_workers, limiter
    )
    for outcome in outcomes:
        summary.seen += 1
        if isinstance(outcome, ItemFailure):
            summary.skipped += 1
            logger.warning("skipping %s", outcome)
            continue
        writer.emit(outcome)
        summary.emitted += 1
    logger.info("📊 done: %d/%d written, %d skipped", summary.emitted, summary.seen, summary.skipped)
    return summary


def run_dry(candidates: Iterable[str], progress: bool = False) -> RunSummary:
    """Existence and readability checks only; the model is never contacted."""
    summary = RunSummary()
    for path in _progress(candidates, progress, "dry-run"):
        summary.seen += 1
        issue = check_readable(path)
        if issue is None:
            continue
        summary.issues.append(issue)
        logger.warning("%s: %s: %s", issue.reason.value, printable_path(issue.path), issue.detail)
    if summary.issues:
        logger.error("dry run found %d issue(s) in %d candidate(s)", len(summary.issues), summary.seen)
    else:
        logger.info("dry run ok: %d candidate(s) readable", summary.seen)
    return summary
