from __future__ import annotations

import argparse
import os
import sys
from itertools import chain
from typing import Iterable, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from nine_ladies.errors import ConfigError
from nine_ladies.ingest import open_candidates
from nine_ladies.logging import get_logger, set_verbosity
from nine_ladies.pipeline import run_dry, run_live
from nine_ladies.schemas import RunConfig, load_prompt_config
from nine_ladies.vlm import BACKENDS, create_client
from nine_ladies.writer import JsonlWriter

logger = get_logger(__name__)
load_dotenv()

EXIT_OK = 0
EXIT_FAILED = 1


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="nine-ladies",
        description=(
            "Describe images with a vision-language model server. Reads one image path per line "
            "and writes one JSON object per line: {\"file\": ..., \"response\": ...}."
        ),
    )
    p.add_argument("--prompt", required=True, help="Path to the prompt configuration JSON file")
    p.add_argument(
        "--url",
        default=os.getenv("NL_API_BASE"),
        help="Model server URL, e.g. http://localhost:8080 (env: NL_API_BASE)",
    )
    p.add_argument(
        "--backend",
        default=os.getenv("NL_BACKEND", "chat"),
        help=f"Backend family: {', '.join(sorted(BACKENDS))} (env: NL_BACKEND, default: chat)",
    )
    p.add_argument(
        "--model",
        default=None,
        help="Model name for every request; overrides the prompt file's model",
    )
    p.add_argument("--api-key", default=os.getenv("NL_API_KEY"), help="API key (env: NL_API_KEY)")
    p.add_argument(
        "--timeout",
        type=float,
        default=_env_float("NL_TIMEOUT", 120.0),
        help="Per-request timeout in seconds (env: NL_TIMEOUT)",
    )
    p.add_argument("--dry-run", action="store_true", help="Validate inputs without calling the model")
    p.add_argument(
        "--input",
        default=None,
        help="Folder or text file with one path per line; default reads stdin",
    )
    p.add_argument("--out", default=None, help="Append JSON Lines to this file instead of stdout")
    p.add_argument("--limit", type=int, default=None, help="Process at most N candidates (0=no limit)")
    p.add_argument(
        "--max-workers",
        type=int,
        default=1,
        help="Concurrent model requests; output order always follows input order",
    )
    p.add_argument(
        "--rpm",
        type=int,
        default=_env_int("NL_RPM", 0),
        help="Requests per minute throttle (0=unlimited, env: NL_RPM)",
    )
    p.add_argument("--progress", action="store_true", help="Show a progress bar on stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    return p.parse_args(list(argv) if argv is not None else None)


def _build_run_config(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        prompt_file=args.prompt,
        url=args.url,
        backend=args.backend,
        model=args.model,
        default_model=os.getenv("NL_MODEL"),
        api_key=args.api_key,
        timeout=args.timeout,
        dry_run=args.dry_run,
        input=args.input,
        output=args.out,
        limit=args.limit,
        max_workers=args.max_workers,
        rpm=args.rpm,
        progress=args.progress,
    )


def run(cfg: RunConfig) -> int:
    try:
        prompt = load_prompt_config(cfg.prompt_file)
    except ConfigError as e:
        logger.error("%s", e)
        return EXIT_FAILED

    try:
        candidates = open_candidates(cfg.input, limit=cfg.limit)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return EXIT_FAILED

    if cfg.dry_run:
        summary = run_dry(candidates, progress=cfg.progress)
        return EXIT_OK if summary.ok else EXIT_FAILED

    first = next(candidates, None)
    if first is None:
        logger.info("no candidates on input")
        return EXIT_OK
    candidates = chain([first], candidates)

    if not cfg.url:
        logger.error("no model server URL; pass --url or set NL_API_BASE")
        return EXIT_FAILED
    try:
        client = create_client(
            cfg.backend,
            cfg.url,
            model=cfg.default_model,
            api_key=cfg.api_key,
            timeout=cfg.timeout,
        )
    except ValueError as e:
        logger.error("%s", e)
        return EXIT_FAILED

    logger.info("🚀 start run backend=%s url=%s", cfg.backend, cfg.url)
    with JsonlWriter.open(cfg.output) as writer:
        run_live(
            candidates,
            prompt,
            client,
            writer,
            model=cfg.model,
            max_workers=cfg.max_workers,
            rpm=cfg.rpm,
            progress=cfg.progress,
        )
    return EXIT_OK


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    set_verbosity(verbose=args.verbose, quiet=args.quiet)
    try:
        cfg = _build_run_config(args)
    except ValidationError as e:
        for err in e.errors():
            logger.error("invalid option %s: %s", ".".join(str(p) for p in err["loc"]), err["msg"])
        return EXIT_FAILED
    return run(cfg)


if __name__ == "__main__":
    sys.exit(main())
