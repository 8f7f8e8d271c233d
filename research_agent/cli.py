"""Command-line entry point.

Usage:
    research-agent run "Serverless Computing" [--output-dir DIR] [--organization NAME]
    research-agent history
    research-agent serve [--host HOST] [--port PORT]
"""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Optional

from research_agent.config import load_config
from research_agent.errors import ArtifactGenerationError, ResearchError
from research_agent.executor.history_store import configure_store, get_session_store
from research_agent.executor.pipeline import ResearchPipeline
from research_agent.executor.schemas import AnalysisSession, ProgressEvent
from research_agent.llm.factory import get_backend

logger = logging.getLogger(__name__)


def _print_progress(event: ProgressEvent) -> None:
    print(f"[{event.percent_complete:3d}%] {event.message}")


_UNSAFE_FILE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def safe_file_name(name: str) -> str:
    """Make an artifact file name usable as a single path component."""
    return _UNSAFE_FILE_CHARS.sub("_", name).strip()


def write_artifacts(session: AnalysisSession, output_dir: Path) -> list[Path]:
    """Write every artifact of a completed session into output_dir.

    Topics may contain path separators, so file names are sanitized and
    every target must resolve inside output_dir.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    root = output_dir.resolve()
    written = []
    for ref in session.artifacts.values():
        path = output_dir / safe_file_name(ref.file_name)
        if path.resolve().parent != root:
            raise ArtifactGenerationError(
                f"Refusing to write artifact outside {output_dir}: {ref.file_name}"
            )
        path.write_bytes(ref.payload)
        written.append(path)
    return written


def cmd_run(args: argparse.Namespace) -> int:
    store = get_session_store()
    config = load_config(store=store)
    if args.organization:
        config = config.model_copy(update={"organization_name": args.organization})
    if args.output_dir:
        config = config.model_copy(update={"output_dir": args.output_dir})

    pipeline = ResearchPipeline(get_backend(config), store, config)
    try:
        session = pipeline.run_research(args.topic, progress_callback=_print_progress)
    finally:
        pipeline.close()

    paths = write_artifacts(session, Path(config.output_dir))
    print(f"\nResearch complete: {session.id}")
    for path in paths:
        print(f"  {path} ({path.stat().st_size:,} bytes)")
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    entries = get_session_store().load_history(args.limit)
    if not entries:
        print("No research history yet.")
        return 0
    for entry in entries:
        print(
            f"{entry.timestamp}  {entry.id}  {entry.status.value:<9}  "
            f"{entry.artifact_count} artifacts  {entry.topic}"
        )
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("research_agent.api.main:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="research-agent",
        description="Enterprise technology research: market, vendors, hype cycle, strategy",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Research a technology area")
    run_parser.add_argument("topic", help='Technology area, e.g. "Serverless Computing"')
    run_parser.add_argument("--output-dir", help="Directory for the generated artifacts")
    run_parser.add_argument("--organization", help="Organization the summary is written for")
    run_parser.set_defaults(func=cmd_run)

    history_parser = subparsers.add_parser("history", help="Show recent analyses")
    history_parser.add_argument("--limit", type=int, default=None)
    history_parser.set_defaults(func=cmd_history)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8001)
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)
    try:
        configure_store(load_config())
        return args.func(args)
    except ResearchError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
