"""CLI utility to run a MinutesAI flow against local transcript or recording files."""

from __future__ import annotations

import argparse
import json
import logging
import mimetypes
import os
import sys
from pathlib import Path
from typing import Any, Sequence

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from minutesai_backend.flows import get_flow, get_flow_runtime, list_flows
from minutesai_backend.media import encode_data_uri
from minutesai_backend.settings import get_settings

# Short command names mapped to registered flow names.
_COMMANDS = {
    "summarize": "summarizeMeetingKeyPointsFlow",
    "minutes": "generateMinutesOfMeetingFlow",
    "action-items": "extractActionItemsFlow",
    "transcribe": "transcribeVideoFlow",
}


def _load_dotenv_if_needed() -> None:
    dotenv_path = PROJECT_ROOT / ".env"
    if not dotenv_path.exists():
        return

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        cleaned = value.strip().strip('"').strip("'")
        os.environ.setdefault(key, cleaned)


def _read_text(path: Path | None) -> str | None:
    if path is None:
        return None
    return path.read_text(encoding="utf-8")


def _recording_data_uri(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(path.name)
    if not mime_type:
        raise ValueError(f"cannot determine the media type of {path}")
    return encode_data_uri(mime_type, path.read_bytes())


def _build_payload(args: argparse.Namespace) -> dict[str, Any]:
    if args.input_json is not None:
        raw = args.input_json.read_text(encoding="utf-8")
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError("input JSON must be an object")
        return payload

    if args.command == "transcribe":
        return {"videoDataUri": _recording_data_uri(args.source)}

    text = args.source.read_text(encoding="utf-8")
    if args.command == "action-items":
        return {"transcript": text}
    return {
        "transcription": text,
        "previousMom": _read_text(args.previous_mom),
    }


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a MinutesAI flow on a transcript or a meeting recording.",
    )
    parser.add_argument(
        "command",
        choices=sorted(_COMMANDS) + ["list"],
        help="Flow to run, or 'list' to print the registered flows",
    )
    parser.add_argument(
        "source",
        type=Path,
        nargs="?",
        default=None,
        help="Transcript text file, or recording file for 'transcribe'",
    )
    parser.add_argument(
        "--previous-mom",
        type=Path,
        default=None,
        help="Optional file holding the previous Minutes of Meeting.",
    )
    parser.add_argument(
        "--input-json",
        type=Path,
        default=None,
        help="Use a JSON file as the flow input instead of SOURCE.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional path to write the flow output as JSON.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _create_parser()
    args = parser.parse_args(argv)

    if args.command == "list":
        for flow in list_flows():
            sys.stdout.write(f"{flow.name}\t{flow.description}\n")
        return 0

    if args.input_json is None:
        if args.source is None:
            parser.error("SOURCE is required unless --input-json is given")
        if not args.source.exists():
            parser.error(f"source file does not exist: {args.source}")

    _load_dotenv_if_needed()
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    flow = get_flow(_COMMANDS[args.command])
    output = flow.run(_build_payload(args), runtime=get_flow_runtime(settings))

    output_text = json.dumps(
        output.model_dump(by_alias=True), ensure_ascii=False, indent=2
    )
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output_text, encoding="utf-8")
    else:
        sys.stdout.write(output_text + "\n")

    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
