#!/usr/bin/env python3
"""
Build the knowledge base once and print it (or write it to a file).

Useful for checking what the model will actually see before pointing the
API at a folder. Reads DRIVE_API_CREDENTIALS and DRIVE_FOLDER_ID from the
environment (or .env); no Gemini key is needed.

Run from project root:

    python scripts/dump_knowledge_base.py
    python scripts/dump_knowledge_base.py --folder <FOLDER_ID> --out kb.txt
    python scripts/dump_knowledge_base.py --stats
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Project root on path so "app" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.core.config import parse_drive_credentials
from app.core.errors import AppError, ConfigurationError
from app.services.aggregation_service import collect_segments, join_segments
from app.services.drive_client import DriveClient


def main() -> int:
    parser = argparse.ArgumentParser(description="Dump the aggregated Drive knowledge base.")
    parser.add_argument(
        "--folder",
        default=os.getenv("DRIVE_FOLDER_ID", "").strip(),
        help="Drive folder ID (defaults to DRIVE_FOLDER_ID).",
    )
    parser.add_argument("--out", type=Path, help="Write the text here instead of stdout.")
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print one status line per file instead of the text.",
    )
    args = parser.parse_args()

    try:
        raw = os.getenv("DRIVE_API_CREDENTIALS", "").strip()
        if not raw:
            raise ConfigurationError("DRIVE_API_CREDENTIALS is not set.")
        if not args.folder:
            raise ConfigurationError("No folder given: pass --folder or set DRIVE_FOLDER_ID.")
        drive = DriveClient.from_credentials(parse_drive_credentials(raw))
        segments = asyncio.run(collect_segments(drive, args.folder))
    except AppError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1

    if args.stats:
        for s in segments:
            status = "ok" if s.ok else "FAILED"
            print(f"  {status:6} {len(s.text):8d} chars  {s.name}")
        print(f"Done. {len(segments)} files, {sum(1 for s in segments if not s.ok)} failed.")
        return 0

    text = join_segments(segments)
    if args.out:
        args.out.write_text(text, encoding="utf-8")
        print(f"Wrote {len(text)} chars to {args.out}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
