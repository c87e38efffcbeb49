"""
Replay a text file into the transcript board as if it came from a live ASR.

Usage:
1. Start the API: `uvicorn app.main:app --reload`
2. Run: `python tools/transcript_feed/transcript_feed.py transcript.txt`
   Optional flags:
     --url http://localhost:8000  # API base URL (default: TRANSCRIPT_FEED_URL)
     --stream lobby               # stream id to write to (default: "default")
     --word-delay 0.15            # seconds between live text updates
     --confirm                    # mark each finalized line as stored

Each non-empty line is sent word by word as live text, then finalized with a
generated external ref. Reads stdin when no file is given.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import uuid
from pathlib import Path
from typing import Iterable, List, Optional

# Ensure repo root is on sys.path so `import app` works when running this script directly
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.core.logger import get_logger  # noqa: E402
from app.services.transcript_feed import TranscriptFeedClient, TranscriptFeedError  # noqa: E402

log = get_logger("transcript_feed")


def read_lines(path: Optional[str]) -> List[str]:
    if path:
        raw: Iterable[str] = Path(path).read_text(encoding="utf-8").splitlines()
    else:
        raw = sys.stdin.read().splitlines()
    return [line.strip() for line in raw if line.strip()]


async def replay(
    client: TranscriptFeedClient,
    lines: List[str],
    stream_id: str,
    word_delay: float,
    confirm: bool,
) -> int:
    sent = 0
    for line in lines:
        words = line.split()
        for i in range(1, len(words) + 1):
            await client.send_live(stream_id, " ".join(words[:i]))
            await asyncio.sleep(word_delay)

        ref = uuid.uuid4().hex
        await client.send_final(stream_id, line, external_ref=ref)
        sent += 1
        if confirm:
            await client.mark_processed(ref, pending=False)
        log.info("[%s] finalized %d/%d: %s", stream_id, sent, len(lines), line)
    return sent


async def run_async(path: Optional[str], url: Optional[str], stream_id: str, word_delay: float, confirm: bool) -> int:
    client = TranscriptFeedClient(base_url=url)
    try:
        return await replay(client, read_lines(path), stream_id, word_delay, confirm)
    finally:
        await client.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay a transcript file into the live transcript board.")
    parser.add_argument("file", nargs="?", help="Text file to replay, one utterance per line (default: stdin)")
    parser.add_argument("--url", default=None, help="API base URL (default: TRANSCRIPT_FEED_URL)")
    parser.add_argument("--stream", default="default", help="Stream id (default: default)")
    parser.add_argument("--word-delay", type=float, default=0.15, help="Seconds between live updates (default: 0.15)")
    parser.add_argument("--confirm", action="store_true", help="Mark finalized lines as stored")
    args = parser.parse_args()

    try:
        asyncio.run(run_async(args.file, args.url, args.stream, args.word_delay, args.confirm))
    except TranscriptFeedError as e:
        log.error("Feed rejected by server: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
