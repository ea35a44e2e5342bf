# agentic_media/main.py
"""
CLI entrypoint: improve an idea (optionally) and generate an image or a clip.

    agentic-media "a serene sunrise over a futuristic city skyline" --type video --improve
"""
import argparse
import dataclasses
import os
import sys
from typing import List, Optional

import requests

from .capture import ClipSynthesizer
from .clock import ManualClock
from .config import Settings, configure_logging
from .errors import AgenticMediaError
from .media_store import MediaBlob
from .orchestrator import GenerationResult, MediaOrchestrator, guess_media_type
from .utils import clean_filename, decode_data_uri, save_blob


def fetch_result(orchestrator: MediaOrchestrator, result: GenerationResult) -> MediaBlob:
    if result.media_id:
        return orchestrator.media_store.get(result.media_id)
    if result.url.startswith("data:"):
        return decode_data_uri(result.url)
    response = requests.get(result.url, timeout=120)
    response.raise_for_status()
    media_type = response.headers.get("Content-Type") or guess_media_type(result.url, result.media_type)
    return MediaBlob(response.content, media_type.split(";")[0])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agentic-media", description=__doc__.strip().splitlines()[0])
    parser.add_argument("prompt", nargs="?", help="Idea to turn into media")
    parser.add_argument("--type", choices=["image", "video"], default="image", help="What to generate")
    parser.add_argument("--improve", action="store_true", help="Rewrite the idea into a richer prompt first")
    parser.add_argument("--out", help="Output file (default: outputs/<prompt>.<ext>)")
    parser.add_argument("--duration-ms", type=int, help="Fallback clip duration")
    parser.add_argument("--width", type=int, help="Fallback clip width")
    parser.add_argument("--height", type=int, help="Fallback clip height")
    parser.add_argument("--fast", action="store_true",
                        help="Render the fallback clip as fast as possible instead of in real time")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    prompt = args.prompt or input("Describe your idea: ")

    settings = Settings.from_env()
    overrides = {
        "fallback_duration_ms": args.duration_ms,
        "fallback_width": args.width,
        "fallback_height": args.height,
    }
    settings = dataclasses.replace(settings, **{k: v for k, v in overrides.items() if v is not None})
    configure_logging(settings.log_level)

    synthesizer = ClipSynthesizer(clock_factory=ManualClock) if args.fast else None
    orchestrator = MediaOrchestrator(settings, synthesizer=synthesizer)

    print("Original input:", prompt)
    try:
        result = orchestrator.generate(prompt, kind=args.type, improve=args.improve)
        if args.improve:
            print("Improved input:", result.prompt)
        blob = fetch_result(orchestrator, result)
    except (AgenticMediaError, requests.RequestException) as e:
        print(f"❌ Generation failed: {e}")
        return 1

    out = args.out or os.path.join("outputs", f"{clean_filename(prompt[:40])}.{blob.extension}")
    save_blob(blob, out)
    source = "local fallback" if result.fallback else "provider"
    print(f"✅ {result.kind.capitalize()} created ({source}, {blob.media_type}): {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
