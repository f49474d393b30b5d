from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from tqdm import tqdm

from overlay.translation.languages import supported_languages
from pageglot.controllers.translate_controller import TranslateController
from pageglot.core.errors import PipelineError
from pageglot.core.loop_runner import ensure_background_loop, run_on_main_loop, stop_background_loop
from pageglot.core.managers.config_manager import config_manager
from pageglot.core.managers.storage_manager import create_storage
from pageglot.core.utils.configure_logging import configure_from_settings
from retriever.services.page_fetch_service import PageFetchService

logger = logging.getLogger(__name__)


def output_filename(url: str) -> str:
    """Derives a filesystem-safe .html name from a URL."""
    parsed = urlparse(url)
    slug = re.sub(r"[^A-Za-z0-9]+", "_", f"{parsed.netloc}{parsed.path}").strip("_")
    return f"{slug or 'page'}.html"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pageglot", description="PageGlot translation overlay")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the translation API server")
    serve.add_argument("--host", type=str, default=config_manager.get_nested("server.host", "127.0.0.1"),
                       help="Host interface to bind to (use 0.0.0.0 for Docker/External access)")
    serve.add_argument("--port", type=int, default=config_manager.get_nested("server.port", 5000),
                       help="Port to bind the server to")
    serve.add_argument("--debug", action="store_true", help="Enable the Flask debugger")

    translate = sub.add_parser("translate", help="Translate one or more pages to HTML files")
    translate.add_argument("urls", nargs="+", help="Absolute http(s) URLs")
    translate.add_argument("--percentage", type=int, default=30, help="Share of text nodes to translate (0-100)")
    translate.add_argument("--language", type=str, default=config_manager.get_nested(
        "translation.default_language", "swedish"), choices=supported_languages())
    translate.add_argument("--out-dir", type=Path, default=Path.cwd(), help="Directory for the generated files")
    return parser


def run_server(host: str, port: int, debug: bool = False) -> int:
    # Imported here so one-shot translations do not pay for Flask
    from pageglot.server.app import create_app

    ensure_background_loop()
    strategy = config_manager.get_nested("translation.strategy", "pattern")
    app = create_app(preload_dictionaries=(strategy == "dictionary"))

    print("\n" + "=" * 50)
    print(f"🚀  PAGEGLOT | strategy: {strategy}")
    print("=" * 50)
    print(f"📡  Listening on: http://{host}:{port}")
    for rule in app.url_map.iter_rules():
        if "api" in str(rule):
            print(f"   ✅ {rule}")
    print("-" * 50 + "\n")

    try:
        app.run(debug=debug, host=host, port=port, use_reloader=False)
    finally:
        app.config["STORAGE"].close()
        stop_background_loop()
    return 0


def run_translate(urls: List[str], percentage: int, language: str, out_dir: Path) -> int:
    storage = create_storage(config_manager)
    controller = TranslateController(PageFetchService.from_config(config_manager), storage, config=config_manager)
    out_dir.mkdir(parents=True, exist_ok=True)
    failures = 0

    try:
        for url in tqdm(urls, desc="Translating", unit="page"):
            payload = {"url": url, "translationPercentage": percentage, "language": language}
            try:
                outcome = run_on_main_loop(controller.translate(payload))
            except PipelineError as e:
                failures += 1
                logger.error("❌ %s: %s (%s)", url, e.title, e.details)
                continue

            target = out_dir / output_filename(url)
            target.write_text(outcome.html, encoding="utf-8")
            logger.info("✅ %s -> %s (%s)", url, target, outcome.stats)
    finally:
        storage.close()

    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint for the pageglot command."""
    configure_from_settings(config_manager)
    args = _build_parser().parse_args(argv)

    if args.command == "serve":
        return run_server(args.host, args.port, args.debug)
    return run_translate(args.urls, args.percentage, args.language, args.out_dir)


if __name__ == "__main__":
    sys.exit(main())
