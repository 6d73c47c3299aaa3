"""
Main entry point for Marker Jukebox.

This module provides the main() function that loads configuration and the
catalog, builds the engine, and feeds producer output through it in
arrival order until the feed ends or the process is signaled.
"""

import argparse
import logging
import logging.handlers
import signal
import sys
import threading
from typing import IO, Optional

from jukebox.app.engine import JukeboxEngine
from jukebox.app.http_server import StateServer
from jukebox.config import DRIVERS, JukeboxConfig
from jukebox.outputs.factory import create_output_sink
from jukebox.perception.feed import RankedTick, TransportCommand, read_feed
from jukebox.playback.catalog import load_catalog

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(config: JukeboxConfig) -> None:
    """
    Initialize logging.

    Console logging always; a rotation-tolerant file handler when
    config.log_file is set. Log write failures never reach the tick loop.
    """
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format=LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if not config.log_file:
        return

    root = logging.getLogger()
    if any(isinstance(h, logging.handlers.WatchedFileHandler)
           and getattr(h, 'baseFilename', None) == config.log_file
           for h in root.handlers):
        return

    try:
        # WatchedFileHandler reopens the file after external rotation
        handler = logging.handlers.WatchedFileHandler(config.log_file, mode='a')
    except OSError as e:
        logger.warning(f"[JUKEBOX] Cannot open log file {config.log_file}: {e}")
        return

    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s'))
    original_emit = handler.emit

    def safe_emit(record):
        try:
            original_emit(record)
        except (IOError, OSError):
            # Logging failures degrade silently
            pass

    handler.emit = safe_emit
    root.addHandler(handler)


def run_feed(engine: JukeboxEngine, stream: IO[str], threshold: float,
             interval_ms: int = 0, stop_event: Optional[threading.Event] = None) -> int:
    """
    Feed producer output through the engine in arrival order.

    Args:
        engine: Engine to drive
        stream: JSON-lines feed
        threshold: Confidence threshold for raw "scores" lines
        interval_ms: Pause after each ranked tick (0 replays as fast as possible)
        stop_event: Set to stop after the current item

    Returns:
        Number of items processed
    """
    stop_event = stop_event or threading.Event()
    processed = 0

    for item in read_feed(stream, threshold=threshold):
        if stop_event.is_set():
            break
        engine.handle(item)
        processed += 1
        if interval_ms > 0 and isinstance(item, RankedTick):
            stop_event.wait(interval_ms / 1000.0)

    logger.info(f"[JUKEBOX] Feed finished after {processed} item(s)")
    return processed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jukebox",
        description="Drive single-channel playback from marker detections.",
    )
    parser.add_argument("--catalog", help="Catalog JSON (symbols + playlists)")
    parser.add_argument("--feed", help="JSON-lines producer feed (default: stdin)")
    parser.add_argument("--driver", choices=DRIVERS, help="Input path feeding playback")
    parser.add_argument("--realtime", action="store_true",
                        help="Pace ranked ticks at the sampling interval")
    parser.add_argument("--low-power", action="store_true",
                        help="Use the low-power sampling interval")
    parser.add_argument("--autoplay", action="store_true",
                        help="Start playback after loading the initial playlist")
    return parser


def main(args: Optional[list] = None) -> None:
    """
    Main entry point for Marker Jukebox.
    """
    options = build_parser().parse_args(args)

    try:
        config = JukeboxConfig.load_config()
        if options.catalog:
            config.catalog_path = options.catalog
        if options.driver:
            config.driver = options.driver
        if options.low_power:
            config.low_power = True
        config.validate()
    except ValueError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error(f"[JUKEBOX] Configuration error: {e}")
        sys.exit(2)

    setup_logging(config)

    logger.info("=" * 70)
    logger.info(f"Marker Jukebox - Starting (driver={config.driver}, sink={config.sink})")
    logger.info("=" * 70)

    try:
        catalog = load_catalog(config.catalog_path)
    except ValueError as e:
        logger.error(f"[JUKEBOX] Catalog error: {e}")
        sys.exit(2)

    sink = create_output_sink(config)
    engine = JukeboxEngine.from_config(config, catalog, sink)
    server: Optional[StateServer] = None
    stop_event = threading.Event()
    shutdown_initiated = False

    def signal_handler(sig, frame):
        nonlocal shutdown_initiated
        if shutdown_initiated:
            logger.debug("[JUKEBOX] Shutdown already in progress, ignoring duplicate signal")
            return
        shutdown_initiated = True
        signal_name = "SIGTERM" if sig == signal.SIGTERM else "SIGINT"
        logger.info(f"[JUKEBOX] Received {signal_name} signal - shutting down")
        stop_event.set()
        # Interrupt a blocking feed read; cleanup runs in the finally below
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    feed = sys.stdin
    try:
        if options.feed:
            try:
                feed = open(options.feed, "r", encoding="utf-8")
            except OSError as e:
                logger.error(f"[JUKEBOX] Cannot open feed {options.feed}: {e}")
                sys.exit(2)

        if config.http_port:
            server = StateServer(engine, config.http_host, config.http_port)
            server.start()

        engine.start()
        if options.autoplay:
            engine.on_transport(TransportCommand("play"))

        interval_ms = config.effective_interval_ms if options.realtime else 0
        run_feed(engine, feed, config.confidence_threshold, interval_ms, stop_event)
    finally:
        if feed is not sys.stdin:
            feed.close()
        if server is not None:
            server.stop()
        sink.close()
        logger.info("[JUKEBOX] Shutdown complete")


if __name__ == "__main__":
    main()
