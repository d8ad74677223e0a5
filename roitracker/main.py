"""Command-line entry point: drag a box over the live view to start tracking."""

import argparse
import logging
import sys
from typing import List, Optional

from roitracker.config.settings import load_config
from roitracker.core.exceptions import FrameSourceError
from roitracker.core.features import FeatureExtractor
from roitracker.core.logging_config import configure_logging, logging_manager
from roitracker.core.selection import SelectionStateMachine
from roitracker.core.tracking import TrackingSession
from roitracker.services.display import OpenCVDisplay
from roitracker.services.frame_source import FrameSource
from roitracker.services.pipeline import TrackingPipeline
from roitracker.utils.image_utils import Preprocessor

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roitracker",
        description="Select an object with the mouse and follow it in a video stream.")
    parser.add_argument("--source", help="Camera index or video file path")
    parser.add_argument("--config", default="config.json", help="Path to JSON config file")
    parser.add_argument("--env-file", default=None, help="Path to .env file")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Override the configured log level")
    parser.add_argument("--no-file-log", action="store_true", help="Log to console only")
    return parser


def build_pipeline(cfg, frame_source=None, renderer=None) -> TrackingPipeline:
    extractor = FeatureExtractor.from_config(cfg)
    return TrackingPipeline(
        frame_source=frame_source or FrameSource.from_config(cfg),
        renderer=renderer or OpenCVDisplay.from_config(cfg),
        selection=SelectionStateMachine.from_config(cfg, extractor),
        session=TrackingSession.from_config(cfg, extractor),
        preprocessor=Preprocessor.from_config(cfg),
        show_reference=cfg.show_reference_window,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    cfg = load_config(args.config, env_file=args.env_file)
    if args.source is not None:
        cfg.source = args.source
    if args.log_level:
        cfg.log_level = args.log_level

    configure_logging(
        log_level=cfg.log_level,
        log_dir=cfg.log_dir,
        enable_file_logging=cfg.enable_file_logging and not args.no_file_log,
        structured_logging=cfg.structured_logging,
    )

    pipeline = build_pipeline(cfg)
    try:
        pipeline.frame_source.open()
    except FrameSourceError as e:
        logger.error(str(e))
        return 1

    try:
        frames = pipeline.run()
        logger.info(f"Processed {frames} frames")
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        pipeline.frame_source.close()
        pipeline.renderer.close()
        logging_manager.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
