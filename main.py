#!/usr/bin/env python3
"""
Offline replay for the repetitive motion detection engine.

Feeds a recorded hand-tracking stream through one MotionEngine, running an
analysis cycle every `analysis_interval_ms` of frame time, and writes the
session report consumed by the reporting backend.

Usage:
    python main.py --frames path/to/session.jsonl --config configs/motion_analysis.yaml --output results/

Input format (one JSON object per line, timestamps in seconds):
    {"timestamp": 0.04, "leftWrist": {"x": 312.0, "y": 240.5, "z": -0.02, "confidence": 0.91}, "rightWrist": null}
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator

from motion_analysis import (
    ClassificationResult,
    HandFrame,
    MotionEngine,
    SessionAnalysis,
    build_session_record,
    save_session_report,
)
from utils.config_loader import load_config

logger = logging.getLogger(__name__)

REPORT_FILENAME = 'motion_session_report.json'


def read_frames(frames_path) -> Iterator[HandFrame]:
    """Yield frames from a JSON-lines recording, skipping unparseable lines."""
    with open(frames_path, 'r') as f:
        for line_no, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                frame = HandFrame.from_dict(json.loads(line))
            except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping line {line_no}: {type(e).__name__}: {e}")
                continue
            yield frame


def _log_window(result: ClassificationResult, session: SessionAnalysis) -> None:
    summary_tier = session.summary.tier.value if session.summary else 'NONE'
    logger.info(
        f"t={result.timestamp:.2f}s window tier={result.tier.value} score={result.score:.3f} "
        f"(session tier={summary_tier})"
    )


def run_replay(frames_path: str, config: Dict, output_dir: str) -> Dict:
    """
    Replay a recorded session and export its report.

    Args:
        frames_path: JSON-lines recording of HandFrames
        config: Configuration dictionary
        output_dir: Directory for the report

    Returns:
        Dict with 'report_path' and 'record'
    """
    logger.info("=" * 80)
    logger.info("MOTION SCOPE - Repetitive Motion Replay")
    logger.info("=" * 80)

    engine = MotionEngine.from_config(config)
    engine.on_result(_log_window)

    pushed = 0
    last_cycle = None
    for frame in read_frames(frames_path):
        engine.push_frame(frame)
        last_cycle = engine.tick(frame.timestamp * 1000.0)
        pushed += 1

    if pushed == 0:
        logger.warning(f"No frames read from {frames_path}")
    elif last_cycle is None:
        # Cover the frames that arrived after the last scheduled cycle
        engine.analyze()

    logger.info(f"Replayed {pushed} frames ({engine.dropped_count} dropped as malformed)")

    session_id = f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    record = build_session_record(
        engine.session_analysis(),
        engine.detection_stats(),
        session_id=session_id,
        include_windows=True
    )

    report_path = save_session_report(record, Path(output_dir) / REPORT_FILENAME)
    engine.close()

    return {'report_path': report_path, 'record': record}


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Motion Scope - Repetitive Motion Detection Replay',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage
  python main.py --frames session.jsonl --output results/

  # With custom calibration
  python main.py --frames session.jsonl --config custom.yaml --output results/
        """
    )

    parser.add_argument(
        '--frames',
        type=str,
        required=True,
        help='Path to JSON-lines recording of hand frames'
    )

    parser.add_argument(
        '--config',
        type=str,
        default='configs/motion_analysis.yaml',
        help='Path to configuration YAML file (default: configs/motion_analysis.yaml)'
    )

    parser.add_argument(
        '--output',
        type=str,
        default='data/outputs',
        help='Output directory for the report (default: data/outputs)'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    frames_path = Path(args.frames)
    if not frames_path.exists():
        logger.error(f"Frames file not found: {frames_path}")
        sys.exit(1)

    config_path = Path(args.config)
    if not config_path.exists():
        logger.error(f"Config file not found: {config_path}")
        sys.exit(1)

    config = load_config(str(config_path))

    try:
        result = run_replay(
            frames_path=str(frames_path),
            config=config,
            output_dir=args.output
        )

        logger.info(f"Report: {result['report_path']}")
        logger.info(f"Session tier: {result['record']['tier']}")
        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Replay interrupted by user")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Replay failed: {type(e).__name__}: {e}")
        logger.exception("Full traceback:")
        sys.exit(1)


if __name__ == '__main__':
    main()
