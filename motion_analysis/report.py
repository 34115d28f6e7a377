"""
Session report export for the reporting collaborator.

Produces a flat, versioned record of the session summary plus detection
statistics (tier as string, score as float, frequencies as a small map,
recommendations as a list). Field names are stable across schema versions;
new fields may be added, existing ones are not renamed.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .data_models import DetectionStats, SessionAnalysis
from .enums import MotionTier

logger = logging.getLogger(__name__)

REPORT_SCHEMA_VERSION = "1.0"
NO_DATA_DESCRIPTION = "No data available"


def build_session_record(
    analysis: SessionAnalysis,
    stats: DetectionStats,
    session_id: Optional[str] = None,
    include_windows: bool = False
) -> Dict[str, Any]:
    """
    Flatten a session into a JSON-serializable record.

    Args:
        analysis: Session snapshot from the engine
        stats: Detection statistics from the engine
        session_id: Optional identifier of the screening session
        include_windows: Also list every window result

    Returns:
        Report dictionary
    """
    summary = analysis.summary

    record = {
        'schema_version': REPORT_SCHEMA_VERSION,
        'session_id': session_id,
        'generated_at': datetime.now().isoformat(),
        'tier': summary.tier.value if summary else MotionTier.NONE.value,
        'score': float(summary.score) if summary else 0.0,
        'description': summary.description if summary else NO_DATA_DESCRIPTION,
        'dominant_frequencies': (
            {k: float(v) for k, v in summary.dominant_frequencies.items()} if summary else {}
        ),
        'patterns': dict(summary.patterns) if summary else {},
        'recommendations': list(stats.recommendations),
        'sufficient_data': bool(summary.sufficient) if summary else False,
        'window_count': int(stats.window_count),
        'active_fraction': float(stats.active_fraction),
        'frames_processed': int(stats.frames_processed),
        'has_repetitive_motion': bool(stats.has_repetitive_motion),
        'severity': stats.severity.value,
    }

    if include_windows:
        record['windows'] = [r.to_dict() for r in analysis.window_results]

    return record


def save_session_report(record: Dict[str, Any], output_path) -> str:
    """
    Write a session record as JSON.

    Returns:
        Path to the written file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        json.dump(record, f, indent=2)

    logger.info(f"Session report written: {output_path} (tier={record.get('tier')})")

    return str(output_path)
