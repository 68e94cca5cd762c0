"""
Decision Logger - records every blocking decision for offline tuning.

Each classification is written as one JSONL line holding all intermediate
predicate values, so heuristics can be re-evaluated against real sessions
(see analyze_logs.py).
"""
import os
import json
import hashlib
import logging
from datetime import datetime
from typing import List, Dict, Optional

logger = logging.getLogger(__name__)


def compute_screen_signature(texts: List[str]) -> str:
    """Compute a stable hash signature for a screen's text snapshot.

    Identifies "same screen" across sessions even when label order or
    counters differ slightly.

    Args:
        texts: Labels from collect_all_texts().

    Returns:
        16-character hex string signature.
    """
    if not texts:
        return "empty_screen_000"

    # Normalize, dedupe and sort for determinism
    normalized = sorted({t.lower().strip()[:30] for t in texts if t.strip()})

    # Take first 40 to bound size
    sig_str = '|'.join(normalized[:40])
    return hashlib.sha1(sig_str.encode()).hexdigest()[:16]


class DecisionLogger:
    """Logs classification decisions to a JSONL file."""

    SAMPLE_SIZE = 12

    def __init__(self, log_dir: str = "decision_logs", session_name: str = "session"):
        """Initialize logger for a monitoring session.

        Args:
            log_dir: Directory to store log files.
            session_name: Prefix for the log filename.
        """
        self.log_dir = log_dir
        self.session_start = datetime.now()
        self.decision_count = 0

        os.makedirs(log_dir, exist_ok=True)

        timestamp = self.session_start.strftime("%Y%m%d_%H%M%S")
        self.log_file = os.path.join(log_dir, f"{session_name}_{timestamp}.jsonl")

        self._file = open(self.log_file, 'a', encoding='utf-8')

        self._write_entry({
            'event': 'session_start',
            'timestamp': self.session_start.isoformat(),
        })

    def log_decision(
        self,
        package: str,
        event_type: str,
        class_name: Optional[str],
        texts: List[str],
        rule: str,
        blocked: bool,
        predicates: Dict[str, bool],
        outcome: Optional[str] = None,
    ):
        """Log a single classification.

        Args:
            package: App the event came from.
            event_type: Event kind name.
            class_name: Class of the view that raised the event.
            texts: Labels the classifier saw.
            rule: Rule that decided.
            blocked: Classifier verdict.
            predicates: All intermediate predicate values.
            outcome: Dispatcher outcome name, None if nothing was dispatched.
        """
        self.decision_count += 1

        self._write_entry({
            'event': 'decision',
            'timestamp': datetime.now().isoformat(),
            'decision': self.decision_count,
            'package': package,
            'event_type': event_type,
            'class_name': class_name,
            'rule': rule,
            'blocked': blocked,
            'predicates': predicates,
            'outcome': outcome,
            'screen_signature': compute_screen_signature(texts),
            'sample': [t[:50] for t in texts[:self.SAMPLE_SIZE]],
        })

    def _write_entry(self, entry: Dict):
        try:
            self._file.write(json.dumps(entry, ensure_ascii=False) + '\n')
            self._file.flush()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write decision log entry: {e}")

    def close(self):
        """Close the log file."""
        if not self._file.closed:
            self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
