"""
Decision Log Analyzer

Parses JSONL decision logs written by DecisionLogger and summarizes, per
app: how often each rule decided, how many block actions were performed or
suppressed, and how often each predicate was true. Used to tune the phrase
tables in screen_detector.py.
"""
import os
import sys
import json
import glob
import logging
from collections import defaultdict, Counter
from typing import Dict, List, Any

logger = logging.getLogger(__name__)


def parse_decision_logs(log_dir: str = "decision_logs") -> List[Dict]:
    """Parse all JSONL decision logs from directory.

    Args:
        log_dir: Directory containing JSONL logs.

    Returns:
        List of all log entries across all files (malformed lines skipped).
    """
    all_entries = []
    log_files = sorted(glob.glob(os.path.join(log_dir, "*.jsonl")))

    logger.info(f"Found {len(log_files)} log files in {log_dir}/")

    for log_file in log_files:
        try:
            with open(log_file, 'r', encoding='utf-8') as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entry = json.loads(line)
                    except json.JSONDecodeError:
                        logger.debug(f"Skipping malformed line {line_num} in {log_file}")
                        continue
                    entry['_source_file'] = os.path.basename(log_file)
                    all_entries.append(entry)
        except OSError as e:
            logger.error(f"Error reading {log_file}: {e}")

    return all_entries


def summarize_decisions(entries: List[Dict]) -> Dict[str, Dict[str, Any]]:
    """Aggregate decision entries per package.

    Returns:
        Dict mapping package -> {decisions, blocked, performed, suppressed,
        rules (Counter), predicate_rates (name -> fraction true)}.
    """
    data = defaultdict(lambda: {
        'decisions': 0,
        'blocked': 0,
        'performed': 0,
        'suppressed': 0,
        'rules': Counter(),
        'predicate_true': Counter(),
        'screens': set(),
    })

    for entry in entries:
        if entry.get('event') != 'decision':
            continue

        pkg = data[entry.get('package', 'unknown')]
        pkg['decisions'] += 1
        pkg['rules'][entry.get('rule', 'unknown')] += 1
        if entry.get('blocked'):
            pkg['blocked'] += 1
        if entry.get('outcome') == 'PERFORMED':
            pkg['performed'] += 1
        elif entry.get('outcome') == 'SUPPRESSED':
            pkg['suppressed'] += 1
        if entry.get('screen_signature'):
            pkg['screens'].add(entry['screen_signature'])

        for name, value in (entry.get('predicates') or {}).items():
            # Make sure never-true predicates still show up
            pkg['predicate_true'][name] += 1 if value else 0

    report = {}
    for package, pkg in data.items():
        total = pkg['decisions']
        report[package] = {
            'decisions': total,
            'blocked': pkg['blocked'],
            'performed': pkg['performed'],
            'suppressed': pkg['suppressed'],
            'unique_screens': len(pkg['screens']),
            'rules': pkg['rules'],
            'predicate_rates': {name: count / total for name, count in pkg['predicate_true'].items()},
        }
    return report


def print_summary(report: Dict[str, Dict[str, Any]]):
    """Print a human readable summary."""
    if not report:
        print("No decisions found.")
        return

    for package, stats in sorted(report.items()):
        print("\n" + "=" * 60)
        print(package)
        print("=" * 60)
        print(f"  Decisions:      {stats['decisions']}")
        print(f"  Blocked:        {stats['blocked']}")
        print(f"  Performed:      {stats['performed']}")
        print(f"  Suppressed:     {stats['suppressed']}")
        print(f"  Unique screens: {stats['unique_screens']}")

        print("  Rules:")
        for rule, count in stats['rules'].most_common():
            print(f"    {rule:<20} {count}")

        print("  Predicates (fraction true):")
        for name, rate in sorted(stats['predicate_rates'].items()):
            print(f"    {name:<20} {rate:.1%}")


def main(log_dir: str = "decision_logs") -> int:
    """Main analysis entry point."""
    entries = parse_decision_logs(log_dir)
    if not entries:
        print(f"No entries found. Make sure {log_dir}/ contains JSONL files.")
        return 1

    print_summary(summarize_decisions(entries))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else "decision_logs"))
