"""Summarize a stored color vision model: confusions, hotspots, progress."""

from __future__ import annotations

import argparse
import importlib
import json
import logging
from dataclasses import asdict

from cvdlab.bayesian.model import ColorVisionModel
from cvdlab.bayesian.state import SnapshotStore
from cvdlab.config import CONFUSION_THRESHOLD, STATE_DIR, setup_logging
from cvdlab.core.exceptions import InvalidInput
from cvdlab.core.types import CvdType
from cvdlab.selection.selector import AdaptiveSelector
from cvdlab.selection.stimulus import TransformConfusionSimulator

logger = logging.getLogger(__name__)


class _MissingTransform:
    """Stands in when no colorblind transform was given on the command line."""

    def __call__(self, hex_color, cvd_type):
        raise InvalidInput("No colorblind transform configured (use --transform)")


class _ReportOnlyGenerator:
    """Generator for a selector that is only asked for stats and mode hints."""

    def generate_trial(self, reference_color, cvd_type, difficulty):
        raise InvalidInput("The summary command does not generate trials")


def load_transform(target: str):
    """Import ``package.module:function``."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise InvalidInput(f"Transform must look like 'module:function', got {target!r}")
    return getattr(importlib.import_module(module_name), attr)


def summarize(model: ColorVisionModel, threshold: float, with_severity: bool) -> dict:
    selector = AdaptiveSelector(model, _ReportOnlyGenerator())
    stats = selector.get_stats()
    return {
        "cvd_type": model.cvd_type.value,
        "stats": {**asdict(stats), "mode": stats.mode.value},
        "suggested_mode": selector.suggest_mode().value,
        "confused_pairs": [asdict(p) for p in model.get_confused_pairs(threshold)],
        "hotspots": model.get_confusion_hotspots(threshold),
        "severity": model.estimate_severity() if with_severity else None,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Summarize a stored color vision model")
    parser.add_argument("--user", default="local", help="User id of the snapshot")
    parser.add_argument("--cvd-type", required=True, choices=[c.value for c in CvdType],
                        help="CVD type the model was tested for")
    parser.add_argument("--state-dir", default=STATE_DIR, help="Snapshot directory")
    parser.add_argument("--threshold", type=float, default=CONFUSION_THRESHOLD,
                        help="Confusion probability threshold")
    parser.add_argument("--transform", default=None,
                        help="Colorblind transform 'module:function' (enables severity)")
    args = parser.parse_args()

    setup_logging()

    snapshot = SnapshotStore(args.state_dir).load(args.user, args.cvd_type)
    if snapshot is None:
        logger.error("No %s snapshot for user %s in %s", args.cvd_type, args.user, args.state_dir)
        raise SystemExit(1)

    transform = load_transform(args.transform) if args.transform else _MissingTransform()
    model = ColorVisionModel(snapshot.cvd_type, TransformConfusionSimulator(transform))
    model.import_state(snapshot)

    report = summarize(model, args.threshold, with_severity=args.transform is not None)
    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()
