"""
Run a Monte Carlo simulation of the adaptive screener.

Draws simulated examinees from a normal ability distribution, runs each one
through the real session manager against a synthetic question bank, and logs
test length, precision and stop-reason statistics.

Usage:
    python scripts/run_adaptive_simulation.py --examinees 500 --grade 5

Exit codes:
    0 - Success
    2 - Simulation error
    3 - Configuration/import error
"""
import argparse
import json
import logging
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

logger = logging.getLogger("adaptive_simulation")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Simulate adaptive screener sessions"
    )
    parser.add_argument(
        "--examinees", type=int, default=200, help="Number of simulated examinees"
    )
    parser.add_argument("--subject", default="Mathematics", help="Subject name")
    parser.add_argument("--grade", default="5", help="Grade level (K, 1..12)")
    parser.add_argument(
        "--per-strand", type=int, default=20, help="Questions generated per strand"
    )
    parser.add_argument("--theta-mean", type=float, default=0.0)
    parser.add_argument("--theta-sd", type=float, default=1.0)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument(
        "--json", action="store_true", help="Print the summary as one JSON line"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    # Defer imports so config/import failures produce exit code 3
    try:
        from screener.core.adaptive.simulation import SimulationConfig, run_simulation
        from screener.core.logging_config import setup_logging
    except Exception as exc:
        logger.error("Failed to import required modules: %s", exc)
        return 3

    setup_logging()

    try:
        config = SimulationConfig(
            n_examinees=args.examinees,
            theta_mean=args.theta_mean,
            theta_sd=args.theta_sd,
            seed=args.seed,
            subject=args.subject,
            grade_level=args.grade,
            questions_per_strand=args.per_strand,
        )
        result = run_simulation(config)
    except Exception as exc:
        logger.error("Adaptive simulation failed: %s", exc)
        return 2

    logger.info(
        "Simulated %d examinees: mean_questions=%.1f  mean_SE=%.3f  "
        "bias=%+.3f  RMSE=%.3f",
        len(result.examinee_results),
        result.mean_questions,
        result.mean_se,
        result.mean_bias,
        result.rmse,
    )
    for reason, count in sorted(
        result.stopping_reason_counts.items(), key=lambda kv: -kv[1]
    ):
        logger.info("  %-55s %d", reason, count)

    if args.json:
        summary = {
            "type": "ADAPTIVE_SIMULATION",
            "n_examinees": len(result.examinee_results),
            "subject": config.subject,
            "grade_level": config.grade_level,
            "mean_questions": result.mean_questions,
            "mean_se": result.mean_se,
            "mean_bias": result.mean_bias,
            "rmse": result.rmse,
            "stopping_reason_counts": result.stopping_reason_counts,
        }
        print(json.dumps(summary), flush=True)

    return 0


if __name__ == "__main__":
    sys.exit(main())
