"""
Simulation harness for validating the adaptive screener.

Simulates N examinees with known ability taking the screener through the
real AdaptiveSessionManager and collects metrics to check the stopping rules,
precision target and strand coverage against a synthetic question bank.

Response model (Rasch, unit discrimination):
    P(correct | theta) = 1 / (1 + exp(-(theta_true - theta_item)))

    where theta_item is the difficulty anchor of the question's level.

Key Features:
- Monte Carlo simulation with configurable N and theta distribution
- Reproducible runs (numpy Generator seeded from the config)
- Stop-reason distribution, mean test length, mean SE, bias and RMSE
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from screener.core.adaptive.ability_model import difficulty_to_theta
from screener.core.adaptive.content_balancing import get_required_strands
from screener.core.adaptive.engine import AdaptiveSessionManager
from screener.core.adaptive.stopping_rules import TerminationCriteria
from screener.models.enums import DifficultyLevel, QuestionFormat
from screener.models.question import CandidateQuestion

logger = logging.getLogger(__name__)

# Used when the subject has no required-strand table
DEFAULT_SIMULATION_STRANDS = ["Strand A", "Strand B", "Strand C", "Strand D"]

# Simulated examinees answer instantly-ish; only the total matters for reports
SIMULATED_SECONDS_PER_QUESTION = 30.0


@dataclass
class SimulationConfig:
    """Configuration for an adaptive screener simulation run."""

    n_examinees: int = 200  # Number of simulated examinees
    theta_mean: float = 0.0  # Mean of true theta distribution
    theta_sd: float = 1.0  # SD of true theta distribution
    seed: int = 42  # Random seed for reproducibility
    subject: str = "Mathematics"
    grade_level: str = "5"
    questions_per_strand: int = 20  # Pool size per strand
    criteria: Optional[TerminationCriteria] = None  # None -> from settings


@dataclass
class ExamineeResult:
    """Per-examinee simulation results."""

    true_theta: float
    estimated_theta: float
    final_se: float
    bias: float  # estimated_theta - true_theta
    questions_answered: int
    stopping_reason: str
    strands_touched: Dict[str, int] = field(default_factory=dict)


@dataclass
class SimulationResult:
    """Aggregate simulation results."""

    config: SimulationConfig
    examinee_results: List[ExamineeResult]
    mean_questions: float
    mean_se: float
    mean_bias: float
    rmse: float
    stopping_reason_counts: Dict[str, int]


def generate_item_pool(
    subject: str,
    grade_level: str,
    questions_per_strand: int = 20,
    seed: int = 42,
) -> List[CandidateQuestion]:
    """
    Generate a synthetic question bank for one subject and grade.

    Each strand gets questions_per_strand questions with difficulty drawn
    uniformly from the five levels and formats assigned round-robin. Every
    question is aligned to one synthetic standard per strand.

    Args:
        subject: Subject whose required strands populate the bank.
        grade_level: Grade stamped on every question.
        questions_per_strand: Questions generated per strand.
        seed: Random seed for reproducibility.

    Returns:
        List of CandidateQuestion with ids "sim-0001", "sim-0002", ...
    """
    strands = get_required_strands(subject) or DEFAULT_SIMULATION_STRANDS
    formats = list(QuestionFormat)

    rng = np.random.default_rng(seed)
    pool = []
    question_number = 1

    for strand_index, strand in enumerate(strands):
        standard = f"{grade_level}.S{strand_index + 1}"
        for i in range(questions_per_strand):
            difficulty = DifficultyLevel(int(rng.integers(1, 6)))
            pool.append(
                CandidateQuestion(
                    id=f"sim-{question_number:04d}",
                    strand=strand,
                    format=formats[i % len(formats)],
                    difficulty=difficulty,
                    grade_level=grade_level,
                    standards=(standard,),
                    subject=subject,
                )
            )
            question_number += 1

    logger.info(
        f"Generated question pool: {len(pool)} questions across "
        f"{len(strands)} strands ({questions_per_strand} per strand)"
    )
    return pool


def probability_correct(true_theta: float, question: CandidateQuestion) -> float:
    """Rasch probability of a correct answer, computed without overflow."""
    logit = true_theta - difficulty_to_theta(question.difficulty)
    if logit >= 0:
        return 1.0 / (1.0 + math.exp(-logit))
    exp_logit = math.exp(logit)
    return exp_logit / (1.0 + exp_logit)


def simulate_examinee(
    true_theta: float,
    pool: List[CandidateQuestion],
    manager: AdaptiveSessionManager,
    rng: np.random.Generator,
    subject: str,
    grade_level: str,
    student_id: str = "simulated",
) -> ExamineeResult:
    """
    Run one simulated examinee through a complete screener.

    Loop: select -> draw Bernoulli answer -> submit -> stop or continue.
    """
    lookup = {q.id: q for q in pool}
    session, selection = manager.start(student_id, subject, grade_level, pool)
    stop_reason = "no_items"

    while selection is not None:
        question = selection.selected_question
        is_correct = bool(rng.random() < probability_correct(true_theta, question))

        step = manager.submit_answer(
            session,
            question,
            is_correct,
            SIMULATED_SECONDS_PER_QUESTION,
            pool,
            lookup,
        )
        if step.finished:
            stop_reason = step.decision.reason
            break
        selection = step.next_selection

    theta = session.current_ability_estimate
    return ExamineeResult(
        true_theta=true_theta,
        estimated_theta=theta,
        final_se=session.standard_error,
        bias=theta - true_theta,
        questions_answered=session.num_questions,
        stopping_reason=stop_reason,
        strands_touched=dict(session.strands_touched),
    )


def run_simulation(
    config: Optional[SimulationConfig] = None,
    pool: Optional[List[CandidateQuestion]] = None,
) -> SimulationResult:
    """
    Run the Monte Carlo simulation.

    For each simulated examinee:
    1. Draw true_theta from N(config.theta_mean, config.theta_sd)
    2. Administer the screener until it stops or the pool runs out
    3. Record ExamineeResult

    Args:
        config: Simulation configuration; defaults to SimulationConfig().
        pool: Question bank; generated from the config when omitted.

    Returns:
        SimulationResult with per-examinee and aggregate metrics.

    Raises:
        ValueError: If config.n_examinees is not positive.
    """
    if config is None:
        config = SimulationConfig()
    if config.n_examinees <= 0:
        raise ValueError(f"n_examinees must be positive, got {config.n_examinees}")

    if pool is None:
        pool = generate_item_pool(
            config.subject,
            config.grade_level,
            config.questions_per_strand,
            seed=config.seed,
        )

    logger.info(
        f"Starting adaptive simulation: N={config.n_examinees}, "
        f"theta ~ N({config.theta_mean}, {config.theta_sd}²), "
        f"{config.subject} grade {config.grade_level}"
    )

    rng = np.random.default_rng(config.seed)
    manager = AdaptiveSessionManager(config.criteria)

    examinee_results = []
    for examinee_id in range(1, config.n_examinees + 1):
        true_theta = float(rng.normal(loc=config.theta_mean, scale=config.theta_sd))
        examinee_results.append(
            simulate_examinee(
                true_theta,
                pool,
                manager,
                rng,
                config.subject,
                config.grade_level,
                student_id=f"sim-student-{examinee_id}",
            )
        )

        if examinee_id % 100 == 0:
            logger.info(f"Completed {examinee_id}/{config.n_examinees} examinees")

    return _aggregate_results(config, examinee_results)


def _aggregate_results(
    config: SimulationConfig,
    examinee_results: List[ExamineeResult],
) -> SimulationResult:
    questions = [r.questions_answered for r in examinee_results]
    standard_errors = [r.final_se for r in examinee_results]
    biases = [r.bias for r in examinee_results]

    mean_questions = float(np.mean(questions))
    mean_se = float(np.mean(standard_errors))
    mean_bias = float(np.mean(biases))
    rmse = float(np.sqrt(np.mean([b**2 for b in biases])))

    stopping_reason_counts: Dict[str, int] = {}
    for result in examinee_results:
        reason = result.stopping_reason
        stopping_reason_counts[reason] = stopping_reason_counts.get(reason, 0) + 1

    logger.info(
        f"Simulation complete: mean_questions={mean_questions:.1f}, "
        f"mean_SE={mean_se:.3f}, bias={mean_bias:+.3f}, RMSE={rmse:.3f}"
    )

    return SimulationResult(
        config=config,
        examinee_results=examinee_results,
        mean_questions=mean_questions,
        mean_se=mean_se,
        mean_bias=mean_bias,
        rmse=rmse,
        stopping_reason_counts=stopping_reason_counts,
    )
