"""Evaluation scorer: one structured scoring pass over a finished transcript."""

import json
import logging
import math
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Sequence

from ..models.evaluation import RECOMMENDATIONS
from .model_gateway import ModelGatewayError

logger = logging.getLogger(__name__)

# model JSON key -> Scorecard attribute
SCORE_FIELDS = {
    "overallScore": "overall_score",
    "decisionQuality": "decision_quality",
    "communicationClarity": "communication_clarity",
    "structuredProcess": "structured_process",
    "riskAwareness": "risk_awareness",
    "professionalJudgment": "professional_judgment",
}
DEFAULT_RECOMMENDATION = "maybe"
DEFAULT_SUMMARY = "Evaluation completed."
FALLBACK_SUMMARY = ("The evaluation could not be fully completed due to a processing error. "
                    "A manual review is recommended.")

SCORECARD_SCHEMA = """{
  "overallScore": <number 0-100>,
  "decisionQuality": <number 0-100>,
  "communicationClarity": <number 0-100>,
  "structuredProcess": <number 0-100>,
  "riskAwareness": <number 0-100>,
  "professionalJudgment": <number 0-100>,
  "recommendation": "<strong_hire|hire|maybe|no_hire|strong_no_hire>",
  "summary": "<2-3 paragraph evaluation summary>",
  "strengths": ["<strength 1>", "<strength 2>", ...],
  "concerns": ["<concern 1>", "<concern 2>", ...]
}"""


@dataclass
class Scorecard:
    overall_score: int
    decision_quality: int
    communication_clarity: int
    structured_process: int
    risk_awareness: int
    professional_judgment: int
    recommendation: str = DEFAULT_RECOMMENDATION
    summary: str = DEFAULT_SUMMARY
    strengths: List[str] = field(default_factory=list)
    concerns: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def clamp_score(value) -> int:
    """Round into an integer in [0, 100]; anything non-numeric scores 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        # big ints would overflow a float conversion
        return max(0, min(100, value))
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if not isinstance(value, float) or math.isnan(value):
        return 0
    return int(round(max(0.0, min(100.0, value))))


def _string_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    out = []
    for item in value:
        if isinstance(item, str):
            item = item.strip()
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            item = str(item)
        else:
            continue
        if item:
            out.append(item)
    return out


def normalize_scorecard(data: Dict[str, Any]) -> Scorecard:
    if not isinstance(data, dict):
        data = {}
    scores = {attr: clamp_score(data.get(key)) for key, attr in SCORE_FIELDS.items()}
    recommendation = data.get("recommendation")
    if isinstance(recommendation, str):
        recommendation = recommendation.strip().lower()
    if recommendation not in RECOMMENDATIONS:
        recommendation = DEFAULT_RECOMMENDATION
    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        summary = DEFAULT_SUMMARY
    return Scorecard(
        recommendation=recommendation,
        summary=summary.strip(),
        strengths=_string_list(data.get("strengths")),
        concerns=_string_list(data.get("concerns")),
        **scores,
    )


def fallback_scorecard() -> Scorecard:
    return Scorecard(
        overall_score=50,
        decision_quality=50,
        communication_clarity=50,
        structured_process=50,
        risk_awareness=50,
        professional_judgment=50,
        recommendation=DEFAULT_RECOMMENDATION,
        summary=FALLBACK_SUMMARY,
        strengths=["Completed the interview simulation"],
        concerns=["Automated evaluation encountered an error"],
    )


def render_transcript(history: Sequence[Any]) -> str:
    return "\n\n".join(
        f"{'Interviewer' if m.role == 'assistant' else 'Candidate'}: {m.content}" for m in history
    )


def build_evaluation_prompt(job) -> str:
    lines = [
        f'You are an expert hiring evaluator. Analyze the following interview transcript for the role: "{job.title}".',
        "",
        f"Job Description: {job.description}",
        f"Simulation Type: {job.simulation_type}",
        f"Seniority Level: {job.seniority_level}",
        "",
        "Evaluate the candidate on these dimensions (score each 0-100):",
        "1. Decision Quality - How sound were the candidate's decisions in the scenarios?",
        "2. Communication Clarity - How clearly did the candidate express ideas?",
        "3. Structured Process - Did the candidate use a structured approach to problem-solving?",
        "4. Risk Awareness - Did the candidate identify and address risks appropriately?",
        "5. Professional Judgment - Did the candidate demonstrate appropriate professional standards?",
        "",
    ]
    if job.scoring_weights:
        lines.append("Also calculate an overall score as the weighted average of the above using these weights: "
                     + json.dumps(job.scoring_weights, sort_keys=True))
    else:
        lines.append("Also calculate an overall score (weighted average of above).")
    lines += [
        "",
        'Provide a recommendation: "strong_hire", "hire", "maybe", "no_hire", or "strong_no_hire"',
    ]
    return "\n".join(lines)


class EvaluationScorer:
    def __init__(self, gateway):
        self.gateway = gateway

    def score(self, job, history: Sequence[Any]) -> Scorecard:
        """Score the whole transcript. Always returns a complete scorecard."""
        prompt = build_evaluation_prompt(job)
        turns = [{"role": "user", "content": "Interview Transcript:\n\n" + render_transcript(history)}]
        try:
            data = self.gateway.complete(prompt, turns, SCORECARD_SCHEMA)
            return normalize_scorecard(data)
        except ModelGatewayError as e:
            logger.warning("evaluation failed for job %s (%s); using neutral scorecard", getattr(job, "id", None), e)
            return fallback_scorecard()
        except Exception:
            logger.exception("unexpected error while evaluating for job %s", getattr(job, "id", None))
            return fallback_scorecard()
