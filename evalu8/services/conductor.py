"""Interview conductor: produces the interviewer's next turn.

The conductor keeps no state between turns. Everything it needs is the job,
the persisted transcript (including the candidate's latest message) and the
injected model gateway.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..models.flag import SEVERITIES
from .model_gateway import ModelGatewayError

logger = logging.getLogger(__name__)

STAGES = ("introduction", "questioning", "follow_up", "closing")
DEFAULT_STAGE = "questioning"
CLARIFYING_PROMPT = "Could you elaborate on that?"
FALLBACK_MESSAGE = ("Thank you for your response. Could you tell me more about how you would "
                    "handle a challenging situation in this role?")

TURN_SCHEMA = """{
  "assistant_message": "Your message to the candidate",
  "detected_flags": [{"severity": "low|medium|high", "category": "category name", "excerpt": "relevant quote or observation"}],
  "stage": "introduction|questioning|follow_up|closing"
}"""


@dataclass
class DetectedFlag:
    severity: str
    category: str
    excerpt: str


@dataclass
class TurnResult:
    assistant_message: str
    stage: str = DEFAULT_STAGE
    flags: List[DetectedFlag] = field(default_factory=list)


def count_questions(history: Sequence[Any]) -> int:
    """Interviewer turns already in the transcript."""
    return sum(1 for m in history if m.role == "assistant")


def is_closing_eligible(question_count: int, num_questions: int) -> bool:
    return question_count >= num_questions - 1


def build_interview_prompt(job, question_count: int) -> str:
    max_questions = job.num_questions or 8
    simulation_type = job.simulation_type or "problem_solving"
    seniority = job.seniority_level or "mid"
    time_limit = job.time_limit_minutes or 15

    lines = [
        f'You are an AI interviewer conducting a workplace simulation interview for the role: "{job.title}".',
        "",
        f"Job Description: {job.description}",
        f"Simulation Type: {simulation_type}",
        f"Seniority Level: {seniority}",
        f"Time Limit: {time_limit} minutes",
        f"Maximum Questions: {max_questions}",
        f"Questions Asked So Far: {question_count}",
        "",
        "Your role is to simulate real workplace scenarios and evaluate the candidate's "
        "decision-making abilities. Follow these rules:",
        "1. Ask ONE question at a time based on realistic workplace scenarios relevant to this role",
        "2. Adapt your follow-up questions based on the candidate's latest response",
        "3. Watch for red flags: inconsistencies, evasiveness, shallow answers, unprofessional tone, poor judgment",
        "4. Be professional but probing - dig deeper when answers are vague",
    ]
    if question_count == 0:
        lines.append("5. This is the first interaction: introduce the simulation scenario and ask the first question")
    else:
        lines.append("5. Continue the simulation from where the conversation left off")
    if is_closing_eligible(question_count, max_questions):
        lines.append(f"6. You have reached the question budget ({question_count} of {max_questions}); "
                     "wrap up the interview gracefully")
    else:
        lines.append(f"6. Once you have asked {max_questions - 1} questions, wrap up the interview gracefully")
    lines += [
        "",
        "Determine the current stage:",
        '- "introduction" if this is the first interaction',
        '- "questioning" if actively asking scenario questions',
        '- "follow_up" if probing deeper on a previous answer',
        f'- "closing" if wrapping up ({question_count} >= {max_questions - 1})',
        "",
        "Flag severities are low, medium or high. If no flags are detected, return an empty array for detected_flags.",
    ]
    return "\n".join(lines)


def _normalize_flag(raw) -> Optional[DetectedFlag]:
    if not isinstance(raw, dict):
        return None
    severity = str(raw.get("severity") or "").strip().lower()
    if severity not in SEVERITIES:
        severity = "low"
    category = raw.get("category")
    excerpt = raw.get("excerpt")
    category = category.strip() if isinstance(category, str) else ""
    excerpt = excerpt.strip() if isinstance(excerpt, str) else ""
    if not category and not excerpt:
        return None
    return DetectedFlag(severity=severity, category=category[:120] or "general", excerpt=excerpt)


def normalize_turn(data: Dict[str, Any]) -> TurnResult:
    """Coerce a model reply into a TurnResult that is safe to persist."""
    if not isinstance(data, dict):
        data = {}
    message = data.get("assistant_message")
    if not isinstance(message, str) or not message.strip():
        message = CLARIFYING_PROMPT

    raw_flags = data.get("detected_flags")
    flags = []
    if isinstance(raw_flags, list):
        for raw in raw_flags:
            f = _normalize_flag(raw)
            if f is not None:
                flags.append(f)

    stage = data.get("stage")
    if stage not in STAGES:
        stage = DEFAULT_STAGE
    return TurnResult(assistant_message=message.strip(), stage=stage, flags=flags)


def fallback_turn() -> TurnResult:
    return TurnResult(assistant_message=FALLBACK_MESSAGE, stage=DEFAULT_STAGE, flags=[])


class InterviewConductor:
    def __init__(self, gateway):
        self.gateway = gateway

    def next_turn(self, job, history: Sequence[Any]) -> TurnResult:
        """Return the interviewer's reply to the last candidate message in `history`.

        `history` is the full ordered transcript including the new candidate
        turn, so the question count is taken over every assistant message in it.
        """
        question_count = count_questions(history)
        prompt = build_interview_prompt(job, question_count)
        turns = [{"role": m.role, "content": m.content} for m in history]
        try:
            data = self.gateway.complete(prompt, turns, TURN_SCHEMA)
            return normalize_turn(data)
        except ModelGatewayError as e:
            logger.warning("interview turn failed for job %s (%s); using fallback turn", getattr(job, "id", None), e)
            return fallback_turn()
        except Exception:
            # a single bad turn must not break the interview
            logger.exception("unexpected error in interview turn for job %s", getattr(job, "id", None))
            return fallback_turn()
