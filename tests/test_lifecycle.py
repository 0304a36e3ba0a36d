import pytest

from evalu8.errors import InterviewClosed, InvalidRequest, NotFound, Forbidden, TurnInProgress
from evalu8.extensions import db, turn_lock
from evalu8.models.application import Application
from evalu8.models.evaluation import Evaluation
from evalu8.models.flag import Flag
from evalu8.models.message import Message
from evalu8.services.model_gateway import ModelServiceError

CANDIDATE = {"candidate_name": "Dana Park", "candidate_email": "dana@example.com", "years_experience": 6}

SCORECARD = {
    "overallScore": 77, "decisionQuality": 80, "communicationClarity": 75, "structuredProcess": 70,
    "riskAwareness": 72, "professionalJudgment": 85, "recommendation": "hire",
    "summary": "Strong incident handling.", "strengths": ["Prioritises well"], "concerns": ["Terse updates"],
}


@pytest.fixture
def application(lifecycle, job):
    return lifecycle.start_application(job.job_token, CANDIDATE)


def test_intake_creates_in_progress_application(lifecycle, job):
    app_row = lifecycle.start_application(job.job_token, dict(CANDIDATE, location=""))
    assert app_row.status == "in_progress"
    assert app_row.job_id == job.id
    assert app_row.location is None
    assert app_row.years_experience == 6


def test_intake_rejects_unknown_or_inactive_job(lifecycle, make_job):
    with pytest.raises(NotFound):
        lifecycle.start_application("nope", CANDIDATE)
    inactive = make_job(is_active=False)
    with pytest.raises(NotFound):
        lifecycle.start_application(inactive.job_token, CANDIDATE)


def test_first_turn_uses_zero_question_count(lifecycle, application, gateway):
    gateway.queue({"assistant_message": "Welcome. A warehouse fire alarm just went off...",
                   "detected_flags": [], "stage": "introduction"})
    outcome = lifecycle.send_message(application.id, "Hi, ready to start.")

    assert "Questions Asked So Far: 0" in gateway.calls[0]["system"]
    assert outcome.stage == "introduction"
    assert outcome.questions_asked == 1
    assert outcome.num_questions == 3
    assert outcome.time_limit_minutes == 20
    msgs = lifecycle.list_messages(application.id)
    assert [(m.role, m.content) for m in msgs] == [
        ("user", "Hi, ready to start."),
        ("assistant", "Welcome. A warehouse fire alarm just went off..."),
    ]


def test_third_turn_is_closing_eligible(lifecycle, application, gateway):
    lifecycle.send_message(application.id, "Hello")
    lifecycle.send_message(application.id, "I would evacuate first.")
    gateway.queue({"assistant_message": "Thanks, that wraps up our session.", "detected_flags": [],
                   "stage": "closing"})
    outcome = lifecycle.send_message(application.id, "Then notify the site lead.")

    system = gateway.calls[-1]["system"]
    assert "Questions Asked So Far: 2" in system
    assert "reached the question budget (2 of 3)" in system
    assert outcome.stage == "closing"
    # the model sees the latest candidate turn
    assert gateway.calls[-1]["turns"][-1] == {"role": "user", "content": "Then notify the site lead."}


def test_messages_come_back_in_creation_order(lifecycle, application):
    for text in ("one", "two", "three"):
        lifecycle.send_message(application.id, text)
    msgs = lifecycle.list_messages(application.id)
    assert [m.seq for m in msgs] == list(range(1, 7))
    assert [m.role for m in msgs] == ["user", "assistant"] * 3
    assert [m.content for m in msgs if m.role == "user"] == ["one", "two", "three"]


def test_flags_accumulate_across_turns(lifecycle, application, gateway):
    gateway.queue(
        {"assistant_message": "q1", "stage": "questioning",
         "detected_flags": [{"severity": "medium", "category": "evasiveness", "excerpt": "It depends."}]},
        {"assistant_message": "q2", "stage": "follow_up",
         "detected_flags": [{"severity": "high", "category": "judgment", "excerpt": "Ignore the alarm."},
                            {"severity": "low", "category": "tone", "excerpt": "whatever"}]},
        {"assistant_message": "q3", "stage": "questioning", "detected_flags": []},
    )
    for text in ("a", "b", "c"):
        lifecycle.send_message(application.id, text)

    flags = Flag.query.filter_by(application_id=application.id).all()
    assert sorted(f.category for f in flags) == ["evasiveness", "judgment", "tone"]


def test_bad_model_turn_still_records_a_reply(lifecycle, application, gateway):
    gateway.queue(ModelServiceError("timeout"))
    outcome = lifecycle.send_message(application.id, "My answer")
    assert outcome.stage == "questioning"
    assert outcome.message.content.startswith("Thank you for your response.")
    assert Message.query.filter_by(application_id=application.id).count() == 2


def test_empty_message_is_rejected(lifecycle, application):
    with pytest.raises(InvalidRequest):
        lifecycle.send_message(application.id, "   ")
    assert Message.query.filter_by(application_id=application.id).count() == 0


@pytest.mark.parametrize("status", ["submitted", "evaluated"])
def test_closed_interview_rejects_messages(lifecycle, application, status):
    application.status = status
    db.session.commit()
    with pytest.raises(InterviewClosed):
        lifecycle.send_message(application.id, "one more thing")
    assert Message.query.filter_by(application_id=application.id).count() == 0


def test_concurrent_turn_is_rejected(lifecycle, application):
    with turn_lock.hold(application.id):
        with pytest.raises(TurnInProgress):
            lifecycle.send_message(application.id, "double click")
    assert Message.query.filter_by(application_id=application.id).count() == 0
    # lock released: the next turn goes through
    lifecycle.send_message(application.id, "retry")
    assert Message.query.filter_by(application_id=application.id).count() == 2


def test_submit_scores_and_marks_evaluated(lifecycle, application, gateway):
    lifecycle.send_message(application.id, "answer")
    gateway.queue(SCORECARD)
    app_row = lifecycle.submit(application.id)

    assert app_row.status == "evaluated"
    assert app_row.submitted_at is not None
    ev = lifecycle.get_evaluation(application.id)
    assert ev.overall_score == 77
    assert ev.recommendation == "hire"
    assert ev.strengths == ["Prioritises well"]
    assert gateway.calls[-1]["turns"][0]["content"].startswith("Interview Transcript:")


def test_submit_twice_keeps_single_evaluation(lifecycle, application, gateway):
    lifecycle.send_message(application.id, "answer")
    gateway.queue(SCORECARD)
    lifecycle.submit(application.id)
    with pytest.raises(InterviewClosed):
        lifecycle.submit(application.id)
    assert Evaluation.query.filter_by(application_id=application.id).count() == 1
    assert db.session.get(Application, application.id).status == "evaluated"


def test_submit_with_empty_transcript_skips_scoring(lifecycle, application, gateway):
    app_row = lifecycle.submit(application.id)
    assert app_row.status == "submitted"
    assert gateway.calls == []
    assert lifecycle.get_evaluation(application.id) is None


def test_scorer_gateway_failure_attaches_neutral_scorecard(lifecycle, application, gateway):
    lifecycle.send_message(application.id, "answer")
    gateway.queue(ModelServiceError("service unavailable"))
    app_row = lifecycle.submit(application.id)

    assert app_row.status == "evaluated"
    ev = lifecycle.get_evaluation(application.id)
    assert [ev.overall_score, ev.decision_quality, ev.communication_clarity, ev.structured_process,
            ev.risk_awareness, ev.professional_judgment] == [50] * 6
    assert ev.recommendation == "maybe"
    assert len(ev.strengths) == 1 and len(ev.concerns) == 1
    assert "manual review" in ev.summary


def test_scoring_crash_leaves_application_submitted(lifecycle, application, monkeypatch):
    lifecycle.send_message(application.id, "answer")

    def crash(job, history):
        raise RuntimeError("scorer exploded")

    monkeypatch.setattr(lifecycle.scorer, "score", crash)
    app_row = lifecycle.submit(application.id)

    assert app_row.status == "submitted"
    assert lifecycle.get_evaluation(application.id) is None
    # still closed to further turns
    with pytest.raises(InterviewClosed):
        lifecycle.send_message(application.id, "hello?")


def test_manual_evaluation_respects_single_scorecard(lifecycle, application, gateway, monkeypatch):
    lifecycle.send_message(application.id, "answer")

    def crash(job, history):
        raise RuntimeError("scorer exploded")

    monkeypatch.setattr(lifecycle.scorer, "score", crash)
    lifecycle.submit(application.id)
    monkeypatch.undo()
    assert lifecycle.get_evaluation(application.id) is None

    gateway.queue(SCORECARD)
    ev = lifecycle.evaluate(application.id)
    assert ev.overall_score == 77
    assert db.session.get(Application, application.id).status == "evaluated"
    with pytest.raises(InvalidRequest):
        lifecycle.evaluate(application.id)
    assert Evaluation.query.filter_by(application_id=application.id).count() == 1


def test_manual_evaluation_requires_submitted_status(lifecycle, application):
    lifecycle.send_message(application.id, "answer")
    with pytest.raises(InvalidRequest):
        lifecycle.evaluate(application.id)


def test_recruiter_status_edits_are_owner_only(lifecycle, application, recruiter):
    updated = lifecycle.set_status(application.id, recruiter.id, "rejected")
    assert updated.status == "rejected"
    with pytest.raises(Forbidden):
        lifecycle.set_status(application.id, recruiter.id + 1, "accepted")
    with pytest.raises(InvalidRequest):
        lifecycle.set_status(application.id, recruiter.id, "hired")


def test_report_aggregates_everything(lifecycle, application, recruiter, gateway):
    gateway.queue({"assistant_message": "q1", "stage": "introduction",
                   "detected_flags": [{"severity": "low", "category": "depth", "excerpt": "short"}]})
    lifecycle.send_message(application.id, "hi")
    report = lifecycle.build_report(application.id, recruiter.id)

    assert report["application"]["id"] == application.id
    assert report["job"]["numQuestions"] == 3
    assert report["evaluation"] is None
    assert [f["category"] for f in report["flags"]] == ["depth"]
    assert [m["role"] for m in report["messages"]] == ["user", "assistant"]
    with pytest.raises(Forbidden):
        lifecycle.build_report(application.id, recruiter.id + 1)


def test_missing_application_is_not_found(lifecycle):
    with pytest.raises(NotFound):
        lifecycle.send_message("missing", "hi")
    with pytest.raises(NotFound):
        lifecycle.submit("missing")


def test_flags_keep_detection_order_within_a_turn(lifecycle, application, gateway):
    gateway.queue(
        {"assistant_message": "q1", "stage": "questioning",
         "detected_flags": [{"severity": "high", "category": "judgment", "excerpt": "Ignore the alarm."},
                            {"severity": "low", "category": "tone", "excerpt": "whatever"},
                            {"severity": "medium", "category": "evasiveness", "excerpt": "It depends."}]},
        {"assistant_message": "q2", "stage": "follow_up",
         "detected_flags": [{"severity": "low", "category": "depth", "excerpt": "short"}]},
    )
    lifecycle.send_message(application.id, "a")
    lifecycle.send_message(application.id, "b")

    flags = lifecycle.list_flags(application.id)
    assert [f.category for f in flags] == ["judgment", "tone", "evasiveness", "depth"]
    assert [f.seq for f in flags] == [1, 2, 3, 4]


def test_oversized_model_scores_still_evaluate(lifecycle, application, gateway):
    lifecycle.send_message(application.id, "answer")
    gateway.queue(dict(SCORECARD, overallScore=10 ** 400, riskAwareness=-(10 ** 400)))
    app_row = lifecycle.submit(application.id)

    assert app_row.status == "evaluated"
    ev = lifecycle.get_evaluation(application.id)
    assert ev.overall_score == 100
    assert ev.risk_awareness == 0


def test_resubmit_after_reopen_keeps_existing_evaluation(lifecycle, application, recruiter, gateway):
    lifecycle.send_message(application.id, "answer")
    gateway.queue(SCORECARD)
    lifecycle.submit(application.id)

    lifecycle.set_status(application.id, recruiter.id, "in_progress")
    lifecycle.send_message(application.id, "one more thought")
    calls_before = len(gateway.calls)
    app_row = lifecycle.submit(application.id)

    assert app_row.status == "evaluated"
    assert len(gateway.calls) == calls_before
    assert Evaluation.query.filter_by(application_id=application.id).count() == 1
    assert lifecycle.get_evaluation(application.id).overall_score == 77


def test_manual_evaluation_waits_for_the_turn_lock(lifecycle, application, gateway, monkeypatch):
    lifecycle.send_message(application.id, "answer")

    def crash(job, history):
        raise RuntimeError("scorer exploded")

    monkeypatch.setattr(lifecycle.scorer, "score", crash)
    lifecycle.submit(application.id)
    monkeypatch.undo()

    with turn_lock.hold(application.id):
        with pytest.raises(TurnInProgress):
            lifecycle.evaluate(application.id)
    assert lifecycle.get_evaluation(application.id) is None


def test_manual_evaluation_losing_a_race_is_rejected(lifecycle, application, gateway, monkeypatch):
    lifecycle.send_message(application.id, "answer")
    gateway.queue(SCORECARD)
    lifecycle.submit(application.id)
    application.status = "submitted"
    db.session.commit()

    # another worker stored the scorecard between the check and the insert
    monkeypatch.setattr(lifecycle, "get_evaluation", lambda application_id: None)
    gateway.queue(dict(SCORECARD, overallScore=10))
    with pytest.raises(InvalidRequest):
        lifecycle.evaluate(application.id)
    monkeypatch.undo()

    assert Evaluation.query.filter_by(application_id=application.id).count() == 1
    assert lifecycle.get_evaluation(application.id).overall_score == 77
