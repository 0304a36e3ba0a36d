from flask import current_app
from flask_wtf import FlaskForm
from wtforms import SelectField, IntegerField
from wtforms.validators import DataRequired, Length, ValidationError

from ...models.application import STATUSES
from ...models.job import SIMULATION_TYPES, SENIORITY_LEVELS
from ...utils.fields import StrictStringField, StrictTextAreaField


def _bounded(field, low_key, high_key):
    low = current_app.config[low_key]
    high = current_app.config[high_key]
    if field.data is None or not (low <= field.data <= high):
        raise ValidationError(f"Must be between {low} and {high}.")


class JobForm(FlaskForm):
    title = StrictStringField("Title", validators=[DataRequired(), Length(max=200)])
    description = StrictTextAreaField("Description", validators=[DataRequired(), Length(max=5000)])
    simulation_type = SelectField("Simulation type", name="simulationType",
                                  choices=[(v, v) for v in SIMULATION_TYPES], default="problem_solving")
    seniority_level = SelectField("Seniority level", name="seniorityLevel",
                                  choices=[(v, v) for v in SENIORITY_LEVELS], default="mid")
    time_limit_minutes = IntegerField("Time limit (minutes)", name="timeLimitMinutes", default=15)
    num_questions = IntegerField("Number of questions", name="numQuestions", default=8)

    def validate_time_limit_minutes(self, field):
        _bounded(field, "JOB_TIME_LIMIT_MIN", "JOB_TIME_LIMIT_MAX")

    def validate_num_questions(self, field):
        _bounded(field, "JOB_NUM_QUESTIONS_MIN", "JOB_NUM_QUESTIONS_MAX")


class StatusForm(FlaskForm):
    status = SelectField("Status", choices=[(s, s) for s in STATUSES], validators=[DataRequired()])
