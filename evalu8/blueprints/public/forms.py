from flask_wtf import FlaskForm
from wtforms import IntegerField
from wtforms.validators import DataRequired, Email, Length, NumberRange, Optional

from ...utils.fields import StrictStringField, StrictTextAreaField

class IntakeForm(FlaskForm):
    job_token = StrictStringField("Job token", name="jobToken", validators=[DataRequired(), Length(max=64)])
    candidate_name = StrictStringField("Name", name="candidateName", validators=[DataRequired(), Length(max=120)])
    candidate_email = StrictStringField("Email", name="candidateEmail", validators=[DataRequired(), Email(), Length(max=254)])
    location = StrictStringField("Location", validators=[Optional(), Length(max=200)])
    work_auth = StrictStringField("Work authorization", name="workAuth", validators=[Optional(), Length(max=50)])
    availability_date = StrictStringField("Availability date", name="availabilityDate", validators=[Optional(), Length(max=50)])
    years_experience = IntegerField("Years of experience", name="yearsExperience",
                                    validators=[Optional(), NumberRange(min=0, max=80)])
    desired_comp = StrictStringField("Desired compensation", name="desiredComp", validators=[Optional(), Length(max=100)])

    def candidate_fields(self):
        return {
            "candidate_name": self.candidate_name.data.strip(),
            "candidate_email": self.candidate_email.data.strip(),
            "location": self.location.data,
            "work_auth": self.work_auth.data,
            "availability_date": self.availability_date.data,
            "years_experience": self.years_experience.data,
            "desired_comp": self.desired_comp.data,
        }

class MessageForm(FlaskForm):
    content = StrictTextAreaField("Message", validators=[DataRequired(), Length(max=10000)])
