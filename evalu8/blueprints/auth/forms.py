from flask_wtf import FlaskForm
from wtforms.validators import DataRequired, Email, Length

from ...utils.fields import StrictPasswordField, StrictStringField

class RegisterForm(FlaskForm):
    email = StrictStringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    password = StrictPasswordField("Password", validators=[DataRequired(), Length(min=8)])

class LoginForm(FlaskForm):
    email = StrictStringField("Email", validators=[DataRequired(), Email()])
    password = StrictPasswordField("Password", validators=[DataRequired()])
