from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField, SubmitField
from wtforms.validators import DataRequired, Length, Regexp


class UsernameForm(FlaskForm):
    username = StringField(
        "Username",
        validators=[
            DataRequired(),
            Length(min=1, max=80, message="Username must be at most 80 characters"),
            Regexp(
                r"^[a-zA-Z0-9 _.-]+$",
                message="Username can only contain letters, numbers, spaces, dots, underscores, and hyphens",
            ),
        ],
    )
    submit = SubmitField("Start Picking")


class AdminLoginForm(FlaskForm):
    password = PasswordField("Admin Password", validators=[DataRequired()])
    submit = SubmitField("Sign In")
