from wtforms import StringField, PasswordField, EmailField
from wtforms.validators import DataRequired, Length, Email

from tedlist.forms import JSONForm


class RegisterForm(JSONForm):
    name = StringField(
        "Name",
        validators=[DataRequired(), Length(1, 100)],
    )
    email = EmailField(
        "Email Address",
        validators=[DataRequired(), Email(), Length(5, 120)],
    )
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(),
            Length(8, 128, message="Password must be at least 8 characters."),
        ],
    )


class LoginForm(JSONForm):
    email    = EmailField("Email Address", validators=[DataRequired(), Length(1, 120)])
    password = PasswordField("Password", validators=[DataRequired()])
