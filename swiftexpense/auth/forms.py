from __future__ import annotations

from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, Email, Length, Optional


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _lower(value):
    return value.strip().lower() if isinstance(value, str) else value


class ApiForm(FlaskForm):
    """Base for JSON API forms; bearer tokens replace CSRF tokens."""

    class Meta:
        csrf = False


class RegisterForm(ApiForm):
    email = StringField("Email", filters=[_lower], validators=[DataRequired(), Email(), Length(max=255)])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=8, max=128)])
    first_name = StringField("First name", filters=[_strip], validators=[DataRequired(), Length(max=100)])
    last_name = StringField("Last name", filters=[_strip], validators=[DataRequired(), Length(max=100)])
    company_name = StringField("Company name", filters=[_strip], validators=[DataRequired(), Length(max=255)])
    country = StringField("Country", filters=[_strip], validators=[Optional(), Length(max=120)])


class LoginForm(ApiForm):
    email = StringField("Email", filters=[_lower], validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])
