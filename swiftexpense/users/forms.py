from __future__ import annotations

from wtforms import BooleanField, PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, Email, Length, Optional, URL

from swiftexpense.auth.forms import ApiForm, _lower, _strip
from swiftexpense.models import UserRole

ROLE_CHOICES = [(role.value, role.value.title()) for role in UserRole]


def _upper(value):
    return value.strip().upper() if isinstance(value, str) else value


class UserCreateForm(ApiForm):
    email = StringField("Email", filters=[_lower], validators=[DataRequired(), Email(), Length(max=255)])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=8, max=128)])
    first_name = StringField("First name", filters=[_strip], validators=[DataRequired(), Length(max=100)])
    last_name = StringField("Last name", filters=[_strip], validators=[DataRequired(), Length(max=100)])
    role = SelectField("Role", choices=ROLE_CHOICES, filters=[_upper], default=UserRole.EMPLOYEE.value)


class UserUpdateForm(ApiForm):
    first_name = StringField("First name", filters=[_strip], validators=[Optional(), Length(min=1, max=100)])
    last_name = StringField("Last name", filters=[_strip], validators=[Optional(), Length(min=1, max=100)])
    role = SelectField("Role", choices=ROLE_CHOICES, filters=[_upper], validate_choice=False)
    avatar_url = StringField("Avatar URL", validators=[Optional(), URL(), Length(max=255)])
    is_active = BooleanField("Active")
