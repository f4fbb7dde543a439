from __future__ import annotations

from decimal import Decimal

from wtforms import DecimalField, SelectField, StringField, TextAreaField
from wtforms.fields import DateField
from wtforms.validators import DataRequired, Length, NumberRange, Optional, Regexp

from swiftexpense.auth.forms import ApiForm, _strip
from swiftexpense.models import ExpenseCategory, ExpenseStatus

CATEGORY_CHOICES = [(category.value, category.value.title()) for category in ExpenseCategory]
DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S.%fZ", "%Y-%m-%dT%H:%M:%SZ", "%Y-%m-%dT%H:%M:%S"]


def _upper(value):
    return value.strip().upper() if isinstance(value, str) else value


class ExpenseForm(ApiForm):
    amount = DecimalField(
        "Amount",
        places=2,
        rounding=None,
        validators=[DataRequired(), NumberRange(min=Decimal("0.01"), max=Decimal("9999999999.99"))],
    )
    currency = StringField(
        "Currency",
        filters=[_upper],
        validators=[Optional(), Regexp(r"^[A-Z]{3}$", message="Currency must be a three-letter ISO code.")],
    )
    category = SelectField("Category", choices=CATEGORY_CHOICES, filters=[_upper], validators=[DataRequired()])
    subcategory = StringField("Subcategory", filters=[_strip], validators=[Optional(), Length(max=120)])
    description = TextAreaField("Description", filters=[_strip], validators=[DataRequired(), Length(max=1000)])
    expense_date = DateField("Date of expense", format=DATE_FORMATS, validators=[DataRequired()])
    receipt_url = StringField("Receipt URL", validators=[Optional(), Length(max=255)])
    status = StringField(
        "Status",
        filters=[_upper],
        validators=[
            Optional(),
            Regexp(
                rf"^({ExpenseStatus.DRAFT.value}|{ExpenseStatus.PENDING.value})$",
                message="New expenses can only be DRAFT or PENDING.",
            ),
        ],
    )


class ExpenseUpdateForm(ApiForm):
    """Every field is optional; only keys present in the payload are applied."""

    amount = DecimalField(
        "Amount",
        places=2,
        rounding=None,
        validators=[Optional(), NumberRange(min=Decimal("0.01"), max=Decimal("9999999999.99"))],
    )
    currency = StringField(
        "Currency",
        filters=[_upper],
        validators=[Optional(), Regexp(r"^[A-Z]{3}$", message="Currency must be a three-letter ISO code.")],
    )
    category = SelectField("Category", choices=CATEGORY_CHOICES, filters=[_upper], validate_choice=False)
    subcategory = StringField("Subcategory", filters=[_strip], validators=[Optional(), Length(max=120)])
    description = TextAreaField("Description", filters=[_strip], validators=[Optional(), Length(min=1, max=1000)])
    expense_date = DateField("Date of expense", format=DATE_FORMATS, validators=[Optional()])
    receipt_url = StringField("Receipt URL", validators=[Optional(), Length(max=255)])


class DecisionForm(ApiForm):
    comments = TextAreaField("Comments", filters=[_strip], validators=[Optional(), Length(max=1000)])
