from __future__ import annotations

from flask_wtf import FlaskForm
from wtforms import IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, NumberRange, Optional

from tripflow.models import UserRole


class DepartmentForm(FlaskForm):
    name = StringField("Department name", validators=[DataRequired(), Length(max=255)])
    description = TextAreaField("Description", validators=[Optional(), Length(max=1000)])
    manager_id = IntegerField("Manager", validators=[Optional()])
    max_members = IntegerField("Maximum members", validators=[Optional(), NumberRange(min=1)])


class InvitationForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)])
    full_name = StringField("Full name", validators=[Optional(), Length(max=255)])
    position = StringField("Position", validators=[Optional(), Length(max=120)])
    role = SelectField(
        "Role",
        choices=[(role.value, role.value.replace("_", " ").title()) for role in UserRole],
        default=UserRole.GENERAL_USER.value,
    )
    department_id = IntegerField("Department", validators=[Optional()])


class MembershipForm(FlaskForm):
    user_id = IntegerField("User", validators=[DataRequired()])
    department_id = IntegerField("Department", validators=[DataRequired()])
