from flask_wtf import FlaskForm
from wtforms import BooleanField, IntegerField, SelectField, StringField, SubmitField
from wtforms.validators import URL, DataRequired, Length, NumberRange, Optional

from pickems.models.match import BRACKET_SIDES
from pickems.utils.rounds import BRACKET_STAGES

STAGE_CHOICES = [("", "Auto (from round name)")] + [
    (stage.value, stage.label) for stage in BRACKET_STAGES
]


class TournamentForm(FlaskForm):
    name = StringField(
        "Tournament Name",
        validators=[
            DataRequired(),
            Length(max=100, message="Tournament name cannot exceed 100 characters"),
        ],
    )
    activate = BooleanField("Make this the active tournament", default=True)
    demo = BooleanField("Fill with demo teams, groups and bracket", default=False)
    submit = SubmitField("Create Tournament")


class TeamForm(FlaskForm):
    name = StringField("Team Name", validators=[DataRequired(), Length(max=100)])
    logo_url = StringField(
        "Logo URL", validators=[Optional(), URL(), Length(max=500)]
    )
    seed = IntegerField("Seed", validators=[Optional(), NumberRange(min=1, max=1024)])
    submit = SubmitField("Add Team")


class MatchForm(FlaskForm):
    round = StringField(
        "Round",
        validators=[DataRequired(), Length(max=100)],
        description='e.g. "Quarter Finals - Match 2"',
    )
    bracket = SelectField(
        "Bracket",
        choices=[(side, side.capitalize()) for side in BRACKET_SIDES],
        default="upper",
    )
    stage = SelectField("Stage", choices=STAGE_CHOICES, default="")
    submit = SubmitField("Add Match")


class GroupForm(FlaskForm):
    name = StringField("Group Name", validators=[DataRequired(), Length(max=100)])
    submit = SubmitField("Add Group")
