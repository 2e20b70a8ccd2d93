from wtforms import IntegerField, SelectField
from wtforms.validators import DataRequired, InputRequired

from tedlist.forms import JSONForm


class StartSessionForm(JSONForm):
    item_id = IntegerField("Item", name="itemId", validators=[InputRequired()])


class SwipeForm(JSONForm):
    item_id   = IntegerField("Item", name="itemId", validators=[InputRequired()])
    direction = SelectField(
        "Direction",
        choices=[("left", "Left"), ("right", "Right")],
        validators=[DataRequired()],
    )


class TradeActionForm(JSONForm):
    """Accept/decline: the item named in the offer plus who offered."""
    item_id      = IntegerField("Item", name="itemId", validators=[InputRequired()])
    from_user_id = IntegerField("From user", name="fromUserId", validators=[InputRequired()])
