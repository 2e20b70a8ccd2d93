from wtforms import StringField, TextAreaField, SelectField
from wtforms.validators import DataRequired, Length, Optional

from tedlist.forms import JSONForm
from tedlist.models.item import ITEM_CONDITIONS, ITEM_TYPES


class ItemForm(JSONForm):
    """Listing fields. The images list is validated by the blueprint since
    a JSON array does not bind to a WTForms field."""
    title       = StringField("Title", validators=[DataRequired(), Length(1, 200)])
    description = TextAreaField("Description", validators=[DataRequired(), Length(1, 5000)])
    condition   = SelectField(
        "Condition",
        choices=[(c, c) for c in ITEM_CONDITIONS],
        default="Good",
        validators=[Optional()],
    )
    type        = SelectField(
        "Type",
        choices=[(t, t.title()) for t in ITEM_TYPES],
        default="trade",
        validators=[Optional()],
    )


class ItemUpdateForm(ItemForm):
    """Partial update: every field optional."""
    title       = StringField("Title", validators=[Optional(), Length(1, 200)])
    description = TextAreaField("Description", validators=[Optional(), Length(1, 5000)])
