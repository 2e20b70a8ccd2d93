from flask_wtf import FlaskForm


class JSONForm(FlaskForm):
    """Base for API forms bound to the request's JSON body.

    Flask-WTF reads request.get_json() when the body is JSON. Field names
    are the camelCase keys the clients send.
    """
    class Meta:
        csrf = False


def validated(form_cls):
    """Instantiate form_cls from the current request and validate it.

    Raises ValidationError carrying the per-field messages on failure.
    """
    from tedlist.errors import ValidationError

    form = form_cls()
    if not form.validate():
        raise ValidationError("Invalid input", fields=form.errors)
    return form
