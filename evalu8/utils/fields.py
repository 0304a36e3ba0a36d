"""Text fields for JSON bodies.

Flask-WTF feeds a JSON body to the form as-is, so a text field can receive
a number, a bool or an object. These fields record that as a field error
instead of letting the validators see a non-string.
"""
from wtforms import PasswordField, StringField, TextAreaField


class _StringOnly:
    def process_formdata(self, valuelist):
        if valuelist and valuelist[0] is not None and not isinstance(valuelist[0], str):
            raise ValueError("Must be a string.")
        super().process_formdata(valuelist)


class StrictStringField(_StringOnly, StringField):
    pass


class StrictTextAreaField(_StringOnly, TextAreaField):
    pass


class StrictPasswordField(_StringOnly, PasswordField):
    pass
