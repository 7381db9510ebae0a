"""
WTForms Form Classes for the Acquity marketplace

Forms for the auth flows, the profile page and listing inquiries. All of
them carry Flask-WTF CSRF protection.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, TextAreaField, SelectField, BooleanField, RadioField, SubmitField
from wtforms.validators import DataRequired, Email, EqualTo, Length, Optional


COUNTRIES = [
    'Algeria', 'Argentina', 'Bangladesh', 'Brazil', 'Cameroon', 'Chile', 'Colombia',
    "Cote d'Ivoire", 'Egypt', 'Ethiopia', 'Ghana', 'India', 'Indonesia', 'Kenya',
    'Malaysia', 'Mexico', 'Morocco', 'Nigeria', 'Pakistan', 'Peru', 'Philippines',
    'Rwanda', 'Saudi Arabia', 'Senegal', 'South Africa', 'Tanzania', 'Thailand',
    'Tunisia', 'Turkey', 'Uganda', 'United Arab Emirates', 'United Kingdom',
    'United States', 'Vietnam', 'Other',
]

BUDGET_RANGES = [
    ('', 'Select Budget Range'),
    ('under-100k', 'Under $100K'),
    ('100k-500k', '$100K - $500K'),
    ('500k-1m', '$500K - $1M'),
    ('1m-5m', '$1M - $5M'),
    ('above-5m', 'Above $5M'),
]

USER_INTENTS = [
    ('buyer', 'I want to buy or invest'),
    ('seller', 'I want to sell'),
]

PASSWORD_MIN_LENGTH = 6


def _country_choices(placeholder='Select your country'):
    return [('', placeholder)] + [(country, country) for country in COUNTRIES]


class LoginForm(FlaskForm):
    """User login form"""

    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email address'),
        Length(max=255, message='Must be 255 characters or less')
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])
    remember_me = BooleanField('Remember Me')
    submit = SubmitField('Log In')


class SignupForm(FlaskForm):
    """Account registration form"""

    full_name = StringField('Full name', validators=[
        DataRequired(message='Full name is required'),
        Length(max=200, message='Must be 200 characters or less')
    ])
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email address'),
        Length(max=255, message='Must be 255 characters or less')
    ])
    country = SelectField('Country', choices=_country_choices(), validators=[
        DataRequired(message='Please select your country')
    ])
    user_intent = RadioField('I am a', choices=USER_INTENTS, default='buyer', validators=[DataRequired()])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required'),
        Length(min=PASSWORD_MIN_LENGTH, message=f'Password must be at least {PASSWORD_MIN_LENGTH} characters')
    ])
    terms = BooleanField('I agree to the Terms of Service and Privacy Policy', validators=[
        DataRequired(message='You must agree to the terms')
    ])
    submit = SubmitField('Create account')


class ForgotPasswordForm(FlaskForm):

    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email address')
    ])
    submit = SubmitField('Send reset link')


class ResetPasswordForm(FlaskForm):

    password = PasswordField('New password', validators=[
        DataRequired(message='Password is required'),
        Length(min=PASSWORD_MIN_LENGTH, message=f'Password must be at least {PASSWORD_MIN_LENGTH} characters')
    ])
    password_confirm = PasswordField('Confirm password', validators=[
        DataRequired(message='Please confirm your password'),
        EqualTo('password', message='Passwords must match')
    ])
    submit = SubmitField('Update password')


class ContactInquiryForm(FlaskForm):
    """Buyer inquiry sent from a listing page"""

    name = StringField('Full name', validators=[
        DataRequired(message='Name is required'),
        Length(max=120, message='Must be 120 characters or less')
    ])
    company = StringField('Company', validators=[Optional(), Length(max=200)])
    budget_range = SelectField('Budget range', choices=BUDGET_RANGES, validators=[
        DataRequired(message='Please select a budget range')
    ])
    email = StringField('Contact email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email address'),
        Length(max=255)
    ])
    reason = TextAreaField('Reason for interest', validators=[
        DataRequired(message='Tell the seller why you are interested'),
        Length(min=10, max=2000, message='Reason must be between 10 and 2000 characters')
    ])
    submit = SubmitField('Send inquiry')


class ProfileForm(FlaskForm):

    full_name = StringField('Full name', validators=[Optional(), Length(max=200)])
    country = SelectField('Country', choices=_country_choices('Not set'), validators=[Optional()])
    user_intent = SelectField('Account type', choices=USER_INTENTS, validators=[DataRequired()])
    submit = SubmitField('Save changes')


class SettingsForm(FlaskForm):

    email_notifications = BooleanField('Email notifications')
    marketing_emails = BooleanField('Marketing emails')
    submit = SubmitField('Save preferences')
