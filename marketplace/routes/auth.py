"""
Authentication Blueprint - User Authentication Routes

This blueprint handles user authentication against the store backend:
- Sign up / Login / Logout
- OAuth sign-in and the auth callback
- Password reset
- Profile and notification settings pages
"""

from flask import Blueprint, render_template, redirect, url_for, flash, request, current_app, session
from flask_login import logout_user, current_user, login_required

from marketplace.extensions import limiter
from marketplace.forms import ForgotPasswordForm, LoginForm, ProfileForm, ResetPasswordForm, SettingsForm, SignupForm
from marketplace.seo import get_seo
from marketplace.session_user import SESSION_KEY, sign_in_user, update_session_user
from marketplace.store import AuthError, StoreError, get_store

# Create Blueprint
auth_bp = Blueprint('auth', __name__)

OAUTH_PROVIDERS = ('google',)
RESET_SESSION_KEY = 'password_reset_user'


def _auth_rate_limit():
    return current_app.config['AUTH_RATE_LIMIT']


def _safe_next(target):
    """Only same-site relative redirects."""
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return None


def _external(endpoint, **values):
    return get_seo().settings.absolute(url_for(endpoint, **values))


def _auth_meta(title, description):
    return get_seo().meta.generate_meta(title, description, canonical=request.path, noindex=True)


@auth_bp.route('/login', methods=['GET', 'POST'])
@limiter.limit(_auth_rate_limit, methods=['POST'])
def login():
    """User login route"""

    if current_user.is_authenticated:
        return redirect(url_for('main.index'))

    form = LoginForm()
    if form.validate_on_submit():
        try:
            user = get_store().sign_in(form.email.data.strip(), form.password.data)
        except AuthError as exc:
            current_app.logger.info('Failed login for %s: %s', form.email.data, exc)
            flash('Invalid email or password.', 'danger')
        except StoreError as exc:
            current_app.logger.error('Login failed: %s', exc, exc_info=True)
            flash('We could not sign you in right now. Please try again.', 'danger')
        else:
            sign_in_user(user, remember=form.remember_me.data)
            flash('Welcome back!', 'success')
            return redirect(_safe_next(request.args.get('next')) or url_for('main.index'))

    return render_template('auth/login.html', form=form, meta=_auth_meta('Log In', 'Log in to your Acquity account.'))


@auth_bp.route('/signup', methods=['GET', 'POST'])
@limiter.limit(_auth_rate_limit, methods=['POST'])
def signup():
    """User registration route"""

    if current_user.is_authenticated:
        return redirect(url_for('main.index'))

    form = SignupForm()
    if form.validate_on_submit():
        store = get_store()
        profile = {
            'full_name': form.full_name.data.strip(),
            'user_intent': form.user_intent.data,
            'country': form.country.data or None,
        }
        try:
            user = store.sign_up(
                form.email.data.strip().lower(),
                form.password.data,
                metadata=profile,
                redirect_to=_external('auth.callback'),
            )
        except AuthError as exc:
            flash(str(exc), 'danger')
        except StoreError as exc:
            current_app.logger.error('Sign up failed: %s', exc, exc_info=True)
            flash('We could not create your account right now. Please try again.', 'danger')
        else:
            try:
                store.upsert_profile(user['id'], profile)
            except StoreError as exc:
                current_app.logger.warning('Failed to save profile for new user %s: %s', user['id'], exc)

            if user.get('confirmed'):
                sign_in_user(user)
                flash('Your account has been created.', 'success')
                return redirect(url_for('main.index'))

            flash('Account created! Check your email to confirm your address, then log in.', 'success')
            return redirect(url_for('auth.login'))

    return render_template(
        'auth/signup.html',
        form=form,
        meta=_auth_meta('Create an Account', 'Join Acquity to buy, sell and invest in businesses.'),
    )


@auth_bp.route('/logout')
@login_required
def logout():
    """User logout route"""

    logout_user()
    session.pop(SESSION_KEY, None)
    session.pop(RESET_SESSION_KEY, None)
    flash('You have been logged out successfully.', 'info')
    return redirect(url_for('main.index'))


@auth_bp.route('/auth/oauth/<provider>')
def oauth(provider):
    """Start a provider sign-in"""

    if provider not in OAUTH_PROVIDERS:
        flash('Unsupported sign-in provider.', 'danger')
        return redirect(url_for('auth.login'))

    try:
        url = get_store().oauth_url(provider, redirect_to=_external('auth.callback'))
    except StoreError as exc:
        current_app.logger.warning('OAuth start failed for %s: %s', provider, exc)
        flash(f'Sign in with {provider.title()} is not available right now.', 'danger')
        return redirect(url_for('auth.login'))

    return redirect(url)


@auth_bp.route('/auth/callback')
def callback():
    """Finish OAuth / email-confirmation sign-in"""

    error = request.args.get('error_description') or request.args.get('error')
    code = request.args.get('code')
    if error or not code:
        current_app.logger.info('Auth callback without code: %s', error)
        flash(error or 'Sign-in link is missing or invalid.', 'danger')
        return redirect(url_for('auth.login'))

    store = get_store()
    try:
        user = store.exchange_code(code)
    except StoreError as exc:
        flash(str(exc) if isinstance(exc, AuthError) else 'Sign-in failed. Please try again.', 'danger')
        return redirect(url_for('auth.login'))

    try:
        if store.get_profile(user['id']) is None:
            store.upsert_profile(user['id'], {
                'full_name': user.get('full_name') or None,
                'user_intent': 'buyer',
                'country': None,
            })
    except StoreError as exc:
        current_app.logger.warning('Error creating/updating profile for %s: %s', user['id'], exc)

    sign_in_user(user)
    return redirect(_safe_next(request.args.get('next')) or url_for('auth.profile'))


@auth_bp.route('/forgot-password', methods=['GET', 'POST'])
@limiter.limit(_auth_rate_limit, methods=['POST'])
def forgot_password():
    """Request password reset"""

    form = ForgotPasswordForm()
    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        store = get_store()
        try:
            if not store.email_exists(email):
                flash('No account found with this email address.', 'danger')
            else:
                store.send_password_reset(email, redirect_to=_external('auth.reset_password'))
                flash('Check your email for a link to reset your password.', 'info')
                return redirect(url_for('auth.login'))
        except StoreError as exc:
            current_app.logger.error('Password reset request failed: %s', exc, exc_info=True)
            flash('We could not send the reset email right now. Please try again.', 'danger')

    return render_template(
        'auth/forgot_password.html',
        form=form,
        meta=_auth_meta('Forgot Password', 'Reset the password of your Acquity account.'),
    )


@auth_bp.route('/reset-password', methods=['GET', 'POST'])
def reset_password():
    """Reset password from an emailed link"""

    code = request.args.get('code')
    if code:
        try:
            user = get_store().exchange_code(code)
        except StoreError as exc:
            current_app.logger.info('Invalid password reset code: %s', exc)
            flash('This reset link is invalid or has expired.', 'danger')
            return redirect(url_for('auth.forgot_password'))
        sign_in_user(user)
        session[RESET_SESSION_KEY] = user['id']
        return redirect(url_for('auth.reset_password'))

    # The form is only reachable right after a reset link was exchanged.
    if not current_user.is_authenticated or session.get(RESET_SESSION_KEY) != current_user.id:
        flash('Open the link from your reset email to choose a new password.', 'info')
        return redirect(url_for('auth.forgot_password'))

    form = ResetPasswordForm()
    if form.validate_on_submit():
        try:
            get_store().update_password(current_user.id, form.password.data)
        except StoreError as exc:
            current_app.logger.error('Password update failed for %s: %s', current_user.id, exc, exc_info=True)
            flash('We could not update your password. Please try again.', 'danger')
        else:
            session.pop(RESET_SESSION_KEY, None)
            flash('Your password has been updated.', 'success')
            return redirect(url_for('auth.profile'))

    return render_template(
        'auth/reset_password.html',
        form=form,
        meta=_auth_meta('Reset Password', 'Choose a new password for your Acquity account.'),
    )


@auth_bp.route('/profile', methods=['GET', 'POST'])
@login_required
def profile():
    """User profile page"""

    store = get_store()
    try:
        record = store.get_profile(current_user.id) or {}
    except StoreError as exc:
        current_app.logger.warning('Failed to load profile %s: %s', current_user.id, exc)
        record = {}

    form = ProfileForm()
    if request.method == 'GET':
        form.full_name.data = record.get('full_name') or current_user.full_name
        form.country.data = record.get('country') or ''
        form.user_intent.data = record.get('user_intent') or 'buyer'

    if form.validate_on_submit():
        fields = {
            'full_name': (form.full_name.data or '').strip() or None,
            'country': form.country.data or None,
            'user_intent': form.user_intent.data,
        }
        try:
            store.upsert_profile(current_user.id, fields)
        except StoreError as exc:
            current_app.logger.error('Failed to save profile %s: %s', current_user.id, exc, exc_info=True)
            flash('We could not save your profile. Please try again.', 'danger')
        else:
            update_session_user(full_name=fields['full_name'] or '')
            flash('Profile updated.', 'success')
            return redirect(url_for('auth.profile'))

    return render_template(
        'auth/profile.html',
        form=form,
        profile=record,
        meta=_auth_meta('Your Profile', 'Manage your Acquity account.'),
    )


@auth_bp.route('/settings', methods=['GET', 'POST'])
@login_required
def settings():
    """Email notification preferences"""

    store = get_store()
    try:
        record = store.get_profile(current_user.id) or {}
    except StoreError as exc:
        current_app.logger.warning('Failed to load settings for %s: %s', current_user.id, exc)
        record = {}

    form = SettingsForm()
    if request.method == 'GET':
        form.email_notifications.data = record.get('email_notifications', True) is not False
        form.marketing_emails.data = bool(record.get('marketing_emails'))

    if form.validate_on_submit():
        fields = {
            'email_notifications': form.email_notifications.data,
            'marketing_emails': form.marketing_emails.data,
        }
        try:
            store.upsert_profile(current_user.id, fields)
        except StoreError as exc:
            current_app.logger.error('Failed to save settings for %s: %s', current_user.id, exc, exc_info=True)
            flash('We could not save your preferences. Please try again.', 'danger')
        else:
            flash('Preferences saved.', 'success')
            return redirect(url_for('auth.settings'))

    return render_template(
        'auth/settings.html',
        form=form,
        meta=_auth_meta('Settings', 'Manage your Acquity email preferences.'),
    )
