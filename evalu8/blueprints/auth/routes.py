from flask import current_app, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from . import bp
from ...extensions import db
from .forms import LoginForm, RegisterForm
from ...models.user import User

@bp.post("/register")
def register():
    form = RegisterForm()
    if not form.validate_on_submit():
        return jsonify({"message": "Invalid request", "errors": form.errors}), 400
    if User.query.filter_by(email=form.email.data).first():
        return jsonify({"message": "Email already registered"}), 400
    user = User(email=form.email.data, role="recruiter")
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    login_user(user)
    current_app.logger.info("recruiter %s registered", user.id)
    return jsonify(user.to_dict()), 201

@bp.post("/login")
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({"message": "Invalid request", "errors": form.errors}), 400
    user = User.query.filter_by(email=form.email.data).first()
    if user and user.check_password(form.password.data):
        login_user(user)
        return jsonify(user.to_dict())
    return jsonify({"message": "Invalid email or password"}), 401

@bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"message": "Logged out"})

@bp.get("/user")
@login_required
def me():
    return jsonify(current_user.to_dict())
