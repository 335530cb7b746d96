import pytest
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash

from config import TestConfig
from strmanager import create_app
from strmanager.errors import EmailDeliveryError
from strmanager.extensions import db
from strmanager.models import Profile, Property, UserRole


class FakeEmailClient:
    """Records outbound mail instead of calling Resend."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, sender, to, subject, html, text=None):
        if self.fail:
            raise EmailDeliveryError("resend returned 500: upstream error")
        self.sent.append({"from": sender, "to": list(to), "subject": subject, "html": html, "text": text})
        return {"id": f"msg-{len(self.sent)}"}


@pytest.fixture
def app(tmp_path):
    class Config(TestConfig):
        STORAGE_ROOT = str(tmp_path / "storage")
        LOG_DIR = str(tmp_path / "logs")

    app = create_app(Config)
    app.extensions["email"] = FakeEmailClient()

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mailbox(app):
    return app.extensions["email"]


def make_user(email, roles=(), full_name=None, password="password123"):
    u = Profile(
        email=email,
        full_name=full_name or email.split("@")[0].title(),
        password_hash=generate_password_hash(password),
    )
    db.session.add(u)
    db.session.flush()
    for role in roles:
        db.session.add(UserRole(user_id=u.id, role=role))
    db.session.commit()
    return u


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(identity=user.id)}"}


@pytest.fixture
def owner(app):
    return make_user("owner@example.com", ["owner"], "Olivia Owner")


@pytest.fixture
def manager(app):
    return make_user("manager@example.com", ["manager"], "Max Manager")


@pytest.fixture
def inspector(app):
    return make_user("inspector@example.com", ["inspector"], "Ivy Inspector")


@pytest.fixture
def owner_headers(owner):
    return auth_headers(owner)


@pytest.fixture
def manager_headers(manager):
    return auth_headers(manager)


@pytest.fixture
def inspector_headers(inspector):
    return auth_headers(inspector)


@pytest.fixture
def beach_house(owner):
    p = Property(name="Beach House", address="1 Shore Rd", city="Tybee", state="GA", zip="31328", created_by=owner.id)
    db.session.add(p)
    db.session.commit()
    return p
