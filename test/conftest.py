"""
Pytest configuration and fixtures for testing.

Every test gets a fresh application on an in-memory SQLite database. No
application context is held between requests, so each request resolves its
bearer token on its own.
"""
import os
from unittest.mock import Mock, patch

import pytest

# Set test environment variables BEFORE importing the app package
os.environ['FLASK_ENV'] = 'testing'
os.environ['SECRET_KEY'] = 'test-secret-key-3c1f7a9e0b2d'
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['MIN_PASSWORD_LENGTH'] = '6'
os.environ['CLOUDINARY_CLOUD_NAME'] = 'demo'
os.environ['CLOUDINARY_API_KEY'] = 'test-key'
os.environ['CLOUDINARY_API_SECRET'] = 'test-secret'
os.environ['CORS_ORIGINS'] = 'http://localhost:5173'

from alfitra import create_app, db  # noqa: E402
from alfitra.auth.models import User  # noqa: E402
from alfitra.auth.utils import create_token, hash_password  # noqa: E402
from alfitra.modules.models import Module, QuizDay  # noqa: E402
from alfitra.quiz.models import Question  # noqa: E402


@pytest.fixture
def app():
    """Create application for testing."""
    app = create_app({'TESTING': True})
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def make_user(app):
    """
    Factory creating a user directly in the database.

    Returns a dict with ``id``, ``email``, ``password``, ``token`` and
    ready-to-use ``headers``.
    """
    counter = {'n': 0}

    def _make(role='user', name=None, email=None, password='secret123'):
        counter['n'] += 1
        email = email or f"{role}{counter['n']}@example.com"
        with app.app_context():
            user = User(
                name=name or f"{role.title()} {counter['n']}",
                email=email,
                password_hash=hash_password(password),
                role=role,
            )
            db.session.add(user)
            db.session.commit()
            token = create_token(user)
            return {
                'id': user.id,
                'name': user.name,
                'email': email,
                'password': password,
                'token': token,
                'headers': {'Authorization': f'Bearer {token}'},
            }

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(role='admin', name='Admin')


@pytest.fixture
def participant(make_user):
    return make_user(role='user', name='Teacher One')


@pytest.fixture
def seerat_day(app, admin):
    """
    Module "Seerat Basics" with a published, open quiz day "Day 1" holding
    one MCQ (correct "B") and one fill-in-the-blank question ("2" / "255").
    """
    with app.app_context():
        module = Module(name='Seerat Basics', description='', section='Seerat', created_by=admin['id'])
        db.session.add(module)
        db.session.flush()
        day = QuizDay(module_id=module.id, date_label='Day 1', is_published=True, responses_open=True)
        db.session.add(day)
        db.session.flush()
        mcq = Question(quiz_day_id=day.id, text='Pick B', question_type='mcq',
                       options=['A', 'B', 'C'], correct_index=1)
        fill = Question(quiz_day_id=day.id, text='Ayat al-Kursi', question_type='fillblank',
                        correct_answer1='2', correct_answer2='255')
        db.session.add_all([mcq, fill])
        db.session.commit()
        return {
            'module_id': module.id,
            'quiz_day_id': day.id,
            'mcq_id': mcq.id,
            'fill_id': fill.id,
        }


@pytest.fixture
def set_day_flags(app):
    """Flip quiz day flags directly in the database."""
    def _set(quiz_day_id, **flags):
        with app.app_context():
            day = db.session.get(QuizDay, quiz_day_id)
            for key, value in flags.items():
                setattr(day, key, value)
            db.session.commit()
    return _set


@pytest.fixture
def cloudinary_upload():
    """Patch the object-store upload; returns the mock."""
    with patch('cloudinary.uploader.upload') as upload:
        upload.return_value = {
            'secure_url': 'https://res.cloudinary.com/demo/image/upload/v17/quiz-references/notes_1700000000000.pdf?_a=xyz',
            'public_id': 'quiz-references/notes_1700000000000',
        }
        yield upload


@pytest.fixture
def cloudinary_destroy():
    """Patch the object-store delete; returns the mock."""
    with patch('cloudinary.uploader.destroy') as destroy:
        destroy.return_value = {'result': 'ok'}
        yield destroy


@pytest.fixture
def remote_pdf():
    """Patch the HTTP client used for download proxying."""
    with patch('alfitra.materials.storage.requests.get') as get:
        response = Mock()
        response.headers = {'Content-Length': '8', 'Content-Type': 'application/octet-stream'}
        response.iter_content.return_value = iter([b'%PDF', b'-1.4'])
        response.raise_for_status.return_value = None
        get.return_value = response
        yield get
