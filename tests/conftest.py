"""
Pytest fixtures and configuration for PinkStar tests
"""
import os
import sys
import pytest

# Add app directory to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'app'))


@pytest.fixture
def app_config():
    """App configuration for tests: private in-memory database, no rate limits"""
    return {
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'RATELIMIT_ENABLED': False,
        'SEED_MOCK_PROFILES': True,
    }


@pytest.fixture
def app(app_config):
    """
    Application with a fresh database. No app context is left pushed, so
    every test client request gets its own context (and its own current_user).
    """
    from app import create_app
    from db import db

    _app = create_app(app_config)
    yield _app

    with _app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def session(app):
    """Database session inside a pushed app context, for service-level tests"""
    from db import db

    with app.app_context():
        yield db.session
        db.session.rollback()


@pytest.fixture
def profiles(session):
    """The seeded profiles by short name"""
    from models import Profile

    return {
        'admin': session.get(Profile, 'mock-admin-id'),
        'mod': session.get(Profile, 'mock-mod-id'),
        'user': session.get(Profile, 'mock-user-id'),
        'cat': session.get(Profile, 'another-user-id'),
    }


@pytest.fixture
def sample_groups():
    """Tag groups as the category editor submits them"""
    return [
        {
            'id': 'grp_type',
            'groupDisplayName': 'Type',
            'sortOrder': 0,
            'appliesToFiles': False,
            'tags': [
                {'id': 'tag_rpg', 'name': 'RPG', 'color': '#ff0000'},
                {'id': 'tag_fps', 'name': 'FPS'},
            ],
        },
        {
            'id': 'grp_platform',
            'groupDisplayName': 'Platform',
            'sortOrder': 1,
            'appliesToFiles': True,
            'tags': [
                {'id': 'tag_win', 'name': 'Windows'},
                {'id': 'tag_linux', 'name': 'Linux'},
            ],
        },
    ]


@pytest.fixture
def project(session, profiles):
    from services.project_service import ProjectService

    return ProjectService(session).create_project(profiles['admin'], {'name': 'Star Quest', 'itemType': 'game'})


@pytest.fixture
def category(session, profiles, project, sample_groups):
    from services.category_service import CategoryService

    category, _ = CategoryService(session).create_category(
        profiles['admin'],
        project.id,
        {'name': 'Mods', 'description': 'Community mods', 'tagGroupConfigs': sample_groups},
    )
    return category


@pytest.fixture
def api_headers(app):
    """Bearer headers for the seeded profiles (admin, mod, user, cat)"""
    from db import db
    from models import ApiToken

    headers = {}
    with app.app_context():
        for short_name, profile_id in (
            ('admin', 'mock-admin-id'),
            ('mod', 'mock-mod-id'),
            ('user', 'mock-user-id'),
            ('cat', 'another-user-id'),
        ):
            token = f'test-token-{short_name}'
            db.session.add(ApiToken(profile_id=profile_id, name=f'{short_name} tests', token=token))
            headers[short_name] = {'Authorization': f'Bearer {token}'}
        db.session.commit()
    return headers
