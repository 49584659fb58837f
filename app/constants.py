import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(APP_DIR, 'data')
CONFIG_DIR = os.path.join(APP_DIR, 'config')
DB_FILE = os.path.join(CONFIG_DIR, 'pinkstar.db')
CONFIG_FILE = os.path.join(CONFIG_DIR, 'settings.yaml')

PINKSTAR_DB = os.environ.get('PINKSTAR_DB_URI', 'sqlite:///' + DB_FILE)

BUILD_VERSION = '20261019_1200'

DEFAULT_SETTINGS = {
    "listing": {
        "page_size": 20,
        "best_match_limit": 3,
        "highlighted_limit": 5,
        "top_resources": 3,
    },
    "placeholders": {
        "project_banner": "https://placehold.co/1200x400.png",
        "project_icon": "https://placehold.co/128x128.png",
        "resource_image": "https://placehold.co/800x450.png",
    },
    "auth": {
        "login_rate_limit": "20 per minute",
        "seed_mock_profiles": True,
    },
}

# Category description layout: "<text>:::CONFIG_JSON:::<json array of tag groups>"
TAG_CONFIG_SEPARATOR = ':::CONFIG_JSON:::'

ROLE_USER = 'usuario'
ROLE_VIP = 'vip'
ROLE_MOD = 'mod'
ROLE_ADMIN = 'admin'
USER_APP_ROLES = [ROLE_USER, ROLE_VIP, ROLE_MOD, ROLE_ADMIN]
STAFF_ROLES = [ROLE_MOD, ROLE_ADMIN]

ITEM_TYPES = ['game', 'web', 'app', 'art-music']
ITEM_TYPE_NAMES = {
    'game': 'Games',
    'web': 'Web Projects',
    'app': 'Applications',
    'art-music': 'Art & Music',
}
ITEM_TYPE_PLURALS = {
    'game': 'games',
    'web': 'web',
    'app': 'apps',
    'art-music': 'art-music',
}

STATUS_PUBLISHED = 'published'
STATUS_DRAFT = 'draft'
STATUS_ARCHIVED = 'archived'
PROJECT_STATUSES = [STATUS_PUBLISHED, STATUS_DRAFT, STATUS_ARCHIVED]

FILE_CHANNELS = [
    {
        'id': 'release',
        'name': 'Release',
        'color': 'hsl(145 63% 42%)',
        'text_color': 'hsl(145 100% 98%)',
        'border_color': 'hsl(145 63% 35%)',
        'description': 'Stable and tested version, recommended for most users.',
    },
    {
        'id': 'beta',
        'name': 'Beta',
        'color': 'hsl(39 92% 55%)',
        'text_color': 'hsl(39 100% 10%)',
        'border_color': 'hsl(39 92% 48%)',
        'description': 'Potentially unstable, for testing new features.',
    },
    {
        'id': 'alpha',
        'name': 'Alpha',
        'color': 'hsl(0 72% 51%)',
        'text_color': 'hsl(0 100% 98%)',
        'border_color': 'hsl(0 72% 45%)',
        'description': 'Highly unstable, early development version.',
    },
]
RELEASE_CHANNEL = 'release'

SENTIMENT_HELPFUL = 'helpful'
SENTIMENT_UNHELPFUL = 'unhelpful'
INTERACTION_FUNNY = 'funny'
REVIEW_INTERACTIONS = [SENTIMENT_HELPFUL, SENTIMENT_UNHELPFUL, INTERACTION_FUNNY]

RESOURCE_SORTS = ['relevance', 'downloads', 'updatedAt', 'name']

# Seed profiles ensured at startup (id, name, usertag, role)
MOCK_PROFILES = [
    ('mock-admin-id', 'Administrator', '@admin', ROLE_ADMIN),
    ('mock-mod-id', 'Moderator', '@mod', ROLE_MOD),
    ('mock-user-id', 'Regular User', '@user', ROLE_USER),
    ('another-user-id', 'CreativeCat', '@creativecat', ROLE_USER),
]
