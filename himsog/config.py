import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-key')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Wall-clock offset used to compute "now" for providers (Philippine time)
    PROVIDER_UTC_OFFSET_HOURS = int(os.environ.get('PROVIDER_UTC_OFFSET_HOURS', 8))

    # Used when a provider has no slot duration configured
    DEFAULT_SLOT_DURATION = int(os.environ.get('DEFAULT_SLOT_DURATION', 30))

    # JSON API, requests carry the session cookie
    WTF_CSRF_ENABLED = os.environ.get('WTF_CSRF_ENABLED', 'true').lower() == 'true'

class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or 'sqlite:///himsog_dev.db'

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite://'

    # Disable CSRF so the test client can post JSON directly
    WTF_CSRF_ENABLED = False

class ProductionConfig(Config):
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///himsog.db'

config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
