# config.py
# Manages application configuration for different environments using python-dotenv.

import os
from dotenv import load_dotenv

# 'basedir' is the veridoc package directory, 'PROJECT_ROOT' the repository root.
basedir = os.path.abspath(os.path.dirname(__file__))
PROJECT_ROOT = os.path.dirname(basedir)

load_dotenv(os.path.join(PROJECT_ROOT, '.env')) # Load .env from the project root

class Config:
    """Base configuration class with settings common to all environments."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a-very-hard-to-guess-default-secret-key'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10MB upload limit
    BASE_VERIFICATION_URL = os.environ.get('BASE_VERIFICATION_URL') or 'http://127.0.0.1:5000'

    # Text extraction / AI parsing collaborators
    GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY', '')
    GEMINI_MODEL = os.environ.get('GEMINI_MODEL') or 'gemini-1.5-flash'
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY', '')
    OPENAI_MODEL = os.environ.get('OPENAI_MODEL') or 'gpt-4o-mini'
    AI_REQUEST_TIMEOUT = int(os.environ.get('AI_REQUEST_TIMEOUT') or 30)
    TESSERACT_CMD = os.environ.get('TESSERACT_CMD', '')
    OCR_LANG = os.environ.get('OCR_LANG') or 'eng'

    # Verification service credentials, one endpoint/key pair per document type
    VERIFICATION_API_KEY = os.environ.get('VERIFICATION_API_KEY', '')
    BACKUP_API_KEY = os.environ.get('BACKUP_API_KEY', '')
    AADHAR_VERIFICATION_URL = os.environ.get('AADHAR_VERIFICATION_URL', '')
    AADHAR_VERIFICATION_KEY = os.environ.get('AADHAR_VERIFICATION_KEY', '')
    PAN_VERIFICATION_URL = os.environ.get('PAN_VERIFICATION_URL', '')
    PAN_VERIFICATION_KEY = os.environ.get('PAN_VERIFICATION_KEY', '')
    MARKSHEET_VERIFICATION_URL = os.environ.get('MARKSHEET_VERIFICATION_URL', '')
    MARKSHEET_VERIFICATION_KEY = os.environ.get('MARKSHEET_VERIFICATION_KEY', '')

    # Extraction tuning
    MIN_SUBJECT_ROWS = int(os.environ.get('MIN_SUBJECT_ROWS') or 4)
    PROOF_CODE_HISTORY_LIMIT = int(os.environ.get('PROOF_CODE_HISTORY_LIMIT') or 20)

    @staticmethod
    def init_app(app):
        pass

class DevelopmentConfig(Config):
    """Configuration for the development environment."""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        'sqlite:///' + os.path.join(PROJECT_ROOT, 'instance', 'veridoc-dev.db')

class TestingConfig(Config):
    """Configuration for the testing environment."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite:///:memory:'
    # Never reach out to hosted models from the test suite.
    GEMINI_API_KEY = ''
    OPENAI_API_KEY = ''
    VERIFICATION_API_KEY = ''

class ProductionConfig(Config):
    """Configuration for the production environment."""
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)
        if not cls.SQLALCHEMY_DATABASE_URI:
            raise ValueError("DATABASE_URL is not set for the production environment.")

config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
