import os

BACKEND_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
DATA_DIR = os.environ.get('DATA_DIR') or os.path.join(BACKEND_ROOT, 'data')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(DATA_DIR, 'leaderboard.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Maximum number of entries returned by GET /api/leaderboard
    LEADERBOARD_LIMIT = int(os.environ.get('LEADERBOARD_LIMIT', '100'))
    # Optional sensor bridge, e.g. COM3 on Windows or /dev/ttyUSB0. Unset disables it.
    SERIAL_PORT = os.environ.get('SERIAL_PORT') or None
    SERIAL_BAUD_RATE = int(os.environ.get('SERIAL_BAUD_RATE', '9600'))
    # Comma separated list, '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
