"""Extension singletons, bound to the app in create_app()."""
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sock import Sock
from flask_sqlalchemy import SQLAlchemy

from tedlist.realtime import ConnectionRegistry

db            = SQLAlchemy()
login_manager = LoginManager()
limiter       = Limiter(key_func=get_remote_address)
migrate       = Migrate()
sock          = Sock()
connections   = ConnectionRegistry()
