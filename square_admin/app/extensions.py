"""
extensions.py - Flask extension singletons.

Initialises SQLAlchemy as a module-level object so it can be imported anywhere
without creating circular dependencies.

Pattern:
    1. Create the extension object here (no app attached yet).
    2. Call init_app(app) inside the app factory in app/__init__.py.
    3. Import `db` from here wherever needed.

    from square_admin.app.extensions import db

Do not pass the app object directly to SQLAlchemy() at import time - that
would prevent running tests with a separate test app instance.

Validation schemas (app/schemas/) inherit from marshmallow.Schema directly,
so unit tests can instantiate them without an application context.
"""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import BigInteger, Integer

db = SQLAlchemy()

# 64-bit identifiers everywhere. SQLite only autoincrements an INTEGER PRIMARY
# KEY, so the test database gets the Integer variant.
IdType = BigInteger().with_variant(Integer(), "sqlite")
