"""
Persistence layer: SQLAlchemy models plus the DBStorage singleton.
The engine is bound by create_app() via storage.reload(DATABASE_URL).
"""
from models.db_storage import DBStorage

storage = DBStorage()
