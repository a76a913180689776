from app.db.base_class import Base

# Import all models so Base.metadata knows every table
from app.models.user import User
from app.models.post import Post
