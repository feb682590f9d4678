from sqlalchemy.orm import declarative_base

# Shared by every table so foreign keys resolve across modules
Base = declarative_base()
