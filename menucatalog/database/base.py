from menucatalog.database.session import Base

# Import all models here so that Base has them registered
# The following imports are for SQLAlchemy to create the tables
from menucatalog.models.product import Product
