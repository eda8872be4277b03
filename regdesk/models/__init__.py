# regdesk/models/__init__.py
# Import all models to ensure SQLAlchemy can resolve relationships

from regdesk.db.base_class import Base
from regdesk.models.role import Role
from regdesk.models.user import User
from regdesk.models.print_status import PrintStatus
from regdesk.models.server_mode import ServerMode
from regdesk.models.registration import Registration
from regdesk.models.scan import Scan

__all__ = ["Base", "Role", "User", "PrintStatus", "ServerMode", "Registration", "Scan"]
