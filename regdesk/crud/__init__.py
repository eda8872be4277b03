# regdesk/crud/__init__.py

from .crud_print_status import print_status
from .crud_registration import registration
from .crud_role import role
from .crud_scan import scan
from .crud_server_mode import server_mode
from .crud_user import user
