"""Query-session controller: state store, search executor and view."""
from app.session.controller import QuerySession  # noqa: F401
from app.session.executor import SearchRequestExecutor  # noqa: F401
from app.session.models import (  # noqa: F401
    ActiveTab,
    RequestStatus,
    ResultPassage,
    SessionSnapshot,
)
from app.session.store import SessionStateStore  # noqa: F401
