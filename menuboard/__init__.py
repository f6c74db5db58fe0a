"""Digital menu dashboard core: menu listing, filtering and mutations."""

from .config import DashboardConfig, load_config
from .controller import ListState, MenuListController, ViewStatus, create_controller
from .daterange import DatePicker, DateRange
from .errors import (
    AuthenticationError,
    FetchError,
    MenuboardError,
    MutationError,
    MutationInProgressError,
    ValidationError,
)
from .mapper import map_menu, map_menus
from .models import (
    AggregateType,
    FileKind,
    Menu,
    MenuFile,
    MenuForm,
    RoleSlot,
    UploadFile,
)
from .mutations import MenuMutator
from .query import MenuListResult, MenuQuery, MenuQueryCoordinator

__all__ = [
    "DashboardConfig",
    "load_config",
    "MenuListController",
    "ListState",
    "ViewStatus",
    "create_controller",
    "DateRange",
    "DatePicker",
    "MenuboardError",
    "AuthenticationError",
    "ValidationError",
    "FetchError",
    "MutationError",
    "MutationInProgressError",
    "map_menu",
    "map_menus",
    "Menu",
    "MenuFile",
    "MenuForm",
    "UploadFile",
    "FileKind",
    "AggregateType",
    "RoleSlot",
    "MenuMutator",
    "MenuQuery",
    "MenuListResult",
    "MenuQueryCoordinator",
]
