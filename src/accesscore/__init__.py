from .builtin_roles import (
    ROLE_INHERITANCE,
    BuiltInRoles,
    expand_builtin_roles,
    role_children,
    validate_builtin_roles,
)
from .config import AccessControlConfig, LogLevel, load_config_from_env
from .evaluator import (
    AllEvaluator,
    AnyEvaluator,
    Evaluator,
    PermissionEvaluator,
    eval_all,
    eval_any,
    eval_permission,
    group_scopes_by_action,
)
from .exceptions import (
    AccessControlError,
    ConfigurationError,
    FixedRolePrefixMissingError,
    InvalidBuiltInRoleError,
    ResolutionError,
    StoreError,
    UnsupportedOperationError,
    ValidationError,
)
from .logging import (
    AccessControlFormatter,
    PrincipalLoggerAdapter,
    get_principal_logger,
    safe_preview,
    setup_logging,
)
from .models import Metadata, Permission, Principal, Role, RoleRegistration
from .registry import (
    FIXED_ROLE_PREFIX,
    FixedRoleRegistry,
    RegistrationList,
    get_fixed_role_registry,
    reset_fixed_role_registry,
    validate_fixed_role,
)
from .scope import (
    ScopeKeyword,
    ScopeResolver,
    resource_all_id_scope,
    resource_all_scope,
    resource_scope,
    scope,
    scope_matches,
)
from .service import USAGE_METRIC_ENABLED, AccessControlService
from .store import (
    InMemoryPermissionStore,
    PermissionStore,
    SetResourcePermissionsCommand,
    UserResourcePermissionsQuery,
)
from .usage import UsageReport, UsageStats

__all__ = [
    'AccessControlConfig',
    'AccessControlError',
    'AccessControlFormatter',
    'AccessControlService',
    'AllEvaluator',
    'AnyEvaluator',
    'BuiltInRoles',
    'ConfigurationError',
    'Evaluator',
    'FIXED_ROLE_PREFIX',
    'FixedRolePrefixMissingError',
    'FixedRoleRegistry',
    'InMemoryPermissionStore',
    'InvalidBuiltInRoleError',
    'LogLevel',
    'Metadata',
    'Permission',
    'PermissionEvaluator',
    'PermissionStore',
    'Principal',
    'PrincipalLoggerAdapter',
    'ROLE_INHERITANCE',
    'RegistrationList',
    'ResolutionError',
    'Role',
    'RoleRegistration',
    'ScopeKeyword',
    'ScopeResolver',
    'SetResourcePermissionsCommand',
    'StoreError',
    'USAGE_METRIC_ENABLED',
    'UnsupportedOperationError',
    'UsageReport',
    'UsageStats',
    'UserResourcePermissionsQuery',
    'ValidationError',
    'eval_all',
    'eval_any',
    'eval_permission',
    'expand_builtin_roles',
    'get_fixed_role_registry',
    'get_principal_logger',
    'group_scopes_by_action',
    'load_config_from_env',
    'reset_fixed_role_registry',
    'resource_all_id_scope',
    'resource_all_scope',
    'resource_scope',
    'role_children',
    'safe_preview',
    'scope',
    'scope_matches',
    'setup_logging',
    'validate_builtin_roles',
    'validate_fixed_role',
]
