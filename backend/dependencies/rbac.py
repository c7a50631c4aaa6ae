"""
RBAC dependencies for FastAPI routes
Role-based access control implemented as dependencies that run after authentication
"""
from fastapi import HTTPException, status, Request
import logging

logger = logging.getLogger(__name__)

RESOURCES_FOR_ROLES = {
    'admin': {
        'admin': ['read', 'write', 'delete'],
        'admin/users': ['read', 'write'],
        'admin/kyc': ['read', 'write'],
        'admin/reports': ['read', 'write'],
        'notifications': ['read', 'write'],
    },
    'seller': {
        'notifications': ['read', 'write'],
    },
    'buyer': {
        'notifications': ['read', 'write'],
    }
}

def normalize_path(path: str) -> str:
    """Normalize request path for RBAC checking"""
    if path.startswith('/'):
        path = path[1:]

    segments = [segment for segment in path.split('/') if segment]

    if not segments:
        return path

    if segments[0] == 'admin':
        if len(segments) >= 2:
            return f'admin/{segments[1]}'
        return 'admin'

    return segments[0]

def translate_method_to_action(method: str) -> str:
    """Map HTTP methods to RBAC actions"""
    method_permission_mapping = {
        'GET': 'read',
        'POST': 'write',
        'PUT': 'write',
        'PATCH': 'write',
        'DELETE': 'delete',
    }
    return method_permission_mapping.get(method.upper(), 'read')

def has_permission(user_role: str, resource_name: str, required_permission: str) -> bool:
    """Check if user role has permission for the resource and action"""
    if user_role not in RESOURCES_FOR_ROLES:
        return False

    user_permissions = RESOURCES_FOR_ROLES[user_role]

    if resource_name in user_permissions:
        return required_permission in user_permissions[resource_name]

    parent_resource = resource_name.split('/')[0] if '/' in resource_name else resource_name
    if parent_resource in user_permissions:
        return required_permission in user_permissions[parent_resource]

    return False

def require_permission(resource: str = None, permission: str = None):
    """
    Create an RBAC dependency that checks permissions

    Args:
        resource: Specific resource name (auto-detected if not provided)
        permission: Specific permission (auto-detected if not provided)
    """
    def check_rbac(request: Request):
        """RBAC dependency function"""
        current_user = getattr(request.state, 'current_user', None)
        if not current_user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required"
            )

        user_role = current_user.get('role') or 'buyer'
        resource_name = resource or normalize_path(str(request.url.path))
        required_permission = permission or translate_method_to_action(request.method)

        if not has_permission(user_role, resource_name, required_permission):
            logger.warning(f"Access denied - User: {user_role}, Resource: {resource_name}, Permission: {required_permission}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. {user_role.title()} role does not have {required_permission} permission for {resource_name}"
            )

        logger.debug(f"Access granted - User: {user_role}, Resource: {resource_name}, Permission: {required_permission}")
        return True

    return check_rbac


require_user_management = require_permission("admin/users", "read")
require_user_management_write = require_permission("admin/users", "write")

require_kyc_review = require_permission("admin/kyc", "read")
require_kyc_review_write = require_permission("admin/kyc", "write")

require_reports = require_permission("admin/reports", "read")
require_reports_write = require_permission("admin/reports", "write")

require_notifications_write = require_permission("notifications", "write")
