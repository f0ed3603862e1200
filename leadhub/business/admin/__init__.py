from leadhub.business.admin.service import AdminService, admin_service

__all__ = [
    "AdminService",
    "admin_service",
]
