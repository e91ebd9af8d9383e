from t6s_backend.admin.dispatcher import AdminDispatcher, AdminRoute, DEFAULT_ROUTES, MAX_ATTEMPTS

__all__ = ["AdminDispatcher", "AdminRoute", "DEFAULT_ROUTES", "MAX_ATTEMPTS"]
