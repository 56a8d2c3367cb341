"""
Central registry of allowed actions per role.
"""
ROLE_SCOPES = {
    "customer": {"place_order", "chat"},
    "vendor":   {"manage_products", "update_order", "view_analytics", "manage_subscription", "chat"},
    "admin":    {"*"},
}

def role_has_scope(role: str, action: str) -> bool:
    scopes = ROLE_SCOPES.get(role, set())
    return "*" in scopes or action in scopes
