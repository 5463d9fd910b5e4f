"""
Role capability table.

The same table is served to the client (``/api/auth/capabilities/``) so the
UI can hide what the server would refuse anyway.
"""

MANAGE_STORES = 'manage_stores'
UPDATE_STORE = 'update_store'
VIEW_STORE = 'view_store'
MANAGE_USERS = 'manage_users'
MANAGE_CATALOG = 'manage_catalog'
VIEW_CATALOG = 'view_catalog'
ADJUST_STOCK = 'adjust_stock'
CHECKOUT = 'checkout'
VIEW_INVOICES = 'view_invoices'
RECORD_EXPENSES = 'record_expenses'
MANAGE_EXPENSES = 'manage_expenses'
VIEW_FINANCIALS = 'view_financials'
MANAGE_PARTNERSHIPS = 'manage_partnerships'

ALL_CAPABILITIES = frozenset({
    MANAGE_STORES, UPDATE_STORE, VIEW_STORE, MANAGE_USERS,
    MANAGE_CATALOG, VIEW_CATALOG, ADJUST_STOCK, CHECKOUT, VIEW_INVOICES,
    RECORD_EXPENSES, MANAGE_EXPENSES, VIEW_FINANCIALS, MANAGE_PARTNERSHIPS,
})

CASHIER_CAPABILITIES = frozenset({
    VIEW_STORE, VIEW_CATALOG, CHECKOUT, VIEW_INVOICES, RECORD_EXPENSES,
})

ROLE_CAPABILITIES = {
    'SUPER_ADMIN': ALL_CAPABILITIES,
    'STORE_ADMIN': ALL_CAPABILITIES - {MANAGE_STORES},
    'CASHIER': CASHIER_CAPABILITIES,
}


def capabilities_for(role):
    return ROLE_CAPABILITIES.get(role, frozenset())


def role_has_capability(role, capability):
    return capability in capabilities_for(role)


def capability_table():
    """Serializable form: ``{role: [capability, ...]}``."""
    return {role: sorted(caps) for role, caps in ROLE_CAPABILITIES.items()}
