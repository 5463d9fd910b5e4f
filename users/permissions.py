from rest_framework import permissions

from . import capabilities


class CapabilityPermission(permissions.BasePermission):
    """
    Grant access when the user's role holds a capability.

    ``read_capability`` applies to safe methods, ``capability`` to the rest.
    When ``read_capability`` is None every method needs ``capability``.
    """
    capability = None
    read_capability = None
    message = 'Your role does not allow this action.'

    def required_capability(self, request):
        if self.read_capability and request.method in permissions.SAFE_METHODS:
            return self.read_capability
        return self.capability

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return capabilities.role_has_capability(user.role, self.required_capability(request))


class CanManageStores(CapabilityPermission):
    """Create stores; reading is open to anyone allowed to view a store"""
    capability = capabilities.MANAGE_STORES
    read_capability = capabilities.VIEW_STORE


class CanUpdateStore(CapabilityPermission):
    capability = capabilities.UPDATE_STORE
    read_capability = capabilities.VIEW_STORE


class CanManageUsers(CapabilityPermission):
    capability = capabilities.MANAGE_USERS


class CanManageCatalog(CapabilityPermission):
    """Cashiers may browse the catalog but never change it"""
    capability = capabilities.MANAGE_CATALOG
    read_capability = capabilities.VIEW_CATALOG


class CanAdjustStock(CapabilityPermission):
    capability = capabilities.ADJUST_STOCK


class CanCheckout(CapabilityPermission):
    capability = capabilities.CHECKOUT
    read_capability = capabilities.VIEW_INVOICES


class CanViewInvoices(CapabilityPermission):
    capability = capabilities.VIEW_INVOICES


class CanRecordExpenses(CapabilityPermission):
    """Create and list expenses; edits and deletes need manage_expenses"""
    capability = capabilities.RECORD_EXPENSES

    def required_capability(self, request):
        if request.method in ('PUT', 'PATCH', 'DELETE'):
            return capabilities.MANAGE_EXPENSES
        return self.capability


class CanViewFinancials(CapabilityPermission):
    capability = capabilities.VIEW_FINANCIALS


class CanManagePartnerships(CapabilityPermission):
    capability = capabilities.MANAGE_PARTNERSHIPS
    read_capability = capabilities.VIEW_FINANCIALS
