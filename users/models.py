from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Custom User model with role-based access control.
    Roles: SUPER_ADMIN, STORE_ADMIN, CASHIER

    User Types:
    - Super Admin: role=SUPER_ADMIN, store=None (can access every store)
    - Store User: role=STORE_ADMIN or CASHIER, store=Store (scoped to one store)
    """

    class Role(models.TextChoices):
        SUPER_ADMIN = 'SUPER_ADMIN', 'Super Admin'
        STORE_ADMIN = 'STORE_ADMIN', 'Store Admin'
        CASHIER = 'CASHIER', 'Cashier'

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.CASHIER,
        help_text='User role for permission management'
    )
    store = models.ForeignKey(
        'stores.Store',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='users',
        help_text='Store this user belongs to. Null for super admins.'
    )
    display_name = models.CharField(max_length=255, blank=True, null=True)
    phone_number = models.CharField(max_length=20, blank=True, null=True)
    image_url = models.URLField(max_length=500, blank=True, null=True)

    class Meta:
        db_table = 'users'
        ordering = ['-date_joined']

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"

    @property
    def is_super_admin(self):
        return self.role == self.Role.SUPER_ADMIN
