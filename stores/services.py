"""
Store onboarding and update flows.

Both flows have a secondary step touching the store's admin users. A failure
there never undoes the store change; it is logged and reported back as a
warning string.
"""
import logging

from django.db import DatabaseError, transaction

from users.models import User
from .models import Store

logger = logging.getLogger(__name__)


def provision_store_admin(store, email, mobile):
    """
    Create the default STORE_ADMIN for a new store.

    Username is the email, initial password is the mobile number. Returns
    ``(user, warnings)``; ``user`` is None when nothing was created.
    """
    if not email or not mobile:
        logger.warning("Default user for store %s not created: email or mobile missing", store.pk)
        return None, ['Default store admin not created: email or mobile missing.']

    if User.objects.filter(username=email).exists():
        logger.warning("Default user for store %s not created: username %s already exists", store.pk, email)
        return None, [f"Default store admin not created: username '{email}' already exists."]

    try:
        with transaction.atomic():
            user = User(
                username=email,
                role=User.Role.STORE_ADMIN,
                store=store,
                display_name=store.owner_name,
                email=email,
                phone_number=mobile,
            )
            user.set_password(str(mobile))
            user.save()
    except DatabaseError:
        logger.exception("Auto-create store admin failed for store %s", store.pk)
        return None, ['Default store admin could not be created.']

    logger.info("Provisioned store admin %s for store %s", user.username, store.pk)
    return user, []


def create_store(validated_data):
    """Create a store and its default admin. Returns ``(store, admin_user, warnings)``."""
    with transaction.atomic():
        store = Store.objects.create(**validated_data)
    logger.info("Store %s (%s) created", store.pk, store.name)

    admin_user, warnings = provision_store_admin(store, store.email, store.mobile)
    return store, admin_user, warnings


def _propagate_to_store_admins(store, changes):
    """Copy owner/contact changes onto the store's STORE_ADMIN users."""
    warnings = []
    owner_name = changes.get('owner_name')
    email = changes.get('email')
    mobile = changes.get('mobile')

    for user in store.users.filter(role=User.Role.STORE_ADMIN):
        update_fields = []
        if 'owner_name' in changes:
            user.display_name = owner_name
            update_fields.append('display_name')
        if 'email' in changes:
            user.email = email or ''
            update_fields.append('email')
        if 'mobile' in changes:
            user.phone_number = mobile
            update_fields.append('phone_number')

        if email and email != user.username:
            if User.objects.filter(username=email).exclude(pk=user.pk).exists():
                warnings.append(
                    f"Could not change username for user {user.pk} to '{email}': already in use"
                )
            else:
                user.username = email
                update_fields.append('username')

        if update_fields:
            user.save(update_fields=update_fields)

    return warnings


def update_store(store, validated_data):
    """Apply an update and propagate it to admin users. Returns ``(store, warnings)``."""
    with transaction.atomic():
        for field, value in validated_data.items():
            setattr(store, field, value)
        store.save()

    propagated = {key: validated_data[key] for key in ('owner_name', 'email', 'mobile') if key in validated_data}
    if not propagated:
        return store, []

    try:
        with transaction.atomic():
            warnings = _propagate_to_store_admins(store, propagated)
    except DatabaseError:
        logger.exception("Propagate store update to users failed for store %s", store.pk)
        warnings = ['Failed to update associated users.']

    for warning in warnings:
        logger.warning("Store %s update: %s", store.pk, warning)
    return store, warnings
