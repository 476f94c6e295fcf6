"""
ORM helpers shared by the Django repositories
"""

from django.db import NotSupportedError, connection, transaction  # type: ignore


def lock_queryset_if_possible(queryset, **kwargs):
    """
    Apply select_for_update when inside transaction.atomic()

    Databases without row locks (SQLite) get the queryset back unchanged;
    callers serialize with shared.application.locks instead.
    """
    if not transaction.get_connection().in_atomic_block:
        return queryset

    if not connection.features.has_select_for_update:
        return queryset

    if kwargs.get('of') and not connection.features.has_select_for_update_of:
        kwargs.pop('of')

    try:
        return queryset.select_for_update(**kwargs)
    except NotSupportedError:
        return queryset
