"""Authorization decisions.

Pure functions of the caller and the target entity. Missing role or
ownership data always denies.
"""

from typing import Any

from docmanager.common import ADMIN_ACCESS_LEVEL, Caller, Document, id_eq


def is_owner(caller: Caller, document: Document) -> bool:
    return id_eq(caller.id, document.owner_id)


def is_admin(caller: Caller) -> bool:
    return caller.role is not None and caller.role.access_level == ADMIN_ACCESS_LEVEL


def _has_access_level(caller: Caller, document: Document) -> bool:
    if document.role is None or caller.role is None:
        return False
    return caller.role.title.check_permission(document.role.title)


def can_read(caller: Caller, document: Document) -> bool:
    """Owners always read; others need an access level at least the document's."""
    if is_owner(caller, document):
        return True
    return _has_access_level(caller, document)


def can_modify(caller: Caller, document: Document) -> bool:
    # same rule as reading: anyone who may read a document may edit it
    return can_read(caller, document)


def can_delete(caller: Caller, document: Document) -> bool:
    """Owners and admins may delete."""
    return is_owner(caller, document) or is_admin(caller)


def can_list_users(caller: Caller) -> bool:
    return is_admin(caller)


def can_get_stats(caller: Caller) -> bool:
    return is_admin(caller)


def can_view_user_profile(caller: Caller, target_user_id: Any) -> bool:
    return id_eq(caller.id, target_user_id) or is_admin(caller)


def can_modify_user_profile(caller: Caller, target_user_id: Any) -> bool:
    return can_view_user_profile(caller, target_user_id)


def can_delete_user(caller: Caller, target_user_id: Any) -> bool:
    return can_view_user_profile(caller, target_user_id)


def can_change_role(caller: Caller) -> bool:
    return is_admin(caller)


def visible_documents(caller: Caller, documents: list[Document]) -> list[Document]:
    """Keep the documents the caller may read, preserving order."""
    return [document for document in documents if can_read(caller, document)]
