"""Admin Predicate — decides whether a caller profile may provision staff.

Invariants:
    - PURE: no IO, no async
    - Admin iff is_admin is exactly True OR role equals "admin" case-insensitively
    - A missing profile (None) is never admin
"""

from staff_provisioning.core.domain_types import StaffRole


def is_admin_profile(profile: dict | None) -> bool:
    if not profile:
        return False
    if profile.get("is_admin") is True:
        return True
    role = profile.get("role")
    return str(role or "").lower() == StaffRole.ADMIN.value
