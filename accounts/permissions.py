"""
Authorization rules expressed as values over a user's role and approval
status. Policies compose with ``|``::

    protect(PROFESSIONAL | ADMIN)
"""

from houseplans_backend.http import PermissionDenied

from .models import Role


class Policy:
    def __init__(self, roles, denial, approval_required=()):
        self.roles = frozenset(str(r) for r in roles)
        self.denial = denial
        self.approval_required = frozenset(str(r) for r in approval_required)

    def __or__(self, other):
        labels = " or ".join(sorted(_label(r) for r in self.roles | other.roles))
        return Policy(
            self.roles | other.roles,
            f"Not authorized. Only {labels} can perform this action.",
            self.approval_required | other.approval_required,
        )

    def with_denial(self, denial):
        return Policy(self.roles, denial, self.approval_required)

    def allows(self, user):
        try:
            self.check(user)
        except PermissionDenied:
            return False
        return True

    def check(self, user):
        role = (user or {}).get("role")
        if role not in self.roles:
            raise PermissionDenied(self.denial)
        if role in self.approval_required and not user.get("isApproved"):
            raise PermissionDenied(f"Access Denied. Your {role} account is pending admin approval.")


def _label(role):
    return {
        Role.ADMIN.value: "Admins",
        Role.PROFESSIONAL.value: "Professionals",
        Role.SELLER.value: "Sellers",
        Role.CONTRACTOR.value: "Contractors",
        Role.USER.value: "Users",
    }[role]


ADMIN = Policy({Role.ADMIN}, "Not authorized as an admin")

PROFESSIONAL = Policy(
    {Role.PROFESSIONAL},
    "Not authorized. This action is for professionals only.",
    approval_required={Role.PROFESSIONAL},
)

SELLER = Policy(
    {Role.SELLER},
    "Not authorized. This action is for sellers only.",
    approval_required={Role.SELLER},
)


def is_admin(user):
    return ADMIN.allows(user)


def owns(user, owner_id):
    return user is not None and owner_id is not None and str(owner_id) == str(user["_id"])
