"""
Permissions and Roles Configuration
Defines the permission matrix for every module and the grants of each profile role.
Profile roles live in profiles.role; require_permission resolves grants from this file.
"""

# Define modules and their actions
MODULES = {
    "profiles": {
        "resource": "profiles",
        "actions": ["read", "update", "manage"],
        "description": "User profiles, points and leaderboard"
    },
    "polls": {
        "resource": "polls",
        "actions": ["create", "read", "update", "vote", "archive", "generate", "manage"],
        "description": "Poll creation, generation, voting, archiving and categories"
    },
    "comments": {
        "resource": "comments",
        "actions": ["create", "read", "update", "delete", "moderate"],
        "description": "Poll discussion threads"
    },
    "rewards": {
        "resource": "rewards",
        "actions": ["read", "play", "reset"],
        "description": "Daily spin, trivia and ad rewards"
    },
    "store": {
        "resource": "store",
        "actions": ["read", "redeem", "manage"],
        "description": "Points store and redemptions"
    },
    "trivia": {
        "resource": "trivia",
        "actions": ["read", "play", "manage"],
        "description": "Trivia questions and games"
    },
    "badges": {
        "resource": "badges",
        "actions": ["read", "manage"],
        "description": "Achievement badges"
    },
    "ambassadors": {
        "resource": "ambassadors",
        "actions": ["read", "update", "manage"],
        "description": "Ambassador program and commission tiers"
    },
    "referrals": {
        "resource": "referrals",
        "actions": ["read", "create"],
        "description": "Referral codes and bonuses"
    },
    "sponsors": {
        "resource": "sponsors",
        "actions": ["create", "read", "update", "verify"],
        "description": "Sponsor accounts"
    },
    "promoted_polls": {
        "resource": "promoted_polls",
        "actions": ["create", "read", "update", "approve"],
        "description": "Paid poll promotion campaigns"
    },
    "moderation": {
        "resource": "moderation",
        "actions": ["read", "act"],
        "description": "Moderator actions and audit log"
    },
    "reports": {
        "resource": "reports",
        "actions": ["create", "read", "resolve"],
        "description": "Content reports"
    },
    "settings": {
        "resource": "settings",
        "actions": ["read", "update"],
        "description": "Application settings, currencies and exchange rates"
    },
    "payments": {
        "resource": "payments",
        "actions": ["create", "read", "manage"],
        "description": "Wallet payments and transactions"
    },
    "payouts": {
        "resource": "payouts",
        "actions": ["request", "read", "manage"],
        "description": "Ambassador payout requests"
    },
    "analytics": {
        "resource": "analytics",
        "actions": ["read"],
        "description": "Platform, poll and trivia dashboard aggregates"
    }
}

# Grants per profile role; "inherits" pulls in another role's grants
ROLE_TYPES = {
    "user": {
        "inherits": None,
        "permissions": [
            "profiles:read", "profiles:update",
            "polls:create", "polls:read", "polls:update", "polls:vote", "polls:archive",
            "comments:create", "comments:read", "comments:update", "comments:delete",
            "rewards:read", "rewards:play",
            "store:read", "store:redeem",
            "trivia:read", "trivia:play",
            "badges:read",
            "referrals:read", "referrals:create",
            "sponsors:create", "sponsors:read", "sponsors:update",
            "promoted_polls:create", "promoted_polls:read", "promoted_polls:update",
            "reports:create",
            "settings:read",
            "payments:create", "payments:read",
        ],
        "description": "Regular player"
    },
    "ambassador": {
        "inherits": "user",
        "permissions": [
            "ambassadors:read", "ambassadors:update",
            "payouts:request", "payouts:read",
        ],
        "description": "Country ambassador earning referral commission"
    },
    "moderator": {
        "inherits": "user",
        "permissions": [
            "comments:moderate",
            "moderation:read", "moderation:act",
            "reports:read", "reports:resolve",
        ],
        "description": "Community moderator"
    },
    "admin": {
        "inherits": None,
        "permissions": "*",
        "description": "Full administrative access"
    }
}

ROLES = list(ROLE_TYPES.keys())


def get_role_permissions(role: str) -> list:
    """Return the sorted permission names granted to a profile role (unknown roles get none)."""
    role_config = ROLE_TYPES.get(role)
    if not role_config:
        return []
    if role_config["permissions"] == "*":
        return sorted(p["name"] for p in get_permission_matrix()["permissions"])
    granted = set(role_config["permissions"])
    if role_config["inherits"]:
        granted.update(get_role_permissions(role_config["inherits"]))
    return sorted(granted)


# Generate permission matrix
def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the grants of each role
    Format: {
        "permissions": [
            {"name": "polls:vote", "resource": "polls", "action": "vote", "description": "..."},
            ...
        ],
        "roles": [
            {"name": "moderator", "description": "...", "permissions": ["comments:moderate", ...]},
            ...
        ]
    }
    """
    permissions = []
    for module_config in MODULES.values():
        resource = module_config["resource"]
        for action in module_config["actions"]:
            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "description": f"{action.capitalize()} {module_config['description'].lower()}"
            })

    roles = []
    for role_name, role_config in ROLE_TYPES.items():
        if role_config["permissions"] == "*":
            role_permissions = sorted(p["name"] for p in permissions)
        else:
            role_permissions = get_role_permissions(role_name)
        roles.append({
            "name": role_name,
            "description": role_config["description"],
            "permissions": role_permissions
        })

    return {
        "permissions": permissions,
        "roles": roles
    }


PERMISSION_MATRIX = get_permission_matrix()
