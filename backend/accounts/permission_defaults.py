# accounts/permission_defaults.py

ROLE_DEFAULTS = {
    "admin": {
        # Chart of accounts
        "accounts.view",
        "accounts.manage",

        # Posting engine
        "journal.view",
        "journal.post",
        "journal.void",

        # Vouchers
        "vouchers.view",
        "vouchers.manage",
        "vouchers.approve",
        "vouchers.post",

        # Reports
        "reports.view",
        "reports.export",

        # Inventory
        "inventory.view",
        "inventory.manage",

        # Legacy data migration
        "migration.view",
        "migration.import",
        "migration.export",
    },
    "accountant": {
        "accounts.view",
        "accounts.manage",
        "journal.view",
        "journal.post",
        "journal.void",
        "vouchers.view",
        "vouchers.manage",
        "vouchers.approve",
        "vouchers.post",
        "reports.view",
        "reports.export",
        "inventory.view",
        "inventory.manage",
        "migration.view",
    },
    "viewer": {
        "accounts.view",
        "journal.view",
        "vouchers.view",
        "reports.view",
        "inventory.view",
        "migration.view",
    },
}
