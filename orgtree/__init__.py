"""OrgTree: hierarchical organizations and groups in an LDAP directory."""

__version__ = "0.1.0"
