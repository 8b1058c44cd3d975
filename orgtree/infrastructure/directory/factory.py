from orgtree.core.config import Settings
from orgtree.core.errors import ConfigurationError
from orgtree.infrastructure.directory.memory import InMemoryDirectoryStore
from orgtree.infrastructure.directory.store import DirectoryStore
from orgtree.infrastructure.logging import get_logger

logger = get_logger(__name__)


def create_directory_store(settings: Settings) -> DirectoryStore:
    """Build the directory store selected by ``directory_backend``"""
    if settings.directory_backend == "memory":
        logger.info("directory_store_created", backend="memory", base_dn=settings.base_dn)
        return InMemoryDirectoryStore(settings.base_dn)

    if settings.directory_backend == "ldap":
        # ldap3 ships with the optional "ldap" extra
        from orgtree.infrastructure.directory.ldap_store import LdapDirectoryStore

        logger.info(
            "directory_store_created",
            backend="ldap",
            host=settings.ldap_host,
            port=settings.ldap_port,
            use_ssl=settings.ldap_use_ssl,
        )
        return LdapDirectoryStore(
            host=settings.ldap_host,
            port=settings.ldap_port,
            bind_dn=settings.ldap_bind_dn,
            bind_password=settings.ldap_bind_password,
            use_ssl=settings.ldap_use_ssl,
            connect_timeout=settings.ldap_connect_timeout,
            receive_timeout=settings.ldap_receive_timeout,
        )

    raise ConfigurationError(f"Unknown directory backend: {settings.directory_backend}")
