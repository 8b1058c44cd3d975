"""LDAP directory store built on ldap3.

Installed with the ``ldap`` extra. Each primitive opens its own connection,
binds, runs one operation and unbinds.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import ldap3
from ldap3.core.exceptions import LDAPException
from ldap3.utils.conv import escape_filter_chars

from orgtree.core.errors import (
    AbsentValueError,
    AlreadyExistsError,
    DuplicateValueError,
    NotFoundError,
    StoreUnavailableError,
)
from orgtree.infrastructure.directory.store import (
    OBJECT_CLASS_ATTRIBUTE,
    DirectoryEntry,
    DirectoryStore,
    SearchScope,
)
from orgtree.infrastructure.logging import get_logger

logger = get_logger(__name__)

# LDAP result codes (RFC 4511)
RESULT_SUCCESS = 0
RESULT_NO_SUCH_ATTRIBUTE = 16
RESULT_ATTRIBUTE_OR_VALUE_EXISTS = 20
RESULT_NO_SUCH_OBJECT = 32
RESULT_ENTRY_ALREADY_EXISTS = 68

_SCOPES = {
    SearchScope.BASE: ldap3.BASE,
    SearchScope.ONE_LEVEL: ldap3.LEVEL,
    SearchScope.SUBTREE: ldap3.SUBTREE,
}


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [_as_text(v) for v in value]
    return [_as_text(value)]


def _as_text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class LdapDirectoryStore(DirectoryStore):
    """Directory store talking to an LDAP server"""

    def __init__(
        self,
        host: str,
        port: int,
        bind_dn: str,
        bind_password: str,
        use_ssl: bool = False,
        connect_timeout: int = 10,
        receive_timeout: int = 30,
    ):
        self.host = host
        self.port = port
        self.bind_dn = bind_dn
        self._bind_password = bind_password
        self.receive_timeout = receive_timeout
        self._server = ldap3.Server(
            host,
            port=port,
            use_ssl=use_ssl,
            get_info=ldap3.NONE,
            connect_timeout=connect_timeout,
        )

    def search(
        self, base_dn: str, scope: SearchScope, object_class: Optional[str] = None
    ) -> List[DirectoryEntry]:
        if object_class:
            search_filter = f"({OBJECT_CLASS_ATTRIBUTE}={escape_filter_chars(object_class)})"
        else:
            search_filter = f"({OBJECT_CLASS_ATTRIBUTE}=*)"

        with self._instrumented("search", base_dn), self._session("search") as conn:
            conn.search(
                search_base=base_dn,
                search_filter=search_filter,
                search_scope=_SCOPES[scope],
                attributes=ldap3.ALL_ATTRIBUTES,
            )
            code = conn.result.get("result")
            if code == RESULT_NO_SUCH_OBJECT:
                return []
            if code != RESULT_SUCCESS:
                raise self._protocol_failure("search", conn.result)

            return [
                DirectoryEntry(
                    dn=entry.entry_dn,
                    attributes={
                        name: _as_list(values)
                        for name, values in entry.entry_attributes_as_dict.items()
                    },
                )
                for entry in conn.entries
            ]

    def read_entry(self, dn: str) -> Optional[DirectoryEntry]:
        entries = self.search(dn, SearchScope.BASE)
        return entries[0] if entries else None

    def add_entry(self, dn: str, attributes: Dict[str, List[str]]) -> None:
        with self._instrumented("add", dn), self._session("add") as conn:
            conn.add(dn, attributes=attributes)
            code = conn.result.get("result")
            if code == RESULT_ENTRY_ALREADY_EXISTS:
                raise AlreadyExistsError("Entry", dn)
            if code == RESULT_NO_SUCH_OBJECT:
                raise NotFoundError("Parent entry", dn)
            if code != RESULT_SUCCESS:
                raise self._protocol_failure("add", conn.result)
        logger.debug("directory_entry_added", dn=dn)

    def add_attribute_value(self, dn: str, attribute: str, value: str) -> None:
        with self._instrumented("modify_add", dn), self._session("modify_add") as conn:
            conn.modify(dn, {attribute: [(ldap3.MODIFY_ADD, [value])]})
            code = conn.result.get("result")
            if code == RESULT_ATTRIBUTE_OR_VALUE_EXISTS:
                raise DuplicateValueError(dn, attribute, value)
            if code == RESULT_NO_SUCH_OBJECT:
                raise NotFoundError("Entry", dn)
            if code != RESULT_SUCCESS:
                raise self._protocol_failure("modify_add", conn.result)

    def remove_attribute_value(self, dn: str, attribute: str, value: str) -> None:
        with self._instrumented("modify_delete", dn), self._session("modify_delete") as conn:
            conn.modify(dn, {attribute: [(ldap3.MODIFY_DELETE, [value])]})
            code = conn.result.get("result")
            if code == RESULT_NO_SUCH_ATTRIBUTE:
                raise AbsentValueError(dn, attribute, value)
            if code == RESULT_NO_SUCH_OBJECT:
                raise NotFoundError("Entry", dn)
            if code != RESULT_SUCCESS:
                raise self._protocol_failure("modify_delete", conn.result)

    def ping(self) -> bool:
        try:
            with self._session("ping"):
                return True
        except StoreUnavailableError as e:
            logger.warning("directory_unreachable", host=self.host, port=self.port, error=e.reason)
            return False

    @contextmanager
    def _session(self, operation: str) -> Iterator[ldap3.Connection]:
        """Bind a fresh connection for one primitive and unbind afterwards"""
        conn = None
        try:
            conn = ldap3.Connection(
                self._server,
                user=self.bind_dn,
                password=self._bind_password,
                auto_bind=True,
                receive_timeout=self.receive_timeout,
            )
            yield conn
        except LDAPException as e:
            raise StoreUnavailableError(operation, f"{type(e).__name__}: {e}") from e
        finally:
            if conn is not None:
                try:
                    conn.unbind()
                except LDAPException as e:
                    logger.debug("directory_unbind_failed", operation=operation, error=str(e))

    @staticmethod
    def _protocol_failure(operation: str, result: Dict[str, Any]) -> StoreUnavailableError:
        return StoreUnavailableError(
            operation,
            f"result {result.get('result')} ({result.get('description', 'unknown')}): "
            f"{result.get('message', '')}".rstrip(": ")
        )
