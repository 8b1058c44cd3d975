"""Hierarchical entry paths and the grammar that builds and parses them.

An ``EntryPath`` is an immutable sequence of typed components stored leaf
first, exactly like a distinguished name::

    cn=eng,ou=groups,ou=Acme,ou=groups,ou=internal,o=sreemat
    group  container  org    container  branch      suffix

Well-formed paths follow this grammar, read from the suffix down::

    suffix -> branch -> groups_container
           -> (organization -> groups_container)*
           -> group [-> group (reserved admin) | -> principal]

``PathGrammar`` is the only place that knows the grammar. It builds paths
from structured names, renders them as DN strings and parses DN strings
back, raising ``InvalidPathError`` for anything that does not fit.
"""

from dataclasses import dataclass
from enum import Enum
from string import hexdigits
from typing import Iterator, List, Optional, Tuple

from orgtree.core.directory.layout import Branch, DirectoryLayout
from orgtree.core.errors import InvalidPathError, ValidationError

_SPECIAL_CHARS = set('",+;<>\\=')


class ComponentKind(str, Enum):
    """Kinds of path components"""

    SUFFIX = "suffix"
    BRANCH = "branch"
    ORGANIZATION = "organization"
    GROUPS_CONTAINER = "groups_container"
    GROUP = "group"
    PRINCIPAL = "principal"


def escape_rdn_value(value: str) -> str:
    """Escape an attribute value for use inside a DN (RFC 4514)"""
    escaped = []
    for index, char in enumerate(value):
        if char in _SPECIAL_CHARS:
            escaped.append("\\" + char)
        elif char == "\x00":
            escaped.append("\\00")
        elif char == "#" and index == 0:
            escaped.append("\\#")
        elif char == " " and (index == 0 or index == len(value) - 1):
            escaped.append("\\ ")
        else:
            escaped.append(char)
    return "".join(escaped)


def unescape_rdn_value(value: str) -> str:
    """Reverse ``escape_rdn_value``, including ``\\hh`` hex pairs"""
    buffer = bytearray()
    index = 0
    while index < len(value):
        char = value[index]
        if char != "\\":
            buffer += char.encode("utf-8")
            index += 1
            continue

        pair = value[index + 1:index + 3]
        if len(pair) == 2 and all(c in hexdigits for c in pair):
            buffer.append(int(pair, 16))
            index += 3
        elif index + 1 < len(value):
            buffer += value[index + 1].encode("utf-8")
            index += 2
        else:
            raise ValueError("dangling escape character")
    return buffer.decode("utf-8")


def _split_unescaped(text: str, separator: str) -> List[str]:
    parts = []
    current = []
    escaped = False
    for char in text:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            current.append(char)
            escaped = True
        elif char == separator:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if escaped:
        raise ValueError("dangling escape character")
    parts.append("".join(current))
    return parts


def _strip_rdn(text: str) -> str:
    stripped = text.strip()
    # An escaped trailing space must survive the strip
    if stripped.endswith("\\") and text.rstrip() != text:
        stripped += " "
    return stripped


def split_dn(dn: str) -> List[Tuple[str, str]]:
    """Split a DN string into ``(attribute, value)`` pairs, leaf first"""
    if dn is None or not dn.strip():
        raise InvalidPathError(str(dn), "empty distinguished name")

    pairs = []
    try:
        for raw_rdn in _split_unescaped(dn, ","):
            rdn = _strip_rdn(raw_rdn)
            pieces = _split_unescaped(rdn, "=")
            if len(pieces) < 2 or not pieces[0].strip():
                raise InvalidPathError(dn, f"malformed component '{rdn}'")
            if len(_split_unescaped(rdn, "+")) > 1:
                raise InvalidPathError(dn, f"multi-valued component '{rdn}'")
            attribute = pieces[0].strip()
            value = unescape_rdn_value(_strip_rdn("=".join(pieces[1:])))
            if not value:
                raise InvalidPathError(dn, f"empty value in component '{rdn}'")
            pairs.append((attribute, value))
    except ValueError as e:
        raise InvalidPathError(dn, str(e)) from e
    return pairs


@dataclass(frozen=True, eq=False)
class PathComponent:
    """A single typed component of an entry path"""

    kind: ComponentKind
    attribute: str
    name: str

    @property
    def rdn(self) -> str:
        return f"{self.attribute}={escape_rdn_value(self.name)}"

    def _key(self) -> Tuple[str, str, str]:
        return (self.kind.value, self.attribute.lower(), self.name.lower())

    def __eq__(self, other):
        if not isinstance(other, PathComponent):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())


@dataclass(frozen=True, eq=False)
class EntryPath:
    """Immutable, structured identifier of a directory entry (leaf first)"""

    components: Tuple[PathComponent, ...]

    @property
    def leaf(self) -> PathComponent:
        return self.components[0]

    @property
    def kind(self) -> ComponentKind:
        return self.leaf.kind

    @property
    def name(self) -> str:
        return self.leaf.name

    @property
    def is_branch_root(self) -> bool:
        """The groups container directly below a branch entry"""
        return (
            len(self.components) > 1
            and self.kind == ComponentKind.GROUPS_CONTAINER
            and self.components[1].kind == ComponentKind.BRANCH
        )

    @property
    def parent(self) -> Optional["EntryPath"]:
        """Path with the leaf removed; branch roots have no parent"""
        if self.is_branch_root or self.kind in (ComponentKind.BRANCH, ComponentKind.SUFFIX):
            return None
        if len(self.components) < 2:
            return None
        return EntryPath(self.components[1:])

    @property
    def branch(self) -> Optional[Branch]:
        for component in self.components:
            if component.kind == ComponentKind.BRANCH:
                return Branch.parse(component.name)
        return None

    def child(self, kind: ComponentKind, attribute: str, name: str) -> "EntryPath":
        return EntryPath((PathComponent(kind, attribute, name),) + self.components)

    def is_descendant_of(self, other: "EntryPath") -> bool:
        """True if ``other`` is a strict ancestor of this path"""
        if len(self.components) <= len(other.components):
            return False
        return self.components[-len(other.components):] == other.components

    def __eq__(self, other):
        if not isinstance(other, EntryPath):
            return NotImplemented
        return self.components == other.components

    def __hash__(self):
        return hash(self.components)

    def __str__(self) -> str:
        return ",".join(component.rdn for component in self.components)

    def __repr__(self) -> str:
        return f"EntryPath('{self}')"


class PathGrammar:
    """Builds, renders and parses entry paths for a directory layout"""

    def __init__(self, layout: DirectoryLayout):
        self.layout = layout
        self._suffix = tuple(
            PathComponent(ComponentKind.SUFFIX, attribute, value)
            for attribute, value in split_dn(layout.base_dn)
        )

    # ------------------------------------------------------------------
    # Fixed anchors
    # ------------------------------------------------------------------

    def suffix_path(self) -> EntryPath:
        return EntryPath(self._suffix)

    def branch_path(self, branch: Branch) -> EntryPath:
        return self.suffix_path().child(
            ComponentKind.BRANCH, self.layout.ou_attribute, branch.value
        )

    def branch_root(self, branch: Branch) -> EntryPath:
        """Groups container of a branch; top-level organizations live here"""
        return self.branch_path(branch).child(
            ComponentKind.GROUPS_CONTAINER,
            self.layout.ou_attribute,
            self.layout.groups_container_name,
        )

    def super_admin_group_path(self, branch: Branch) -> EntryPath:
        return self.branch_root(branch).child(
            ComponentKind.GROUP, self.layout.cn_attribute, self.layout.super_admin_cn
        )

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def build_org_path(self, parent_container: EntryPath, name: str) -> EntryPath:
        """Append an organization below a branch root or groups container"""
        name = self._require_name(name, "Organization")
        if parent_container.kind != ComponentKind.GROUPS_CONTAINER:
            raise InvalidPathError(
                str(parent_container),
                "organizations can only be placed in a groups container",
            )
        return parent_container.child(
            ComponentKind.ORGANIZATION, self.layout.ou_attribute, name
        )

    def build_sub_org_path(self, parent_org: EntryPath, name: str) -> EntryPath:
        return self.build_org_path(self.build_groups_container_path(parent_org), name)

    def build_groups_container_path(self, org_path: EntryPath) -> EntryPath:
        if org_path.kind != ComponentKind.ORGANIZATION:
            raise InvalidPathError(str(org_path), "not an organization")
        return org_path.child(
            ComponentKind.GROUPS_CONTAINER,
            self.layout.ou_attribute,
            self.layout.groups_container_name,
        )

    def build_group_path(self, org_path: EntryPath, group_name: str) -> EntryPath:
        group_name = self._require_name(group_name, "Group")
        return self.build_groups_container_path(org_path).child(
            ComponentKind.GROUP, self.layout.cn_attribute, group_name
        )

    def build_admin_group_path(self, container_path: EntryPath, reserved_name: str) -> EntryPath:
        """Append a reserved administrator group.

        The domain administrator group sits directly below an organization,
        the group administrator group directly below a group.
        """
        expected = {
            ComponentKind.ORGANIZATION: self.layout.domain_admin_cn,
            ComponentKind.GROUP: self.layout.group_admin_cn,
        }.get(container_path.kind)
        if expected is None or expected.lower() != reserved_name.lower():
            raise InvalidPathError(
                str(container_path),
                f"'{reserved_name}' cannot be placed below a {container_path.kind.value}",
            )
        if container_path.kind == ComponentKind.GROUP and self.is_reserved_group(container_path):
            raise InvalidPathError(str(container_path), "administrator groups do not nest")
        return container_path.child(
            ComponentKind.GROUP, self.layout.cn_attribute, expected
        )

    def domain_admin_group_path(self, org_path: EntryPath) -> EntryPath:
        return self.build_admin_group_path(org_path, self.layout.domain_admin_cn)

    def group_admin_group_path(self, group_path: EntryPath) -> EntryPath:
        return self.build_admin_group_path(group_path, self.layout.group_admin_cn)

    def member_reference(self, group_path: EntryPath, uid: str) -> EntryPath:
        """Reference stored in a group's member attribute for ``uid``"""
        uid = self._require_name(uid, "Principal uid")
        if group_path.kind != ComponentKind.GROUP:
            raise InvalidPathError(str(group_path), "members can only be added to groups")
        return group_path.child(
            ComponentKind.PRINCIPAL, self.layout.uid_attribute, uid
        )

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract_name(self, path: EntryPath) -> Optional[str]:
        """Name of an organization or group leaf; None for other leaves"""
        if path.kind in (ComponentKind.ORGANIZATION, ComponentKind.GROUP):
            return path.name
        return None

    def parent_organization(self, path: EntryPath) -> Optional[EntryPath]:
        """Enclosing organization, or None when the enclosing scope is a branch root"""
        if path.kind != ComponentKind.ORGANIZATION:
            raise InvalidPathError(str(path), "not an organization")
        container = path.parent
        if container is None or container.kind != ComponentKind.GROUPS_CONTAINER:
            raise InvalidPathError(str(path), "organization outside a groups container")
        enclosing = container.parent
        if enclosing is not None and enclosing.kind == ComponentKind.ORGANIZATION:
            return enclosing
        return None

    def iter_ancestor_organizations(self, org_path: EntryPath) -> Iterator[EntryPath]:
        """Yield the enclosing organizations of ``org_path``, nearest first"""
        current = org_path
        while True:
            parent = self.parent_organization(current)
            if parent is None or parent == current:
                return
            yield parent
            current = parent

    def organization_of(self, group_path: EntryPath) -> EntryPath:
        """Organization owning a group"""
        if group_path.kind != ComponentKind.GROUP:
            raise InvalidPathError(str(group_path), "not a group")
        container = group_path.parent
        if container is None or container.kind != ComponentKind.GROUPS_CONTAINER:
            raise InvalidPathError(str(group_path), "group is not inside a groups container")
        org_path = container.parent
        if org_path is None or org_path.kind != ComponentKind.ORGANIZATION:
            raise InvalidPathError(str(group_path), "group does not belong to an organization")
        return org_path

    def principal_of(self, member_value: str) -> Optional[str]:
        """uid carried by the leading component of a member value"""
        if not member_value or not member_value.strip():
            return None
        try:
            attribute, value = split_dn(member_value)[0]
        except InvalidPathError:
            return None
        if attribute.lower() != self.layout.uid_attribute.lower():
            return None
        return value

    def is_reserved_group(self, path: EntryPath) -> bool:
        return path.kind == ComponentKind.GROUP and self.layout.is_reserved_group_name(path.name)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, dn: str) -> EntryPath:
        """Parse a DN string, validating it against the grammar"""
        pairs = split_dn(dn)
        suffix_length = len(self._suffix)
        if len(pairs) < suffix_length:
            raise InvalidPathError(dn, "not below the directory suffix")

        tail = pairs[-suffix_length:]
        for (attribute, value), expected in zip(tail, self._suffix):
            if (attribute.lower(), value.lower()) != (expected.attribute.lower(), expected.name.lower()):
                raise InvalidPathError(dn, "not below the directory suffix")

        path = self.suffix_path()
        for attribute, value in reversed(pairs[:-suffix_length]):
            kind = self._classify(path, attribute, value, dn)
            path = path.child(kind, attribute, value)
        return path

    def try_parse(self, dn: str) -> Optional[EntryPath]:
        try:
            return self.parse(dn)
        except InvalidPathError:
            return None

    def _classify(self, parent: EntryPath, attribute: str, value: str, dn: str) -> ComponentKind:
        layout = self.layout
        attribute = attribute.lower()
        is_ou = attribute == layout.ou_attribute.lower()
        is_cn = attribute == layout.cn_attribute.lower()
        is_container_name = value.lower() == layout.groups_container_name.lower()

        if parent.kind == ComponentKind.SUFFIX:
            if is_ou and value.lower() in {b.value for b in Branch}:
                return ComponentKind.BRANCH
        elif parent.kind == ComponentKind.BRANCH:
            if is_ou and is_container_name:
                return ComponentKind.GROUPS_CONTAINER
        elif parent.kind == ComponentKind.GROUPS_CONTAINER:
            if is_ou:
                return ComponentKind.ORGANIZATION
            if is_cn:
                return ComponentKind.GROUP
        elif parent.kind == ComponentKind.ORGANIZATION:
            if is_ou and is_container_name:
                return ComponentKind.GROUPS_CONTAINER
            if is_cn and value.lower() == layout.domain_admin_cn.lower():
                return ComponentKind.GROUP
        elif parent.kind == ComponentKind.GROUP:
            if attribute == layout.uid_attribute.lower():
                return ComponentKind.PRINCIPAL
            if (
                is_cn
                and value.lower() == layout.group_admin_cn.lower()
                and not self.is_reserved_group(parent)
            ):
                return ComponentKind.GROUP

        raise InvalidPathError(
            dn, f"'{attribute}={value}' is not allowed below a {parent.kind.value}"
        )

    @staticmethod
    def _require_name(name: str, what: str) -> str:
        if name is None or not name.strip():
            raise ValidationError([f"{what} name is required"])
        return name.strip()
