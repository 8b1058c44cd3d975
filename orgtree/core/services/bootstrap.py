"""Creates the fixed skeleton of a branch"""

from typing import List, Optional

from orgtree.core.directory.layout import Branch
from orgtree.core.directory.paths import PathGrammar
from orgtree.core.errors import DuplicateValueError
from orgtree.core.services.entries import (
    add_member_reference,
    create_missing,
    group_attributes,
    organizational_unit_attributes,
)
from orgtree.infrastructure.directory.store import DirectoryStore
from orgtree.infrastructure.logging import get_logger

logger = get_logger(__name__)


class DirectoryBootstrapper:
    """Ensures a branch, its groups container and its super-administrator group exist"""

    def __init__(self, store: DirectoryStore, grammar: PathGrammar):
        self.store = store
        self.grammar = grammar
        self.layout = grammar.layout

    def ensure_branch(self, branch: Branch, super_admin_uid: Optional[str] = None) -> List[str]:
        """Create the missing skeleton entries of ``branch``.

        When ``super_admin_uid`` is given it is added to the branch's
        super-administrator group unless it is already a member. Returns the
        DNs of the entries that were created.
        """
        branch_path = self.grammar.branch_path(branch)
        root = self.grammar.branch_root(branch)
        super_admins = self.grammar.super_admin_group_path(branch)

        created = create_missing(self.store, [
            (branch_path, organizational_unit_attributes(self.layout, branch_path)),
            (root, organizational_unit_attributes(self.layout, root)),
            (super_admins, group_attributes(self.layout, super_admins)),
        ])

        if super_admin_uid:
            try:
                add_member_reference(self.store, self.grammar, super_admins, super_admin_uid)
            except DuplicateValueError:
                logger.debug("super_admin_already_present", branch=branch.value, admin_uid=super_admin_uid)

        logger.info(
            "branch_bootstrapped",
            branch=branch.value,
            created=created,
            super_admin_uid=super_admin_uid,
        )
        return created
