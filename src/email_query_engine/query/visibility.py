"""Adapter over the external visibility resolver."""

from __future__ import annotations

import structlog

from email_query_engine.exceptions import CollaboratorError, VisibilityResolutionError
from email_query_engine.store.protocols import VisibleMailboxes

logger = structlog.get_logger()


class VisibilityAdapter:
    """Resolves the readable mailbox set of a principal.

    Rights are never computed here; the resolver's answer is taken as is.
    """

    def __init__(self, resolver: VisibleMailboxes) -> None:
        self._resolver = resolver

    async def readable_mailboxes(self, principal: str) -> frozenset[str]:
        """Return the mailbox ids the principal may read.

        Raises:
            VisibilityResolutionError: If the resolver fails.
        """
        try:
            mailboxes = await self._resolver.visible_mailboxes(principal)
        except CollaboratorError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("visibility_resolution_failed", principal=principal, error=str(exc))
            raise VisibilityResolutionError(
                f"Could not resolve visible mailboxes for '{principal}': {exc}"
            ) from exc

        visible = frozenset(str(m) for m in mailboxes)
        logger.debug("visibility_resolved", principal=principal, mailbox_count=len(visible))
        return visible
