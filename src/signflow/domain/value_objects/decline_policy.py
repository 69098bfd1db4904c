"""How a decline affects a parallel (non-sequential) document."""

from enum import StrEnum


class DeclinePolicy(StrEnum):
    """Decline policy for non-sequential documents.

    ``ALL_OR_DECLINED``: the document is declined once every signer has
    either completed or declined and at least one declined.
    ``ANY_DECLINES``: the first decline declines the document.

    Sequential documents are always declined immediately.
    """

    ALL_OR_DECLINED = "all_or_declined"
    ANY_DECLINES = "any_declines"
