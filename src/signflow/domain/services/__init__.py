"""Pure workflow services operating on a document aggregate."""

from signflow.domain.services.field_registry import FieldRegistry
from signflow.domain.services.lifecycle import DocumentLifecycle
from signflow.domain.services.signer_roster import SignerRoster

__all__ = ["DocumentLifecycle", "FieldRegistry", "SignerRoster"]
