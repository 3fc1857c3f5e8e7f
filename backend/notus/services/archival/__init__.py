from notus.services.archival.gate import GateResult, GateStatus, ReactivationGate
from notus.services.archival.restore import (
    AccountRestorer,
    CredentialVerifier,
    ProviderIdentity,
)
from notus.services.archival.service import AccountArchiver

__all__ = [
    "AccountArchiver",
    "AccountRestorer",
    "CredentialVerifier",
    "GateResult",
    "GateStatus",
    "ProviderIdentity",
    "ReactivationGate",
]
