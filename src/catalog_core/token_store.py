from .constants import DEFAULT_TOKEN_NAMESPACE
from .db.engine import Database
from .db.models import CredentialRow
from .models import Credential


class TokenStore:
    """Persists one access token and its expiry under a fixed namespace."""

    def __init__(self, db: Database, namespace: str = DEFAULT_TOKEN_NAMESPACE):
        self.db = db
        self.namespace = namespace

    async def load(self) -> Credential:
        async with self.db.session as session:
            row = await session.get(CredentialRow, self.namespace)
            if row is None:
                return Credential.empty()
            return Credential(token=row.access_token or "", expires_at_epoch_millis=row.token_expiry_time or 0)

    async def save(self, credential: Credential):
        # Both fields land in the same transaction
        async with self.db.session as session:
            async with session.begin():
                await session.merge(
                    CredentialRow(
                        namespace=self.namespace,
                        access_token=credential.token,
                        token_expiry_time=credential.expires_at_epoch_millis,
                    )
                )
