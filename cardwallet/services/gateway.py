"""
Persistence gateway: the single entry point for account and card data.

Every operation returns a GatewayResult instead of raising. Failures are
logged and, when a notifier is configured, shown to the user with the same
alert text the mobile client shows.
"""

import logging
from typing import List, Optional

from cardwallet.database import DocumentStore
from cardwallet.models.card import Card
from cardwallet.models.user import User
from cardwallet.services.exceptions import RecordDecodeError, RemoteServiceError
from cardwallet.services.identity_service import IdentityService, IdentitySession
from cardwallet.services.notifier import Notifier
from cardwallet.services.record_codec import (
    card_records,
    decode_cards,
    decode_user,
    encode_card,
    encode_user,
)
from cardwallet.services.results import Failure, FailureKind, GatewayResult

logger = logging.getLogger(__name__)

CARDS_FIELD = "cards"
EMPTY_FIELD_MESSAGE = "Found empty textField!"
EMPTY_CODE_MESSAGE = "Card code must not be empty"


def _remote_failure(prefix: str, e: RemoteServiceError) -> Failure:
    kind = FailureKind.TRANSIENT_REMOTE if e.transient else FailureKind.PERMANENT_REMOTE
    return Failure(kind=kind, message=f"{prefix}: {e.message}")


class PersistenceGateway:
    """
    Maps User/Card values to store records and forwards auth calls.
    Stateless apart from its collaborators; one instance serves all requests.
    """

    def __init__(self, identity: IdentityService, store: DocumentStore, notifier: Optional[Notifier] = None):
        self.identity = identity
        self.store = store
        self.notifier = notifier

    async def _failed(self, failure: Failure) -> GatewayResult:
        logger.warning("%s (%s)", failure.message, failure.kind.value)
        if self.notifier is not None and failure.notifiable:
            await self.notifier.notify(failure.title, failure.message)
        return GatewayResult.fail(failure)

    # ------------------ Accounts ------------------ #

    async def create_account(self, user: User, password: str) -> GatewayResult[str]:
        """
        Create the identity account, write the user record keyed by the new
        account id, then make sure the verification e-mail goes out.
        Returns the account id.
        """
        if any(not card.code for card in user.cards):
            return await self._failed(Failure(kind=FailureKind.VALIDATION, message=EMPTY_CODE_MESSAGE))
        prefix = "Error creating user with authentication"
        try:
            account = await self.identity.create_account(user.email, password)
        except RemoteServiceError as e:
            return await self._failed(_remote_failure(prefix, e))
        try:
            await self.store.set(account.id, encode_user(user))
        except RemoteServiceError as e:
            # No rollback: the identity account stays without a user record
            logger.error("Identity account %s created but its user record was not written", account.id)
            return await self._failed(_remote_failure(prefix, e))
        try:
            await self.identity.send_verification(account)
        except RemoteServiceError as e:
            # The account is usable; the user can ask for the mail again later
            logger.warning("Verification e-mail for %s not sent: %s", account.id, e.message)
            if self.notifier is not None:
                await self.notifier.notify("Error", f"Error sending verification e-mail: {e.message}")
        logger.info("User created successfully with authentication: %s", account.id)
        return GatewayResult.success(account.id)

    async def sign_in(self, email: Optional[str], password: Optional[str]) -> GatewayResult[IdentitySession]:
        if not email or not password:
            return await self._failed(Failure(kind=FailureKind.VALIDATION, message=EMPTY_FIELD_MESSAGE))
        try:
            session = await self.identity.sign_in(email, password)
        except RemoteServiceError as e:
            return await self._failed(_remote_failure("Error signing in user", e))
        logger.info("User signed in successfully with email: %s", session.email)
        return GatewayResult.success(session)

    async def fetch_user(self, user_id: str) -> GatewayResult[User]:
        """Value is None when no record exists for user_id."""
        try:
            record = await self.store.get(user_id)
        except RemoteServiceError as e:
            return await self._failed(_remote_failure("Error fetching user", e))
        if record is None:
            return GatewayResult.success(None)
        try:
            return GatewayResult.success(decode_user(record))
        except RecordDecodeError as e:
            return await self._failed(Failure(kind=FailureKind.DECODE, message=f"Error fetching user: {e}"))

    async def delete_account(self, user_id: str) -> GatewayResult[None]:
        """Deletes the user record only; the identity account is left in place."""
        try:
            await self.store.delete(user_id)
        except RemoteServiceError as e:
            return await self._failed(_remote_failure("Error deleting user", e))
        logger.info("User deleted successfully: %s", user_id)
        return GatewayResult.success()

    # ------------------ Cards ------------------ #

    async def add_card(self, user_id: str, card: Card) -> GatewayResult[None]:
        """Append the card unless an identical entry is already stored."""
        if not card.code:
            return await self._failed(Failure(kind=FailureKind.VALIDATION, message=EMPTY_CODE_MESSAGE))
        try:
            await self.store.array_union(user_id, CARDS_FIELD, [encode_card(card)])
        except RemoteServiceError as e:
            return await self._failed(_remote_failure("Error adding card to user", e))
        logger.info("Card added to user %s successfully.", user_id)
        return GatewayResult.success()

    async def remove_card(self, user_id: str, card: Card) -> GatewayResult[None]:
        """Remove every stored entry equal to card. Removing an absent card is a no-op."""
        try:
            await self.store.array_remove(user_id, CARDS_FIELD, [encode_card(card)])
        except RemoteServiceError as e:
            return await self._failed(_remote_failure("Error removing card from user", e))
        logger.info("Card removed from user %s successfully.", user_id)
        return GatewayResult.success()

    async def fetch_cards(self, user_id: str) -> GatewayResult[List[Card]]:
        """Value is None when no record exists; malformed card entries are skipped."""
        prefix = "Error fetching cards for user"
        try:
            record = await self.store.get(user_id)
        except RemoteServiceError as e:
            return await self._failed(_remote_failure(prefix, e))
        if record is None:
            return GatewayResult.success(None)
        try:
            records = card_records(record)
        except RecordDecodeError as e:
            return await self._failed(Failure(kind=FailureKind.DECODE, message=f"{prefix}: {e}"))
        return GatewayResult.success(decode_cards(records))
