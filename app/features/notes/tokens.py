"""Owner capability tokens scoped to a single note"""

import logging
from typing import Optional

from jose import JWTError, jwt

from app.config import NOTE_TOKEN_SECRET

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"
OWNER_SCOPE = "note:owner"


class OwnerTokens:
    """
    Issues and checks HS256 tokens that prove ownership of one note.

    Tokens are bound to the note id, so they survive short code changes.
    Without a secret the feature is off: nothing is issued and nothing
    verifies.
    """

    def __init__(self, secret: Optional[str] = NOTE_TOKEN_SECRET):
        self.secret = secret

    @property
    def enabled(self) -> bool:
        return bool(self.secret)

    def issue(self, note_id: str) -> Optional[str]:
        if not self.enabled:
            return None
        return jwt.encode({"sub": str(note_id), "scope": OWNER_SCOPE}, self.secret, algorithm=TOKEN_ALGORITHM)

    def verify(self, token: Optional[str], note_id: str) -> bool:
        if not token or not self.enabled:
            return False

        try:
            payload = jwt.decode(token, self.secret, algorithms=[TOKEN_ALGORITHM])
        except JWTError as e:
            logger.warning(f"Rejected owner token: {e}")
            return False

        return payload.get("scope") == OWNER_SCOPE and payload.get("sub") == str(note_id)
