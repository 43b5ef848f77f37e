from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from commission_dashboard.core.errors import AuthError, UnknownError, ValidationError
from commission_dashboard.schemas.auth import PublicUser, StoredUser

logger = logging.getLogger(__name__)


class CredentialStore:
    """
    Plaintext user list in a JSON file, treated as a trusted local resource.
    The file is read on every attempt so edits apply without a restart.

    Rows are matched on the raw username/password; only the matching row is
    validated, so a malformed neighbour never blocks other users.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load_rows(self) -> List[Dict[str, Any]]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.exception("credential_store.unreadable", extra={"path": str(self.path)})
            raise UnknownError() from e

        if not isinstance(raw, list):
            logger.error("credential_store.not_a_list", extra={"path": str(self.path)})
            raise UnknownError()

        return [row for row in raw if isinstance(row, dict)]

    def authenticate(self, username: Optional[str], password: Optional[str]) -> PublicUser:
        if not username or not password:
            raise ValidationError("Username and password are required")

        for row in self.load_rows():
            if row.get("username") != username or row.get("password") != password:
                continue
            try:
                user = StoredUser.model_validate(row)
            except PydanticValidationError as e:
                logger.exception(
                    "credential_store.invalid_row",
                    extra={"path": str(self.path), "username": username},
                )
                raise UnknownError() from e
            logger.info("login.succeeded", extra={"username": username, "role": user.role})
            return user.to_public()

        logger.info("login.rejected", extra={"username": username})
        raise AuthError()
